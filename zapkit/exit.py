"""Process termination that tests can intercept."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field

_exit: Callable[[int], None] = sys.exit


def exit_with(code: int) -> None:
    """Terminate with ``code``, or record the call if exit is stubbed."""
    _exit(code)


@dataclass
class StubbedExit:
    """A testing fake for process exit."""

    exited: bool = False
    code: int = 0
    _prev: Callable[[int], None] = field(default=sys.exit, repr=False)

    def _record(self, code: int) -> None:
        self.exited = True
        self.code = code

    def unstub(self) -> None:
        """Restore the previous exit function."""
        global _exit
        _exit = self._prev

    def __enter__(self) -> StubbedExit:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unstub()


def stub() -> StubbedExit:
    """Replace process exit with a recording fake."""
    global _exit
    s = StubbedExit(_prev=_exit)
    _exit = s._record
    return s


def with_stub(f: Callable[[], object]) -> StubbedExit:
    """Run ``f`` with exit stubbed and return the stub used."""
    s = stub()
    try:
        f()
    finally:
        s.unstub()
    return s