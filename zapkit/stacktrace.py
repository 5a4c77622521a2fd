"""Capturing and formatting call stacks."""

from __future__ import annotations

import inspect
import io
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import FrameType

__all__ = [
    "StackFrame",
    "Stacktrace",
    "StackFormatter",
    "capture_stacktrace",
    "take_stacktrace",
]


@dataclass(frozen=True)
class StackFrame:
    """One frame of a call stack."""

    function: str
    file: str
    line: int


def _frame_from(frame: FrameType) -> StackFrame:
    code = frame.f_code
    module = inspect.getmodule(frame)
    module_name = module.__name__ if module is not None else ""
    qualname = code.co_qualname
    function = f"{module_name}.{qualname}" if module_name else qualname
    return StackFrame(function, code.co_filename, frame.f_lineno or 0)


class Stacktrace:
    """A captured call stack, read one frame at a time, innermost first."""

    def __init__(self, frames: Iterable[StackFrame]) -> None:
        self._frames = tuple(frames)
        self._pos = 0

    def count(self) -> int:
        """Return the total number of frames; reading frames does not change it."""
        return len(self._frames)

    def next(self) -> tuple[StackFrame | None, bool]:
        """Return the next frame and whether more frames follow it.

        Once every frame has been read, returns ``(None, False)``.
        """
        if self._pos >= len(self._frames):
            return None, False
        frame = self._frames[self._pos]
        self._pos += 1
        return frame, self._pos < len(self._frames)

    def __iter__(self) -> Iterator[StackFrame]:
        while True:
            frame, _ = self.next()
            if frame is None:
                return
            yield frame


def capture_stacktrace(skip: int, full: bool) -> Stacktrace:
    """Capture the call stack, skipping ``skip`` frames.

    ``skip=0`` starts at the caller of this function. With ``full`` false
    only that first frame is captured. Skipping past the top of the stack
    gives an empty stacktrace.
    """
    try:
        frame: FrameType | None = sys._getframe(skip + 1)
    except ValueError:
        return Stacktrace(())
    frames: list[StackFrame] = []
    while frame is not None:
        frames.append(_frame_from(frame))
        if not full:
            break
        frame = frame.f_back
    return Stacktrace(frames)


class StackFormatter:
    """Formats frames as ``function`` lines each followed by a tabbed ``file:line``."""

    def __init__(self) -> None:
        self._out = io.StringIO()
        self._non_empty = False

    def format_frame(self, frame: StackFrame) -> None:
        """Append one frame."""
        if self._non_empty:
            self._out.write("\n")
        self._non_empty = True
        self._out.write(f"{frame.function}\n\t{frame.file}:{frame.line}")

    def format_stack(self, stack: Stacktrace) -> None:
        """Append every remaining frame except the outermost one."""
        while True:
            frame, more = stack.next()
            if not more or frame is None:
                break
            self.format_frame(frame)

    def getvalue(self) -> str:
        """Return everything formatted so far."""
        return self._out.getvalue()


def take_stacktrace(skip: int = 0) -> str:
    """Return the formatted stack of the caller, skipping ``skip`` frames."""
    stack = capture_stacktrace(skip + 1, True)
    formatter = StackFormatter()
    formatter.format_stack(stack)
    return formatter.getvalue()