"""Opening log destinations and combining write syncers."""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from zapkit.sink import DEFAULT_SINK_REGISTRY, Sink, WriteSyncer

__all__ = [
    "DiscardWriteSyncer",
    "CombinedWriteSyncer",
    "open_paths",
    "combine_write_syncers",
]


def _raise_errors(errors: list[Exception], message: str) -> None:
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup(message, errors)


@dataclass
class DiscardWriteSyncer:
    """A write syncer that drops everything, counting what it dropped."""

    discarded: int = field(default=0, compare=False)
    syncs: int = field(default=0, compare=False)

    def write(self, data: bytes) -> int:
        self.discarded += len(data)
        return len(data)

    def sync(self) -> None:
        """Nothing is buffered; only count the call."""
        self.syncs += 1


class CombinedWriteSyncer:
    """Writes to several write syncers under one lock."""

    def __init__(self, *writers: WriteSyncer) -> None:
        self._writers = tuple(writers)
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        """Write to every writer; raise if any of them fails."""
        errors: list[Exception] = []
        written = len(data)
        with self._lock:
            for w in self._writers:
                try:
                    n = w.write(data)
                except Exception as err:
                    errors.append(err)
                    continue
                if n is not None:
                    written = min(written, n)
        _raise_errors(errors, "write failed")
        return written

    def sync(self) -> None:
        """Sync every writer; raise if any of them fails."""
        errors: list[Exception] = []
        with self._lock:
            for w in self._writers:
                try:
                    w.sync()
                except Exception as err:
                    errors.append(err)
        _raise_errors(errors, "sync failed")


def combine_write_syncers(*args: WriteSyncer) -> WriteSyncer:
    """Combine write syncers into one locked writer, or a discarder if none."""
    if not args:
        return DiscardWriteSyncer()
    return CombinedWriteSyncer(*args)


def open_paths(*args: str) -> tuple[WriteSyncer, Callable[[], None]]:
    """Open each path or URL and combine them into one writer.

    Returns the writer and a function that closes everything opened. If any
    path fails, whatever was opened is closed and an ExceptionGroup holding
    one error per failed path is raised.
    """
    sinks: list[Sink] = []
    errors: list[Exception] = []
    messages: list[str] = []
    for path in args:
        try:
            sink = DEFAULT_SINK_REGISTRY.new_sink(path)
        except Exception as err:
            err.add_note(f'open sink "{path}"')
            errors.append(err)
            messages.append(f'open sink "{path}": {err}')
            continue
        sinks.append(sink)

    def close() -> None:
        for sink in sinks:
            with contextlib.suppress(Exception):
                sink.close()

    if errors:
        close()
        raise ExceptionGroup("; ".join(messages), errors)
    return combine_write_syncers(*sinks), close