"""Log destinations, opened by URL and looked up by scheme."""

from __future__ import annotations

import os
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol
from urllib.parse import SplitResult, unquote, urlsplit

__all__ = [
    "SCHEME_FILE",
    "WriteSyncer",
    "Sink",
    "SinkFactory",
    "SinkNotFoundError",
    "NopCloserSink",
    "SinkRegistry",
    "DEFAULT_SINK_REGISTRY",
    "register_sink",
    "normalize_scheme",
]

SCHEME_FILE = "file"


class WriteSyncer(Protocol):
    """Something bytes can be written to and flushed."""

    def write(self, data: bytes) -> int | None: ...

    def sync(self) -> None: ...


class Sink(WriteSyncer, Protocol):
    """A write syncer that can also be closed."""

    def close(self) -> None: ...


SinkFactory = Callable[[SplitResult], Sink]


class SinkNotFoundError(LookupError):
    """No sink factory is registered for a URL's scheme."""

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f'no sink found for scheme "{scheme}"')


@dataclass
class NopCloserSink:
    """A sink around a write syncer whose close leaves the writer open."""

    ws: WriteSyncer
    closed: bool = field(default=False, init=False, compare=False)

    def write(self, data: bytes) -> int | None:
        return self.ws.write(data)

    def sync(self) -> None:
        self.ws.sync()

    def close(self) -> None:
        """Mark the sink closed without closing the wrapped writer."""
        self.closed = True


_STD_STREAMS: dict[str, Callable[[], object]] = {
    "stdout": lambda: sys.stdout,
    "stderr": lambda: sys.stderr,
}


class _StdStream:
    """Writes to the current sys.stdout or sys.stderr."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._get_stream = _STD_STREAMS[name]

    def write(self, data: bytes) -> int:
        stream = self._get_stream()
        try:
            binary = stream.buffer
        except AttributeError:
            stream.write(bytes(data).decode("utf-8", errors="replace"))
            stream.flush()
            return len(data)
        stream.flush()
        n = binary.write(data)
        binary.flush()
        return len(data) if n is None else n

    def sync(self) -> None:
        self._get_stream().flush()


class _FileSink:
    """A sink over an open binary file."""

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    def write(self, data: bytes) -> int:
        n = self._file.write(data)
        return len(data) if n is None else n

    def sync(self) -> None:
        self._file.flush()
        os.fsync(self._file.fileno())

    def close(self) -> None:
        self._file.close()


def _open_append(path: str) -> BinaryIO:
    return open(path, "ab", buffering=0)


def _parse_url(raw_url: str) -> SplitResult:
    try:
        if raw_url.startswith(":"):
            raise ValueError("missing protocol scheme")
        u = urlsplit(raw_url)
        u.port  # validates the port
    except ValueError as err:
        raise ValueError(f'can\'t parse "{raw_url}" as a URL: {err}') from err
    return u


def normalize_scheme(s: str) -> str:
    """Lower-case a URL scheme and check it is valid; raise ValueError if not."""
    s = s.lower()
    if not s or not "a" <= s[0] <= "z":
        raise ValueError("must start with a letter")
    for c in s[1:]:
        if "a" <= c <= "z" or "0" <= c <= "9" or c in ".+-":
            continue
        raise ValueError(f"may not contain {c!r}")
    return s


class SinkRegistry:
    """Maps URL schemes to factories that open sinks."""

    def __init__(self, open_file: Callable[[str], BinaryIO] | None = None) -> None:
        self._lock = threading.Lock()
        self._factories: dict[str, SinkFactory] = {}
        self.open_file = open_file or _open_append
        self.register_sink(SCHEME_FILE, self._new_file_sink_from_url)

    def register_sink(self, scheme: str, factory: SinkFactory) -> None:
        """Register ``factory`` for URLs with ``scheme``.

        Raises ValueError for an empty or invalid scheme, or one that already
        has a factory.
        """
        if not scheme:
            raise ValueError("can't register a sink factory for empty string")
        try:
            normalized = normalize_scheme(scheme)
        except ValueError as err:
            raise ValueError(f'"{scheme}" is not a valid scheme: {err}') from err
        with self._lock:
            if normalized in self._factories:
                raise ValueError(
                    f'sink factory already registered for scheme "{normalized}"'
                )
            self._factories[normalized] = factory

    def new_sink(self, raw_url: str) -> Sink:
        """Open the sink that ``raw_url`` names.

        Absolute paths and URLs without a scheme are opened as files.
        """
        if os.path.isabs(raw_url):
            return self._new_file_sink_from_path(raw_url)
        u = _parse_url(raw_url)
        if not u.scheme:
            u = u._replace(scheme=SCHEME_FILE)
        with self._lock:
            factory = self._factories.get(u.scheme)
        if factory is None:
            raise SinkNotFoundError(u.scheme)
        return factory(u)

    def _new_file_sink_from_url(self, u: SplitResult) -> Sink:
        shown = u.geturl()
        if "@" in u.netloc:
            raise ValueError(f"user and password not allowed with file URLs: got {shown}")
        if u.fragment:
            raise ValueError(f"fragments not allowed with file URLs: got {shown}")
        if u.query:
            raise ValueError(f"query parameters not allowed with file URLs: got {shown}")
        if u.port is not None:
            raise ValueError(f"ports not allowed with file URLs: got {shown}")
        hostname = u.hostname
        if hostname and hostname != "localhost":
            raise ValueError(
                f"file URLs must leave host empty or use localhost: got {shown}"
            )
        return self._new_file_sink_from_path(unquote(u.path))

    def _new_file_sink_from_path(self, path: str) -> Sink:
        if path in _STD_STREAMS:
            return NopCloserSink(_StdStream(path))
        return _FileSink(self.open_file(path))


DEFAULT_SINK_REGISTRY = SinkRegistry()


def register_sink(scheme: str, factory: SinkFactory) -> None:
    """Register ``factory`` for ``scheme`` in the default registry."""
    DEFAULT_SINK_REGISTRY.register_sink(scheme, factory)