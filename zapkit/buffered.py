"""A write syncer that buffers in memory and flushes by size or interval."""

from __future__ import annotations

import threading
from datetime import timedelta

from zapkit.clock import DEFAULT_CLOCK, Clock, Ticker
from zapkit.sink import WriteSyncer

__all__ = ["BufferedWriteSyncer"]

_DEFAULT_BUFFER_SIZE = 256 * 1024
_DEFAULT_FLUSH_INTERVAL = 30.0


def _raise_errors(errors: list[Exception]) -> None:
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup("sync failed", errors)


class BufferedWriteSyncer:
    """Buffers writes and flushes them to ``ws`` when full or periodically.

    Defaults: 256 kB of buffer and a flush every 30 seconds. Safe for
    concurrent use. Call ``stop`` (or use it as a context manager) when done.
    """

    def __init__(
        self,
        ws: WriteSyncer,
        size: int = 0,
        flush_interval: float | timedelta = 0.0,
        clock: Clock | None = None,
    ) -> None:
        self.ws = ws
        self.size = size
        self.flush_interval = flush_interval
        self.clock = clock
        self._lock = threading.Lock()
        self._initialized = False
        self._stopped = False
        self._buf = bytearray()
        self._capacity = 0
        self._err: Exception | None = None
        self._ticker: Ticker | None = None
        self._thread: threading.Thread | None = None

    def _initialize(self) -> None:
        self._capacity = self.size or _DEFAULT_BUFFER_SIZE
        interval = self.flush_interval or _DEFAULT_FLUSH_INTERVAL
        if self.clock is None:
            self.clock = DEFAULT_CLOCK
        self._ticker = self.clock.new_ticker(interval)
        self._initialized = True
        self._thread = threading.Thread(
            target=self._flush_loop, args=(self._ticker,), daemon=True
        )
        self._thread.start()

    def _flush_loop(self, ticker: Ticker) -> None:
        while ticker.get() is not None:
            try:
                self.sync()
            except Exception:
                # Errors stick to the buffer and surface from sync or stop.
                pass

    def _available(self) -> int:
        return self._capacity - len(self._buf)

    def _flush(self) -> Exception | None:
        if self._err is not None:
            return self._err
        if not self._buf:
            return None
        pending = len(self._buf)
        try:
            n = self.ws.write(bytes(self._buf))
            n = pending if n is None else n
            err = None if n >= pending else OSError("short write")
        except Exception as exc:
            n, err = 0, exc
        if err is not None:
            if 0 < n < pending:
                del self._buf[:n]
            self._err = err
            return err
        self._buf.clear()
        return None

    def _write_buffered(self, data: bytes) -> int:
        view = memoryview(data)
        total = 0
        while len(view) > self._available() and self._err is None:
            if not self._buf:
                try:
                    n = self.ws.write(bytes(view))
                    n = len(view) if n is None else n
                    if n <= 0:
                        self._err = OSError("short write")
                except Exception as exc:
                    self._err = exc
                    n = 0
            else:
                n = self._available()
                self._buf.extend(view[:n])
                self._flush()
            total += n
            view = view[n:]
        if self._err is not None:
            raise self._err
        self._buf.extend(view)
        return total + len(view)

    def write(self, data: bytes) -> int:
        """Buffer ``data``, flushing first if it would not fit whole."""
        with self._lock:
            if not self._initialized:
                self._initialize()
            if len(data) > self._available() and self._buf:
                err = self._flush()
                if err is not None:
                    raise err
            return self._write_buffered(data)

    def sync(self) -> None:
        """Flush buffered data and sync the wrapped writer."""
        errors: list[Exception] = []
        with self._lock:
            if self._initialized:
                err = self._flush()
                if err is not None:
                    errors.append(err)
            try:
                self.ws.sync()
            except Exception as exc:
                errors.append(exc)
        _raise_errors(errors)

    def stop(self) -> None:
        """Stop periodic flushing and flush what remains.

        Stopping again after a successful start does nothing.
        """
        thread: threading.Thread | None = None
        with self._lock:
            if self._initialized:
                if self._stopped:
                    return
                self._stopped = True
                if self._ticker is not None:
                    self._ticker.stop()
                thread = self._thread
        if thread is not None:
            thread.join()
        self.sync()

    def __enter__(self) -> BufferedWriteSyncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()