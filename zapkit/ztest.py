"""Low-level helpers for testing log output: a mock clock, timeouts and writers."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from zapkit.clock import Ticker

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_SETTLE_TIMEOUT = 1.0

_log = logging.getLogger(__name__)


def _to_nanos(interval: float | timedelta) -> int:
    if isinstance(interval, timedelta):
        return (
            (interval.days * 86400 + interval.seconds) * 1_000_000
            + interval.microseconds
        ) * 1000
    return round(float(interval) * 1e9)


class MockClock:
    """A clock whose time moves only when told to."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._now_ns = 0
        self._tickers: list[tuple[Ticker, int, list[int]]] = []

    def now(self) -> datetime:
        """Return the current mock time."""
        with self._lock:
            return _EPOCH + timedelta(microseconds=self._now_ns // 1000)

    def new_ticker(self, interval: float | timedelta) -> Ticker:
        """Return a ticker driven by this clock."""
        step = _to_nanos(interval)
        ticker = Ticker(interval, start=False)
        with self._lock:
            self._tickers.append((ticker, step, [self._now_ns + step]))
        return ticker

    def add(self, delta: float | timedelta) -> None:
        """Advance time by ``delta``, firing due ticks in order."""
        with self._lock:
            target = self._now_ns + _to_nanos(delta)
        while True:
            with self._lock:
                self._tickers = [e for e in self._tickers if not e[0].stopped]
                due = [e for e in self._tickers if e[2][0] <= target]
                if not due:
                    self._now_ns = target
                    break
                ticker, step, nxt = min(due, key=lambda e: e[2][0])
                self._now_ns = nxt[0]
                nxt[0] += step
                when = _EPOCH + timedelta(microseconds=self._now_ns // 1000)
            ticker._tick(when)
            ticker._settle(_SETTLE_TIMEOUT)


@dataclass
class _TimeoutSettings:
    scale: float = 1.0


_settings = _TimeoutSettings()

_T = TypeVar("_T", float, timedelta)


def timeout(base: _T) -> _T:
    """Scale ``base`` by the configured timeout factor."""
    return base * _settings.scale


def sleep(base: float | timedelta) -> None:
    """Sleep for the scaled duration."""
    scaled = timeout(base)
    if isinstance(scaled, timedelta):
        scaled = scaled.total_seconds()
    time.sleep(scaled)


def initialize(factor: str) -> Callable[[], None]:
    """Set the timeout scale from text; return a function that undoes it."""
    value = float(factor)
    original = _settings.scale
    _settings.scale = value

    def undo() -> None:
        _settings.scale = original

    return undo


_env_scale = os.environ.get("TEST_TIMEOUT_SCALE", "")
if _env_scale:
    initialize(_env_scale)
    _log.info("Scaling timeouts by %sx.", _settings.scale)


class Syncer:
    """A spy for the sync half of a write syncer."""

    def __init__(self) -> None:
        self._err: BaseException | None = None
        self._called = False

    def set_error(self, err: BaseException | None) -> None:
        """Set the error that sync raises."""
        self._err = err

    def sync(self) -> None:
        """Record the call, then raise the configured error, if any."""
        self._called = True
        if self._err is not None:
            raise self._err

    def called(self) -> bool:
        """Report whether sync was called."""
        return self._called


class Discarder(Syncer):
    """A write syncer that drops everything written."""

    def write(self, data: bytes) -> int:
        return len(data)


class FailWriter(Syncer):
    """A write syncer whose writes always fail."""

    def write(self, data: bytes) -> int:
        raise OSError("failed")


class ShortWriter(Syncer):
    """A write syncer that never reports writing the last byte."""

    def write(self, data: bytes) -> int:
        return len(data) - 1


class Buffer(Syncer):
    """A write syncer that keeps everything written in memory."""

    def __init__(self) -> None:
        super().__init__()
        self._data = bytearray()

    def write(self, data: bytes) -> int:
        self._data.extend(data)
        return len(data)

    def text(self) -> str:
        """Return the buffer contents as text."""
        return self._data.decode("utf-8", errors="replace")

    def lines(self) -> list[str]:
        """Return the contents split on newlines, without the final piece."""
        return self.text().split("\n")[:-1]

    def stripped(self) -> str:
        """Return the contents with trailing newlines removed."""
        return self.text().rstrip("\n")