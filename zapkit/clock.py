"""Sources of time for log entries and periodic tickers."""

from __future__ import annotations

import threading
from collections import deque
from datetime import datetime, timedelta
from typing import Protocol

__all__ = ["Clock", "Ticker", "SystemClock", "DEFAULT_CLOCK", "to_seconds"]


def to_seconds(interval: float | timedelta) -> float:
    """Return an interval given as seconds or a timedelta as float seconds."""
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class Ticker:
    """Delivers ticks at a fixed interval.

    Ticks are buffered up to ``capacity``; further ticks are dropped until a
    consumer takes one. A ticker created with ``start=False`` only ticks when
    driven from outside, which is how a mock clock controls it.
    """

    def __init__(
        self,
        interval: float | timedelta,
        *,
        start: bool = True,
        capacity: int = 1,
    ) -> None:
        seconds = to_seconds(interval)
        if seconds <= 0:
            raise ValueError("non-positive interval for Ticker")
        self.interval = seconds
        self._capacity = capacity
        self._items: deque[datetime] = deque()
        self._cond = threading.Condition()
        self._waiters = 0
        self._seen_consumer = False
        self._stopped = False
        self._halt = threading.Event()
        self._thread: threading.Thread | None = None
        if start:
            self._thread = threading.Thread(target=self._run, daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while not self._halt.wait(self.interval):
            self._tick(datetime.now().astimezone())

    def _tick(self, when: datetime) -> None:
        with self._cond:
            if self._stopped:
                return
            if self._capacity and len(self._items) >= self._capacity:
                return
            self._items.append(when)
            self._cond.notify_all()

    def _settle(self, timeout: float) -> bool:
        """Wait until pending ticks are taken and a consumer waits again."""
        with self._cond:
            if not self._seen_consumer:
                timeout = min(timeout, 0.05)
            return self._cond.wait_for(
                lambda: self._stopped or (not self._items and self._waiters > 0),
                timeout,
            )

    def get(self, timeout: float | None = None) -> datetime | None:
        """Return the next tick's time.

        Returns None once the ticker is stopped and no ticks are pending.
        Raises TimeoutError if no tick arrives within ``timeout`` seconds.
        """
        with self._cond:
            self._waiters += 1
            self._seen_consumer = True
            self._cond.notify_all()
            try:
                ready = self._cond.wait_for(
                    lambda: self._items or self._stopped, timeout
                )
                if self._items:
                    return self._items.popleft()
                if self._stopped:
                    return None
                if not ready:
                    raise TimeoutError("no tick within timeout")
                return None
            finally:
                self._waiters -= 1

    def stop(self) -> None:
        """Stop the ticker; no more ticks are produced."""
        self._halt.set()
        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    @property
    def stopped(self) -> bool:
        return self._stopped


class Clock(Protocol):
    """A source of time for logged entries."""

    def now(self) -> datetime: ...

    def new_ticker(self, interval: float | timedelta) -> Ticker: ...


class SystemClock:
    """A clock backed by the system time."""

    def now(self) -> datetime:
        """Return the current local time, timezone-aware."""
        return datetime.now().astimezone()

    def new_ticker(self, interval: float | timedelta) -> Ticker:
        """Return a ticker that ticks every ``interval``."""
        return Ticker(interval)


DEFAULT_CLOCK = SystemClock()