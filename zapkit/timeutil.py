"""Time conversion helpers."""

from __future__ import annotations

from datetime import datetime, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def time_to_millis(t: datetime) -> int:
    """Return milliseconds since the Unix epoch, truncated toward zero.

    Naive datetimes are taken to be in UTC.
    """
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    delta = t - _EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis