from datetime import datetime, timedelta

import pytest

from zapkit.clock import DEFAULT_CLOCK, SystemClock, Ticker


def test_system_clock_new_ticker_ticks_repeatedly():
    ticker = DEFAULT_CLOCK.new_ticker(0.001)
    try:
        ticks = [ticker.get(timeout=2.0) for _ in range(3)]
    finally:
        ticker.stop()
    assert len(ticks) == 3
    assert all(isinstance(t, datetime) for t in ticks)
    assert ticks[0] <= ticks[1] <= ticks[2]


def test_system_clock_now_is_current():
    before = datetime.now().astimezone()
    now = SystemClock().now()
    after = datetime.now().astimezone()
    assert before <= now <= after


def test_ticker_accepts_timedelta():
    ticker = Ticker(timedelta(milliseconds=2))
    try:
        assert ticker.interval == pytest.approx(0.002)
        assert ticker.get(timeout=2.0) is not None
    finally:
        ticker.stop()


@pytest.mark.parametrize("interval", [0, -1.0, timedelta(0)])
def test_ticker_rejects_non_positive_interval(interval):
    with pytest.raises(ValueError):
        Ticker(interval)


def test_ticker_get_times_out():
    ticker = Ticker(60.0)
    try:
        with pytest.raises(TimeoutError):
            ticker.get(timeout=0.01)
    finally:
        ticker.stop()


def test_stopped_ticker_returns_none():
    ticker = Ticker(60.0)
    ticker.stop()
    assert ticker.stopped is True
    assert ticker.get(timeout=1.0) is None