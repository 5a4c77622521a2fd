from datetime import datetime, timedelta, timezone

import pytest

from zapkit.timeutil import time_to_millis

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "moment, stamp",
    [
        (EPOCH, 0),
        (EPOCH + timedelta(seconds=1), 1000),
        (EPOCH + timedelta(seconds=1, milliseconds=500), 1500),
    ],
)
def test_time_to_millis(moment, stamp):
    assert time_to_millis(moment) == stamp


def test_naive_time_is_utc():
    assert time_to_millis(datetime(1970, 1, 1, 0, 0, 2)) == 2000


def test_other_timezone_is_absolute():
    tz = timezone(timedelta(hours=2))
    assert time_to_millis(datetime(1970, 1, 1, 2, 0, 1, tzinfo=tz)) == 1000


def test_negative_truncates_toward_zero():
    assert time_to_millis(EPOCH - timedelta(microseconds=500)) == 0
    assert time_to_millis(EPOCH - timedelta(milliseconds=1500)) == -1500