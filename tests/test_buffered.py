from datetime import timedelta

import pytest

from zapkit.buffered import BufferedWriteSyncer
from zapkit.writer import CombinedWriteSyncer
from zapkit.ztest import Buffer, FailWriter, MockClock, ShortWriter


def test_sync_flushes():
    buf = Buffer()
    ws = BufferedWriteSyncer(buf)
    assert ws.write(b"foo") == 3
    assert buf.text() == ""
    ws.sync()
    assert buf.text() == "foo"
    ws.stop()
    assert buf.text() == "foo"


def test_stop_flushes():
    buf = Buffer()
    ws = BufferedWriteSyncer(buf)
    assert ws.write(b"foo") == 3
    assert buf.text() == ""
    ws.stop()
    assert buf.text() == "foo"


def test_stop_twice():
    ws = BufferedWriteSyncer(FailWriter())
    assert ws.write(b"foo") == 3
    with pytest.raises(OSError, match="failed"):
        ws.stop()
    assert ws.stop() is None


def test_wrap_twice():
    buf = Buffer()
    inner = BufferedWriteSyncer(buf)
    ws = BufferedWriteSyncer(inner)
    assert ws.write(b"foo") == 3
    assert buf.text() == ""
    ws.sync()
    assert buf.text() == "foo"
    ws.stop()
    inner.stop()
    assert buf.text() == "foo"


def test_small_buffer():
    buf = Buffer()
    ws = BufferedWriteSyncer(buf, size=5)
    assert ws.write(b"foo") == 3
    assert buf.text() == ""
    assert ws.write(b"foo") == 3
    assert buf.text() == "foo"
    ws.stop()
    assert buf.text() == "foofoo"


def test_with_locked_write_syncer():
    buf = Buffer()
    ws = BufferedWriteSyncer(CombinedWriteSyncer(buf), size=5)
    assert ws.write(b"foo") == 3
    assert buf.text() == ""
    assert ws.write(b"foo") == 3
    assert buf.text() == "foo"
    ws.stop()


def test_flush_error():
    ws = BufferedWriteSyncer(FailWriter(), size=4)
    assert ws.write(b"foo") == 3
    with pytest.raises(OSError, match="failed"):
        ws.write(b"foo")
    with pytest.raises(OSError, match="failed"):
        ws.stop()


def test_short_write_fails_flush():
    ws = BufferedWriteSyncer(ShortWriter())
    assert ws.write(b"abc") == 3
    with pytest.raises(OSError, match="short write"):
        ws.stop()


def test_large_write_bypasses_empty_buffer():
    buf = Buffer()
    ws = BufferedWriteSyncer(buf, size=4)
    assert ws.write(b"abcdefgh") == 8
    assert buf.text() == "abcdefgh"
    ws.stop()


def test_flush_timer():
    buf = Buffer()
    clock = MockClock()
    ws = BufferedWriteSyncer(
        buf, size=6, flush_interval=timedelta(microseconds=1), clock=clock
    )
    assert ws.write(b"foo") == 3
    clock.add(timedelta(microseconds=10))
    assert buf.text() == "foo"

    assert ws.write(b"foo") == 3
    clock.add(timedelta(microseconds=10))
    assert buf.text() == "foofoo"
    ws.stop()


def test_stop_without_start():
    buf = Buffer()
    ws = BufferedWriteSyncer(buf)
    assert ws.stop() is None
    assert buf.called() is True


def test_sync_without_start():
    buf = Buffer()
    ws = BufferedWriteSyncer(buf)
    ws.sync()
    assert buf.called() is True
    assert buf.text() == ""


def test_context_manager_stops():
    buf = Buffer()
    with BufferedWriteSyncer(buf) as ws:
        ws.write(b"bar")
        assert buf.text() == ""
    assert buf.text() == "bar"