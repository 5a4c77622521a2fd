import pytest

from zapkit.sink import NopCloserSink, SinkNotFoundError, register_sink
from zapkit.writer import (
    CombinedWriteSyncer,
    DiscardWriteSyncer,
    combine_write_syncers,
    open_paths,
)
from zapkit.ztest import Buffer, FailWriter


def test_open_no_paths():
    ws, close = open_paths()
    close()
    assert ws == DiscardWriteSyncer()
    assert ws.write(b"abc") == 3


@pytest.mark.parametrize(
    "kind", ["stdout", "stderr", "path", "file-scheme", "file-localhost"]
)
def test_open(tmp_path, kind):
    temp = tmp_path / "test.log"
    paths = {
        "stdout": "stdout",
        "stderr": "stderr",
        "path": str(temp),
        "file-scheme": "file://" + str(temp),
        "file-localhost": "file://localhost" + str(temp),
    }
    ws, close = open_paths(paths[kind])
    try:
        assert ws.write(b"") == 0
    finally:
        close()
    assert temp.exists() == (kind not in ("stdout", "stderr"))


@pytest.mark.parametrize(
    "paths, not_found",
    [
        (["/foo/bar/baz"], ["/foo/bar/baz"]),
        (["file://localhost/foo/bar/baz"], ["/foo/bar/baz"]),
        (["stdout", "/foo/bar/baz", "TEMP", "file:///baz/quux"], ["/foo/bar/baz", "/baz/quux"]),
    ],
)
def test_open_paths_not_found(tmp_path, paths, not_found):
    paths = [str(tmp_path / "test.log") if p == "TEMP" else p for p in paths]
    with pytest.raises(ExceptionGroup) as info:
        open_paths(*paths)
    errors = info.value.exceptions
    assert len(errors) == len(not_found)
    for err, missing in zip(errors, not_found):
        assert isinstance(err, FileNotFoundError)
        assert missing in str(err)


def test_open_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = "test-relative-path.txt"
    ws, close = open_paths(name)
    try:
        assert ws.write(b"test") == 4
    finally:
        close()
    assert (tmp_path / name).read_bytes() == b"test"


@pytest.mark.parametrize(
    "paths, error_type",
    [
        (["./non-existent-dir/file"], FileNotFoundError),
        (["stdout", "./non-existent-dir/file"], FileNotFoundError),
        (["://foo.log"], ValueError),
        (["mem://somewhere"], SinkNotFoundError),
    ],
)
def test_open_fails(tmp_path, monkeypatch, paths, error_type):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ExceptionGroup) as info:
        open_paths(*paths)
    assert len(info.value.exceptions) == 1
    assert isinstance(info.value.exceptions[0], error_type)


@pytest.mark.parametrize(
    "prefix, suffix, message",
    [
        ("file://host01.test.com", "", "empty or use localhost"),
        ("file://rms@localhost", "", "user and password not allowed"),
        ("file://localhost", "#foo", "fragments not allowed"),
        ("file://localhost", "?foo=bar", "query parameters not allowed"),
        ("file://localhost:8080", "", "ports not allowed"),
    ],
)
def test_open_other_errors(tmp_path, prefix, suffix, message):
    url = prefix + str(tmp_path / "test.log") + suffix
    with pytest.raises(ExceptionGroup) as info:
        open_paths(url)
    assert message in str(info.value)
    assert f'open sink "{url}"' in str(info.value)


def test_open_with_erroring_sink_factory():
    msg = "expected factory error"

    def factory(u):
        raise ValueError(msg)

    register_sink("failing-writertest", factory)
    with pytest.raises(ExceptionGroup) as info:
        open_paths("failing-writertest://some/path")
    assert msg in str(info.value)


def test_open_registered_sink():
    buf = Buffer()
    register_sink("memtest-writer", lambda u: NopCloserSink(buf))
    ws, close = open_paths("memtest-writer://somewhere")
    ws.write(b"foo")
    close()
    assert buf.text() == "foo"


def test_combine_write_syncers():
    first, second = Buffer(), Buffer()
    ws = combine_write_syncers(first, second)
    assert ws.write(b"test") == 4
    ws.sync()
    assert first.text() == "test"
    assert second.text() == "test"
    assert first.called() and second.called()


def test_combined_write_failure_still_writes_others():
    buf = Buffer()
    ws = CombinedWriteSyncer(FailWriter(), buf)
    with pytest.raises(OSError, match="failed"):
        ws.write(b"data")
    assert buf.text() == "data"


def test_combined_sync_errors_grouped():
    first, second = Buffer(), Buffer()
    first.set_error(RuntimeError("one"))
    second.set_error(RuntimeError("two"))
    with pytest.raises(ExceptionGroup) as info:
        CombinedWriteSyncer(first, second).sync()
    assert [str(e) for e in info.value.exceptions] == ["one", "two"]