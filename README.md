# zapkit

Low-level pieces for building structured loggers in Python: destinations
opened by URL, write syncers that fan out or buffer, stack-trace capture and
formatting, and test doubles for all of them.

## Modules

- `zapkit.sink` — `SinkRegistry` maps URL schemes to sink factories. The
  `file` scheme is registered by default; absolute paths and URLs without a
  scheme are opened as files in append mode, and the special paths `stdout`
  and `stderr` write to the current standard streams. `register_sink(scheme,
  factory)` adds a scheme to the default registry; `normalize_scheme(s)`
  lower-cases and validates a scheme. Unknown schemes raise
  `SinkNotFoundError`; invalid or duplicate registrations and bad `file` URLs
  (user, port, query, fragment, or a host other than `localhost`) raise
  `ValueError`. `NopCloserSink` wraps a writer so that closing it leaves the
  writer open.
- `zapkit.writer` — `open_paths(*paths)` opens every path or URL and returns
  `(writer, close)`. If any path fails, whatever was opened is closed and an
  `ExceptionGroup` with one error per failed path is raised.
  `combine_write_syncers(*writers)` returns a `CombinedWriteSyncer` that writes
  to all of them under one lock, or a `DiscardWriteSyncer` when given none.
- `zapkit.buffered` — `BufferedWriteSyncer(ws, size=0, flush_interval=0.0,
  clock=None)` batches writes in memory and flushes them when the buffer fills
  or on a timer (256 kB and 30 seconds by default). Call `stop()` when done, or
  use it as a context manager; `sync()` flushes immediately.
- `zapkit.clock` — `SystemClock` (`now()`, `new_ticker(interval)`), the
  shared `DEFAULT_CLOCK`, and `Ticker`, whose `get(timeout)` waits for the next
  tick and `stop()` ends it.
- `zapkit.stacktrace` — `take_stacktrace(skip=0)` returns the caller's stack
  formatted as `module.function` lines, each followed by a tab-indented
  `file:line`. `capture_stacktrace(skip, full)`, `Stacktrace`, `StackFrame`
  and `StackFormatter` give finer control.
- `zapkit.color` — `Color`, the ANSI foreground colours; `Color.RED.add("foo")`
  wraps text in escape codes.
- `zapkit.exit` — `exit_with(code)` exits the process via `sys.exit`;
  `stub()` and `with_stub(f)` replace it with a `StubbedExit` that records
  `exited` and `code` instead.
- `zapkit.timeutil` — `time_to_millis(t)`: milliseconds since the Unix epoch
  (naive datetimes are taken as UTC).
- `zapkit.ztest` — test helpers: `MockClock` (time moves only on `add(delta)`,
  firing its tickers in order), `Buffer` (keeps writes; `text()`, `lines()`,
  `stripped()`), `Discarder`, `FailWriter`, `ShortWriter` and their base
  `Syncer`, which records `sync` calls and can raise a set error. `timeout`,
  `sleep` and `initialize` scale test durations; the scale can also be set
  with the `TEST_TIMEOUT_SCALE` environment variable.
- `zapkit.readme` — the `zapkit-readme` command, described below.

## Installation

```
pip install zapkit
```

## Quick start

```python
from zapkit.buffered import BufferedWriteSyncer
from zapkit.writer import open_paths

sink, close = open_paths("stdout", "/tmp/app.log")
with BufferedWriteSyncer(sink) as buffered:
    buffered.write(b"hello\n")
close()
```

### Custom sinks

```python
from zapkit.sink import NopCloserSink, register_sink
from zapkit.writer import open_paths
from zapkit.ztest import Buffer

memory = Buffer()
register_sink("mem", lambda url: NopCloserSink(memory))

writer, close = open_paths("mem://anywhere")
writer.write(b"foo")
assert memory.text() == "foo"
```

## Benchmark tables

`zapkit-readme` reads a template on standard input, runs the external
benchmark suite in a `benchmarks` directory under the current directory for
`BenchmarkAddingFields`, `BenchmarkAccumulatedContext` and
`BenchmarkWithoutFields`, and writes the template to standard output with each
`{{.BenchmarkName}}` action replaced by a Markdown comparison table:

```
zapkit-readme < README.tmpl > README.md
```

Only field actions, `{{- -}}` whitespace trimming and `{{/* */}}` comments are
understood in templates; anything else is an error. The command exits with
status 1 and prints the error if the benchmarks cannot be run.

## What this package does not do

There is no logger here: no leveled logging API, no log entries, no encoders
(JSON or console) and no cores that tie an encoder to a destination. zapkit
supplies the output side and test helpers that such a logger would build on.

## Running the tests

```
pip install -e ".[test]"
pytest
```