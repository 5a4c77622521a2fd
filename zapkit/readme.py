"""Fill a README template with benchmark comparison tables."""

from __future__ import annotations

import argparse
import math
import re
import subprocess
import sys
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

__all__ = [
    "LIBRARY_NAMES",
    "BenchmarkRow",
    "parse_duration",
    "find_unique_substring",
    "parse_benchmark_row",
    "sort_rows",
    "format_benchmark_rows",
    "get_benchmark_output",
    "render_template",
    "main",
]

LIBRARY_NAMES = {
    "Zap": ":zap: zap",
    "Zap.Sugar": ":zap: zap (sugared)",
    "stdlib.Println": "standard library",
    "sirupsen/logrus": "logrus",
    "go-kit/kit/log": "go-kit",
    "inconshreveable/log15": "log15",
    "apex/log": "apex/log",
    "rs/zerolog": "zerolog",
}

_BENCHMARKS = (
    "BenchmarkAddingFields",
    "BenchmarkAccumulatedContext",
    "BenchmarkWithoutFields",
)

_TABLE_HEADER = (
    "| Package | Time | Time % to zap | Objects Allocated |",
    "| :------ | :--: | :-----------: | :---------------: |",
)

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_NANOS = 2**63 - 1
_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")


def parse_duration(text: str) -> int:
    """Parse a duration such as ``"1.5s"`` or ``"300ns"`` into nanoseconds."""
    invalid = ValueError(f'invalid duration "{text}"')
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise invalid
    total = 0
    pos = 0
    while pos < len(s):
        m = _COMPONENT.match(s, pos)
        whole, frac, unit = m.group(1), m.group(2) or "", m.group(3)
        if not whole and not frac:
            raise invalid
        if not unit:
            raise ValueError(f'missing unit in duration "{text}"')
        scale = _UNITS.get(unit)
        if scale is None:
            raise ValueError(f'unknown unit "{unit}" in duration "{text}"')
        value = int(whole or "0") * scale
        if frac:
            value += int(frac) * scale // 10 ** len(frac)
        total += value
        if total > _MAX_NANOS + (1 if negative else 0):
            raise invalid
        pos = m.end()
    return -total if negative else total


def find_unique_substring(lines: Iterable[str], substring: str) -> str:
    """Return the one line containing ``substring``, or ``""`` if none does.

    Raises ValueError if more than one line contains it.
    """
    found = ""
    for line in lines:
        if substring in line:
            if found:
                raise ValueError(f"input has duplicate substring {substring}")
            found = line
    return found


def _percent(value: int, baseline: int) -> str:
    if baseline == 0:
        ratio = math.inf if value > 0 else -math.inf if value < 0 else math.nan
    else:
        ratio = value / baseline
    pct = ratio * 100 - 100
    if math.isnan(pct):
        return "+NaN%"
    if math.isinf(pct):
        return ("+Inf" if pct > 0 else "-Inf") + "%"
    return f"{pct:+.0f}%"


@dataclass
class BenchmarkRow:
    """One library's results for a benchmark, with the baseline's beside them."""

    name: str
    time: int
    allocated_bytes: int
    allocated_objects: int
    zap_time: int = 0
    zap_allocated_bytes: int = 0
    zap_allocated_objects: int = 0

    def __str__(self) -> str:
        return (
            f"| {self.name} | {self.time} ns/op | "
            f"{_percent(self.time, self.zap_time)} | "
            f"{self.allocated_objects} allocs/op"
        )


def _trim_suffix(s: str, suffix: str) -> str:
    return s[: -len(suffix)] if suffix and s.endswith(suffix) else s


def _atoi(s: str) -> int:
    if not re.fullmatch(r"[+-]?[0-9]+", s):
        raise ValueError(f'invalid integer "{s}"')
    return int(s)


def parse_benchmark_row(
    lines: Sequence[str],
    benchmark_name: str,
    library_name: str,
    baseline: BenchmarkRow | None,
) -> BenchmarkRow | None:
    """Parse the result line for one library, or return None if it is absent."""
    line = find_unique_substring(lines, f"{benchmark_name}/{library_name}-")
    if not line:
        return None
    split = line.split("\t")
    if len(split) < 5:
        raise ValueError(f"unknown benchmark line: {line}")
    duration = parse_duration(
        _trim_suffix(split[2].strip(), "/op").replace(" ", "")
    )
    allocated_bytes = _atoi(_trim_suffix(split[3].strip(), " B/op"))
    allocated_objects = _atoi(_trim_suffix(split[4].strip(), " allocs/op"))
    row = BenchmarkRow(
        name=LIBRARY_NAMES.get(library_name, ""),
        time=duration,
        allocated_bytes=allocated_bytes,
        allocated_objects=allocated_objects,
    )
    if baseline is not None:
        row.zap_time = baseline.time
        row.zap_allocated_bytes = baseline.allocated_bytes
        row.zap_allocated_objects = baseline.allocated_objects
    return row


def sort_rows(rows: Iterable[BenchmarkRow]) -> list[BenchmarkRow]:
    """Return rows with zap's first, each part ordered by time."""
    return sorted(rows, key=lambda row: ("zap" not in row.name, row.time))


def format_benchmark_rows(benchmark_name: str, lines: Sequence[str]) -> str:
    """Build the Markdown table for one benchmark from ``go test`` output lines."""
    baseline = parse_benchmark_row(lines, benchmark_name, "Zap", None)
    rows = [
        row
        for library in LIBRARY_NAMES
        if (row := parse_benchmark_row(lines, benchmark_name, library, baseline))
        is not None
    ]
    table = list(_TABLE_HEADER)
    table.extend(str(row) for row in sort_rows(rows))
    return "\n".join(table)


def get_benchmark_output(benchmark_name: str) -> list[str]:
    """Run one benchmark in the ``benchmarks`` directory and return its output lines."""
    command = ["go", "test", f"-bench={benchmark_name}", "-benchmem"]
    try:
        result = subprocess.run(
            command,
            cwd="benchmarks",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as err:
        raise RuntimeError(
            f"error running 'go test -bench=\"{benchmark_name}\"': {err}"
        ) from err
    if result.returncode != 0:
        raise RuntimeError(
            f"error running 'go test -bench=\"{benchmark_name}\"': "
            f"exit status {result.returncode}\n{result.stdout}"
        )
    return result.stdout.split("\n")


_ACTION = re.compile(r"\{\{(-\s)?\s*(.*?)\s*(\s-)?\}\}", re.S)
_FIELD = re.compile(r"\.(\w+)")
_TRIM = " \t\r\n"


def render_template(template_text: str, data: Mapping[str, str]) -> str:
    """Substitute ``{{.Name}}`` actions with values from ``data``.

    Supports ``{{-``/``-}}`` whitespace trimming and ``{{/* */}}`` comments.
    Raises ValueError for unknown fields and unsupported actions.
    """
    parts: list[str] = []
    pos = 0
    trim_next = False
    for m in _ACTION.finditer(template_text):
        text = template_text[pos : m.start()]
        if trim_next:
            text = text.lstrip(_TRIM)
        if m.group(1):
            text = text.rstrip(_TRIM)
        if "{{" in text:
            raise ValueError("unclosed action in template")
        parts.append(text)
        body = m.group(2)
        if body.startswith("/*") and body.endswith("*/"):
            pass
        elif field := _FIELD.fullmatch(body):
            name = field.group(1)
            if name not in data:
                raise ValueError(f"can't evaluate field {name}")
            parts.append(str(data[name]))
        else:
            raise ValueError(f"unsupported template action: {body!r}")
        trim_next = bool(m.group(3))
        pos = m.end()
    rest = template_text[pos:]
    if trim_next:
        rest = rest.lstrip(_TRIM)
    if "{{" in rest:
        raise ValueError("unclosed action in template")
    parts.append(rest)
    return "".join(parts)


def main(argv: Sequence[str] | None = None) -> int:
    """Read a template on stdin and write it filled with benchmark tables."""
    parser = argparse.ArgumentParser(
        description="Fill a README template from standard input with benchmark tables."
    )
    parser.parse_args(argv)
    try:
        data = {
            name: format_benchmark_rows(name, get_benchmark_output(name))
            for name in _BENCHMARKS
        }
        template_text = sys.stdin.read()
        sys.stdout.write(render_template(template_text, data))
    except (OSError, RuntimeError, ValueError) as err:
        print(err, file=sys.stderr)
        return 1
    return 0