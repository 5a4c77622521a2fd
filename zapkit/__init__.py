"""Building blocks for structured loggers: sinks, write syncers, buffering, stack traces and test helpers."""

__version__ = "0.1.0"

__all__ = [
    "buffered",
    "clock",
    "color",
    "exit",
    "readme",
    "sink",
    "stacktrace",
    "timeutil",
    "writer",
    "ztest",
]