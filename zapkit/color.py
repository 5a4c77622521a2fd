"""Terminal colours for TTY output."""

from __future__ import annotations

from enum import IntEnum


class Color(IntEnum):
    """ANSI foreground colours."""

    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    CYAN = 36
    WHITE = 37

    def add(self, s: str) -> str:
        """Wrap ``s`` in this colour's escape codes."""
        return f"\x1b[{int(self)}m{s}\x1b[0m"