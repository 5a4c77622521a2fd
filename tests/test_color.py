import pytest

from zapkit.color import Color


def test_color_formatting():
    assert Color.RED.add("foo") == "\x1b[31mfoo\x1b[0m"


def test_color_range_ends():
    assert Color.BLACK.add("x") == "\x1b[30mx\x1b[0m"
    assert Color.WHITE.add("") == "\x1b[37m\x1b[0m"


@pytest.mark.parametrize(
    ("color", "expected"),
    [
        (Color.BLACK, "\x1b[30mtext\x1b[0m"),
        (Color.RED, "\x1b[31mtext\x1b[0m"),
        (Color.GREEN, "\x1b[32mtext\x1b[0m"),
        (Color.YELLOW, "\x1b[33mtext\x1b[0m"),
        (Color.BLUE, "\x1b[34mtext\x1b[0m"),
        (Color.MAGENTA, "\x1b[35mtext\x1b[0m"),
        (Color.CYAN, "\x1b[36mtext\x1b[0m"),
        (Color.WHITE, "\x1b[37mtext\x1b[0m"),
    ],
)
def test_colors_are_consecutive(color, expected):
    assert color.add("text") == expected