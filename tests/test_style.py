import pytest
from rich.color import ColorSystem

from mecca.style import DEFAULT_STYLE, StyleStack, TextStyle, is_color_token, parse_color


@pytest.mark.parametrize(
    ("token", "number"),
    [
        ("red", 1),
        ("RED", 1),
        ("lightblue", 12),
        ("white", 7),
        ("#0", 0),
        ("#200", 200),
    ],
)
def test_parse_color_palette_references(token: str, number: int) -> None:
    color = parse_color(token)

    assert color is not None
    assert color.number == number


def test_parse_color_rgb() -> None:
    color = parse_color("#FF8000")

    assert color is not None
    assert color.triplet is not None
    assert tuple(color.triplet) == (255, 128, 0)


@pytest.mark.parametrize("token", ["#256", "#fff", "#12345g", "purple", "", None])
def test_parse_color_rejects_unknown(token) -> None:
    assert parse_color(token) is None
    assert not is_color_token(token)


def test_render_wraps_text_in_sgr() -> None:
    style = TextStyle(foreground=parse_color("red"), bold=True)

    assert style.render("X", ColorSystem.TRUECOLOR) == "\x1b[1;31mX\x1b[0m"


def test_render_background_and_rgb() -> None:
    style = TextStyle(foreground=parse_color("#ff0000"), background=parse_color("blue"))

    assert style.render("X", ColorSystem.TRUECOLOR) == "\x1b[38;2;255;0;0;44mX\x1b[0m"


def test_render_without_color_system_is_plain() -> None:
    style = TextStyle(foreground=parse_color("red"), underline=True)

    assert style.render("X", None) == "X"


def test_default_style_renders_plain_text() -> None:
    assert DEFAULT_STYLE.render("plain", ColorSystem.TRUECOLOR) == "plain"


def test_with_changes_returns_new_value() -> None:
    bold = DEFAULT_STYLE.with_changes(bold=True)

    assert bold.bold
    assert not DEFAULT_STYLE.bold


def test_style_stack_pop_on_empty_is_none() -> None:
    stack = StyleStack()

    assert stack.pop() is None
    stack.push(DEFAULT_STYLE.with_changes(italic=True))
    assert len(stack) == 1
    assert stack.pop().italic
    assert len(stack) == 0


def test_style_stack_snapshot_is_a_copy() -> None:
    stack = StyleStack()
    stack.push(DEFAULT_STYLE)
    saved = stack.snapshot()
    stack.clear()

    stack.restore(saved)

    assert len(stack) == 1
