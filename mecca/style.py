"""Text style values, color references and the save/load stack."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import List, Optional

from rich.color import Color, ColorSystem
from rich.style import Style

COLOR_NAMES = (
    "black",
    "red",
    "green",
    "yellow",
    "blue",
    "magenta",
    "cyan",
    "white",
)

# 8 base colors followed by their "light" variants, numbered as ANSI 0..15.
NAMED_COLORS = {name: index for index, name in enumerate(COLOR_NAMES)}
NAMED_COLORS.update({f"light{name}": index + 8 for index, name in enumerate(COLOR_NAMES)})

_RGB_PATTERN = re.compile(r"^#([0-9a-fA-F]{6})$")
_PALETTE_PATTERN = re.compile(r"^#([0-9]{1,3})$")


def parse_color(token: Optional[str]) -> Optional[Color]:
    """Parse ``#rrggbb``, ``#n`` (256 palette) or one of the 16 color names."""

    if not token:
        return None
    rgb = _RGB_PATTERN.match(token)
    if rgb:
        value = rgb.group(1)
        return Color.from_rgb(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    palette = _PALETTE_PATTERN.match(token)
    if palette:
        number = int(palette.group(1))
        if number > 255:
            return None
        return Color.from_ansi(number)
    index = NAMED_COLORS.get(token.lower())
    if index is None:
        return None
    return Color.from_ansi(index)


def is_color_token(token: Optional[str]) -> bool:
    return parse_color(token) is not None


@dataclass(frozen=True)
class TextStyle:
    """Immutable style value; every change returns a new instance."""

    foreground: Optional[Color] = None
    background: Optional[Color] = None
    bold: bool = False
    faint: bool = False
    italic: bool = False
    underline: bool = False
    blink: bool = False
    reverse: bool = False
    strike: bool = False

    def with_changes(self, **changes) -> "TextStyle":
        return replace(self, **changes)

    def to_rich(self) -> Style:
        return Style(
            color=self.foreground,
            bgcolor=self.background,
            bold=self.bold,
            dim=self.faint,
            italic=self.italic,
            underline=self.underline,
            blink=self.blink,
            reverse=self.reverse,
            strike=self.strike,
        )

    def render(self, text: str, color_system: Optional[ColorSystem]) -> str:
        """Wrap ``text`` in SGR sequences for every active attribute.

        Empty text and a terminal without color come back unchanged.
        """

        if not text or color_system is None or self == DEFAULT_STYLE:
            return text
        return self.to_rich().render(text, color_system=color_system)


DEFAULT_STYLE = TextStyle()

# Style keywords that flip a single attribute on (or, for steady, blink off).
ATTRIBUTE_TOKENS = {
    "bold": ("bold", True),
    "bright": ("bold", True),
    "dim": ("faint", True),
    "underline": ("underline", True),
    "italic": ("italic", True),
    "reverse": ("reverse", True),
    "strike": ("strike", True),
    "blink": ("blink", True),
    "steady": ("blink", False),
}


class StyleStack:
    """Styles pushed by ``[save]`` and restored by ``[load]``."""

    def __init__(self) -> None:
        self._items: List[TextStyle] = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, style: TextStyle) -> None:
        self._items.append(style)

    def pop(self) -> Optional[TextStyle]:
        if not self._items:
            return None
        return self._items.pop()

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> List[TextStyle]:
        return list(self._items)

    def restore(self, items: List[TextStyle]) -> None:
        self._items = list(items)
