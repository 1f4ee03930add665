"""Terminal capability queries backed by rich."""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, Optional

from rich.color import ColorSystem
from rich.console import Console

DEFAULT_TERMINAL_HEIGHT = 24

_COLOR_SYSTEMS = {
    "standard": ColorSystem.STANDARD,
    "256": ColorSystem.EIGHT_BIT,
    "truecolor": ColorSystem.TRUECOLOR,
    "windows": ColorSystem.WINDOWS,
}


@dataclass(frozen=True)
class TerminalCapabilities:
    """What the interpreter needs to know about the terminal it writes to.

    ``color_system`` uses rich's names (``"standard"``, ``"256"``,
    ``"truecolor"``, ``"windows"``) or ``None`` for a terminal without color.
    A ``height`` of 0 means unknown.
    """

    color_system: Optional[str] = "truecolor"
    height: int = DEFAULT_TERMINAL_HEIGHT

    def has_color(self) -> bool:
        return self.rich_color_system() is not None

    def rich_color_system(self) -> Optional[ColorSystem]:
        if self.color_system is None:
            return None
        return _COLOR_SYSTEMS.get(str(self.color_system).lower())

    def effective_height(self) -> int:
        return self.height if self.height > 0 else DEFAULT_TERMINAL_HEIGHT

    @classmethod
    def detect(cls, file: Optional[IO[str]] = None) -> "TerminalCapabilities":
        console = Console(file=file, highlight=False)
        height = console.size.height if console.is_terminal else 0
        return cls(color_system=console.color_system, height=height)

    @classmethod
    def for_mode(cls, mode: str, file: Optional[IO[str]] = None) -> "TerminalCapabilities":
        """Resolve a settings color mode (``auto``/``always``/``never``)."""

        detected = cls.detect(file)
        if mode == "always":
            return cls(color_system="truecolor", height=detected.height)
        if mode == "never":
            return cls(color_system=None, height=detected.height)
        return detected
