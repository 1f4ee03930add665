"""Render state shared by the driver loop and the token dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from rich.color import ColorSystem

from .menu import MenuState
from .scanner import parse_labels
from .streams import OutputBuffer
from .style import DEFAULT_STYLE, TextStyle


@dataclass
class Pagination:
    """Automatic ``More [Y,n,=]?`` bookkeeping for one interpreter."""

    enabled: bool = False
    height: int = 24
    current_line: int = 0
    last_prompted_line: int = 0

    def restart(self) -> None:
        self.current_line = 0
        self.last_prompted_line = 0

    def count(self, text: str) -> None:
        self.current_line += text.count("\n")

    def due(self) -> bool:
        if not self.enabled or self.height <= 0:
            return False
        return self.current_line >= self.height - 2 and self.current_line > self.last_prompted_line


@dataclass
class RenderSession:
    """State of one top-level render call, shared by every nested file."""

    output: OutputBuffer
    color_system: Optional[ColorSystem]
    pagination: Pagination
    menu: MenuState
    exit_requested: bool = False


@dataclass
class LinkSnapshot:
    """Caller context saved on the call stack while a ``[link]`` runs."""

    template: str
    variables: Mapping[str, Any]
    include_chain: Tuple[str, ...]
    position: int
    style: TextStyle
    style_stack: List[TextStyle]


@dataclass
class RenderFrame:
    """One file (or string) being interpreted."""

    template: str
    variables: Mapping[str, Any]
    include_chain: Tuple[str, ...]
    session: RenderSession
    inherited_hidden: bool = False
    style: TextStyle = DEFAULT_STYLE
    conditions: List[bool] = field(default_factory=list)
    labels: Dict[str, int] = field(default_factory=dict)
    position: int = 0

    quit: bool = False
    skip_line: bool = False
    goto: Optional[str] = None
    top: bool = False
    display_file: Optional[str] = None
    link_file: Optional[str] = None
    on_exit_file: Optional[str] = None

    def __post_init__(self) -> None:
        self.labels = parse_labels(self.template)

    @property
    def hidden(self) -> bool:
        return self.inherited_hidden or any(self.conditions)

    @property
    def halted(self) -> bool:
        return self.quit or self.session.exit_requested

    def rebuild_labels(self) -> None:
        self.labels = parse_labels(self.template)

    def set_style(self, style: TextStyle) -> None:
        # Style changes inside a hidden conditional block do not leak out.
        if not self.hidden:
            self.style = style

    def emit(self, text: str, *, styled: bool = True, capture: bool = False) -> None:
        if not text:
            return
        if capture:
            self.session.menu.capture(text)
        self.session.pagination.count(text)
        if self.hidden:
            return
        if styled:
            text = self.style.render(text, self.session.color_system)
        self.session.output.append(text)

    def emit_error(self, message: str) -> None:
        self.emit(f"[ERROR: {message}]")
