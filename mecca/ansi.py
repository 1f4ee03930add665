"""Raw terminal control sequences emitted by cursor and screen tokens."""

from __future__ import annotations

from typing import List, Tuple

CSI = "\033["

CLEAR_SCREEN = f"{CSI}2J{CSI}1;1H"
CLEAR_TO_END_OF_SCREEN = f"{CSI}0J"
CLEAR_TO_END_OF_LINE = f"{CSI}0K"
SAVE_CURSOR = "\0337"
RESTORE_CURSOR = "\0338"
CURSOR_NEXT_LINE = f"{CSI}1E"

BELL = "\a"
BACKSPACE = "\b"
TAB = "\t"
CARRIAGE_RETURN = "\r"

BOX_TOP_LEFT = "┌"
BOX_TOP_RIGHT = "┐"
BOX_BOTTOM_LEFT = "└"
BOX_BOTTOM_RIGHT = "┘"
BOX_HORIZONTAL = "─"
BOX_VERTICAL = "│"


def cursor_up(count: int = 1) -> str:
    return f"{CSI}{count}A"


def cursor_down(count: int = 1) -> str:
    return f"{CSI}{count}B"


def cursor_forward(count: int = 1) -> str:
    return f"{CSI}{count}C"


def cursor_backward(count: int = 1) -> str:
    return f"{CSI}{count}D"


def cursor_position(row: int, column: int) -> str:
    """Move to a 1-indexed ``row``/``column``."""

    return f"{CSI}{row};{column}H"


def draw_box(width: int, height: int) -> List[Tuple[str, bool]]:
    """Return ``(text, is_drawing)`` pieces outlining a ``width`` x ``height`` box.

    The box starts at the cursor; each following row is reached by moving
    down one line and back to the left edge. Boxes smaller than 2x2 draw
    nothing.
    """

    if width < 2 or height < 2:
        return []
    inner = width - 2
    next_row = (cursor_down() + cursor_backward(width), False)
    pieces = [(BOX_TOP_LEFT + BOX_HORIZONTAL * inner + BOX_TOP_RIGHT, True)]
    for _ in range(height - 2):
        pieces.append(next_row)
        pieces.append((BOX_VERTICAL, True))
        if inner:
            pieces.append((cursor_forward(inner), False))
        pieces.append((BOX_VERTICAL, True))
    pieces.append(next_row)
    pieces.append((BOX_BOTTOM_LEFT + BOX_HORIZONTAL * inner + BOX_BOTTOM_RIGHT, True))
    return pieces
