"""Lexical scanning of template text into literal and token spans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .fields import split_fields

TOKEN_OPEN = "["
TOKEN_CLOSE = "]"


@dataclass(frozen=True)
class Span:
    """One step of the scan starting at ``start``.

    ``literal`` is text to render as-is (an escaped ``[[`` contributes a single
    ``[``). ``token`` is the content between the brackets, or ``None`` when the
    span ends without a token. ``end`` is where scanning resumes.
    """

    start: int
    literal: str
    token: Optional[str]
    token_start: int
    end: int


def next_span(text: str, position: int = 0) -> Span:
    length = len(text)
    opening = text.find(TOKEN_OPEN, position)
    if opening == -1:
        return Span(position, text[position:], None, length, length)

    if opening + 1 < length and text[opening + 1] == TOKEN_OPEN:
        return Span(position, text[position : opening + 1], None, opening, opening + 2)

    closing = text.find(TOKEN_CLOSE, opening + 1)
    if closing == -1:
        # Unterminated token: the rest, bracket included, is literal.
        return Span(position, text[position:], None, length, length)

    return Span(position, text[position:opening], text[opening + 1 : closing], opening, closing + 1)


def iter_spans(text: str, position: int = 0) -> Iterator[Span]:
    while position < len(text):
        span = next_span(text, position)
        yield span
        position = span.end


def parse_labels(text: str) -> Dict[str, int]:
    """Map lower-cased label names to the position just after their bracket.

    Both ``[/name]`` and ``[label name]`` define a label. The scan covers the
    whole template regardless of any conditional state.
    """

    labels: Dict[str, int] = {}
    for span in iter_spans(text):
        if span.token is None:
            continue
        fields = split_fields(span.token)
        if not fields:
            continue
        first = fields[0].lower()
        if first.startswith("/") and len(first) > 1:
            labels[first[1:]] = span.end
        elif first == "label" and len(fields) > 1:
            labels[fields[1].lower()] = span.end
    return labels
