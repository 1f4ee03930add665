"""Splitting of token content into fields."""

from __future__ import annotations

from typing import Iterable, List, Optional

_FIELD_SEPARATORS = {" ", "\t", "\r", "\n"}


def split_fields(content: str) -> List[str]:
    """Split the inside of a bracket into fields.

    Fields are separated by runs of whitespace. A double-quoted section keeps
    its spaces, ``\\"`` inside quotes yields a literal quote, and an
    unterminated quote runs to the end of the content. Empty quoted sections
    produce no field.
    """

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    index = 0
    length = len(content)

    while index < length:
        char = content[index]
        if char == '"':
            if in_quotes and current:
                fields.append("".join(current))
                current = []
            in_quotes = not in_quotes
            index += 1
        elif char == "\\" and in_quotes and index + 1 < length and content[index + 1] == '"':
            current.append('"')
            index += 2
        elif char in _FIELD_SEPARATORS and not in_quotes:
            if current:
                fields.append("".join(current))
                current = []
            index += 1
        else:
            current.append(char)
            index += 1

    if current:
        fields.append("".join(current))
    return fields


class FieldCursor:
    """Left-to-right cursor over the fields of one bracket."""

    def __init__(self, fields: Iterable[str]) -> None:
        self._fields = list(fields)
        self._index = 0

    def __bool__(self) -> bool:
        return self._index < len(self._fields)

    def remaining(self) -> int:
        return len(self._fields) - self._index

    def next(self) -> str:
        if not self:
            raise IndexError("no fields left")
        field = self._fields[self._index]
        self._index += 1
        return field

    def peek(self, offset: int = 0) -> Optional[str]:
        position = self._index + offset
        if 0 <= position < len(self._fields):
            return self._fields[position]
        return None

    def take(self, count: int) -> Optional[List[str]]:
        """Consume ``count`` fields, or nothing when fewer are left."""

        if count < 0 or self.remaining() < count:
            return None
        taken = self._fields[self._index : self._index + count]
        self._index += count
        return taken

    def take_int(self) -> Optional[int]:
        """Consume the next field only when it is a decimal integer."""

        value = parse_int(self.peek())
        if value is not None:
            self._index += 1
        return value

    def drain(self) -> List[str]:
        rest = self._fields[self._index :]
        self._index = len(self._fields)
        return rest


def parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
