import pytest

from mecca.fields import FieldCursor, parse_int, split_fields


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ("locate 5  10", ["locate", "5", "10"]),
        ("a\tb\r\nc", ["a", "b", "c"]),
        ('"hello world" x', ["hello world", "x"]),
        ('a "" b', ["a", "b"]),
        ('"say \\"hi\\""', ['say "hi"']),
        ('x "a b', ["x", "a b"]),
        ("   ", []),
    ],
)
def test_split_fields(content: str, expected: list) -> None:
    assert split_fields(content) == expected


def test_take_consumes_nothing_when_too_few_fields() -> None:
    cursor = FieldCursor(["one"])

    assert cursor.take(2) is None
    assert cursor.remaining() == 1
    assert cursor.take(1) == ["one"]
    assert not cursor


def test_take_int_only_consumes_integers() -> None:
    cursor = FieldCursor(["x", "4"])

    assert cursor.take_int() is None
    assert cursor.next() == "x"
    assert cursor.take_int() == 4
    assert cursor.remaining() == 0


def test_peek_and_drain() -> None:
    cursor = FieldCursor(["a", "b", "c"])

    assert cursor.peek() == "a"
    assert cursor.peek(2) == "c"
    assert cursor.peek(3) is None
    cursor.drain()
    assert not cursor


def test_next_raises_when_exhausted() -> None:
    with pytest.raises(IndexError):
        FieldCursor([]).next()


def test_parse_int() -> None:
    assert parse_int("12") == 12
    assert parse_int("x") is None
    assert parse_int(None) is None
