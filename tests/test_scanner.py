from mecca.scanner import iter_spans, next_span, parse_labels


def test_next_span_splits_literal_and_token() -> None:
    span = next_span("ab[red]cd")

    assert span.literal == "ab"
    assert span.token == "red"
    assert span.token_start == 2
    assert span.end == 7


def test_double_bracket_yields_single_literal_bracket() -> None:
    spans = list(iter_spans("[[x"))

    assert spans[0].literal == "["
    assert spans[0].token is None
    assert spans[0].end == 2
    assert spans[1].literal == "x"


def test_unterminated_bracket_is_literal() -> None:
    span = next_span("a[red")

    assert span.literal == "a[red"
    assert span.token is None
    assert span.end == 5


def test_text_without_brackets_is_one_span() -> None:
    spans = list(iter_spans("plain text"))

    assert len(spans) == 1
    assert spans[0].literal == "plain text"


def test_parse_labels_accepts_both_forms_and_lowercases() -> None:
    labels = parse_labels("[/Start]x[label End]y")

    assert labels == {"start": 8, "end": 20}


def test_parse_labels_ignores_other_tokens() -> None:
    assert parse_labels("[red][/][label]") == {}
