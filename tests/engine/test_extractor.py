from __future__ import annotations

import pytest

from exam_drill.engine.errors import ParseError
from exam_drill.engine.extractor import extract


def test_extract_plain_array() -> None:
    assert extract('[{"a": 1}, {"b": 2}]') == [{"a": 1}, {"b": 2}]


def test_extract_strips_surrounding_whitespace() -> None:
    assert extract("\n\n  []  \n") == []


def test_extract_from_prose_and_fences() -> None:
    raw = (
        "Sure! Here are your questions:\n"
        "```json\n"
        '[{"question": "Q?"}]\n'
        "```\n"
        "Good luck with your exam."
    )
    assert extract(raw) == [{"question": "Q?"}]


def test_extract_uses_outermost_brackets() -> None:
    raw = 'Result: [{"options": ["a", "b"]}, {"options": []}] done'
    assert extract(raw) == [{"options": ["a", "b"]}, {"options": []}]


def test_extract_rejects_non_array_json() -> None:
    with pytest.raises(ParseError):
        extract('{"question": "not a list"}')


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "No questions today.",
        '[{"question": "cut off", "options": ["a", "b"',
        "] backwards [",
    ],
)
def test_extract_failures_keep_raw_text(raw: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        extract(raw)
    assert excinfo.value.raw_text == raw
    assert excinfo.value.retryable is True


def test_deeply_nested_reply_is_a_parse_error() -> None:
    raw = "Sure: " + "[" * 100000 + "]" * 100000
    with pytest.raises(ParseError) as excinfo:
        extract(raw)
    assert excinfo.value.raw_text == raw
