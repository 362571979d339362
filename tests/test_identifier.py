"""Tests for the ticket number heuristics."""
import pytest

from ticket_intake.utils.identifier import extract_identifier, longest_token, strip_whitespace


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123456\n", "123456"),
        ("  7 123456 89\n", "123456"),
        ("123 456", "123"),
        ("1\t22\n333 444", "333"),
        ("", None),
        ("   \n\t", None),
        (None, None),
    ],
)
def test_longest_token(text, expected):
    assert longest_token(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("12 34\n56", "123456"),
        (" 42 ", "42"),
        (" \n ", None),
    ],
)
def test_strip_whitespace(text, expected):
    assert strip_whitespace(text) == expected


def test_extract_identifier_dispatches_on_strategy():
    assert extract_identifier("1 234", "longest_token") == "234"
    assert extract_identifier("1 234", "strip_whitespace") == "1234"


def test_extract_identifier_unknown_strategy():
    with pytest.raises(ValueError):
        extract_identifier("1", "first_token")
