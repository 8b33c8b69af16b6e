"""Tests for recovering recommendations from model text."""

import json

import pytest

from fakes import SCENARIO_A_ITEMS, SCENARIO_A_TEXT, SCENARIO_B_TEXT
from shelfmate.domain.errors import ParseError
from shelfmate.domain.models import Recommendation
from shelfmate.services.parser import (
    RecommendationParser,
    parse_bracketed,
    parse_strict,
)


@pytest.fixture
def parser() -> RecommendationParser:
    return RecommendationParser()


# ── Attempt chain ──────────────────────────────────


def test_strict_attempt_rejects_non_array():
    outcome = parse_strict('{"title": "Dune"}')
    assert not outcome.ok
    assert "array" in outcome.reason


def test_bracketed_attempt_without_brackets():
    outcome = parse_bracketed("no json here")
    assert not outcome.ok
    assert outcome.items is None


def test_strict_json_keeps_every_element(parser: RecommendationParser):
    result = parser.parse(SCENARIO_A_TEXT)

    assert len(result) == len(SCENARIO_A_ITEMS)
    assert result[0] == Recommendation(
        title="Dune",
        author="Frank Herbert",
        reason="matches fantasy/adventure",
        confidence=0.9,
        catalog_id="b1",
    )
    assert [r.title for r in result] == ["Dune", "The Hobbit", "Mistborn"]
    assert result[1].catalog_id is None


def test_fenced_output_matches_bare_array(parser: RecommendationParser):
    assert parser.parse(SCENARIO_B_TEXT) == parser.parse(SCENARIO_A_TEXT)


def test_trailing_prose_after_array(parser: RecommendationParser):
    text = SCENARIO_A_TEXT + "\n\nLet me know if you want more!"
    assert len(parser.parse(text)) == 3


@pytest.mark.parametrize(
    "text",
    [
        "I'm sorry, I can't help with that.",
        "",
        "Here is an object: {\"title\": \"Dune\"}",
        "] backwards [",
        "[not, valid, json]",
    ],
)
def test_unrecoverable_text_raises(parser: RecommendationParser, text: str):
    with pytest.raises(ParseError) as exc_info:
        parser.parse(text)
    assert exc_info.value.raw_text == text


def test_result_is_immutable_tuple(parser: RecommendationParser):
    result = parser.parse(SCENARIO_A_TEXT)
    assert isinstance(result, tuple)


def test_no_padding_or_truncation(parser: RecommendationParser):
    five = [{"title": f"Book {i}", "author": "A", "reason": "r", "confidence": 0.5} for i in range(5)]
    assert len(parser.parse(json.dumps(five))) == 5
    assert len(parser.parse(json.dumps(five[:1]))) == 1


# ── Element validation ─────────────────────────────


def test_missing_optional_fields_get_defaults(parser: RecommendationParser):
    result = parser.parse('[{"title": "Emma", "author": "Jane Austen"}]')
    assert result[0].reason == ""
    assert result[0].confidence == 0.0
    assert result[0].catalog_id is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(1.7, 1.0), (-0.3, 0.0), ("0.42", 0.42), ("high", 0.0), (None, 0.0), (1, 1.0)],
)
def test_confidence_is_coerced_into_range(parser: RecommendationParser, raw, expected):
    text = json.dumps([{"title": "T", "author": "A", "reason": "r", "confidence": raw}])
    assert parser.parse(text)[0].confidence == pytest.approx(expected)


def test_elements_missing_title_or_author_are_dropped(parser: RecommendationParser):
    items = [
        {"title": "Dune", "author": "Frank Herbert"},
        {"title": "No Author"},
        {"author": "No Title"},
        {"title": "   ", "author": "Blank Title"},
        "just a string",
        42,
    ]
    result = parser.parse(json.dumps(items))
    assert [r.title for r in result] == ["Dune"]


def test_all_elements_invalid_yields_empty_set(parser: RecommendationParser):
    assert parser.parse('[{"reason": "no title"}, {"author": "only"}]') == ()
    assert parser.parse('[{"title": "No Author"}]') == ()


def test_empty_array_yields_empty_set(parser: RecommendationParser):
    assert parser.parse("[]") == ()
    assert parser.parse("Nothing matched:\n```json\n[]\n```") == ()


def test_extra_model_fields_are_not_forwarded(parser: RecommendationParser):
    text = '[{"title": "T", "author": "A", "reason": "r", "confidence": 0.5, "isbn": "123", "price": 9}]'
    rec = parser.parse(text)[0]
    assert not hasattr(rec, "isbn")
    assert not hasattr(rec, "price")


@pytest.mark.parametrize(
    ("field", "value", "expected"),
    [
        ("bookId", "b7", "b7"),
        ("id", "b8", "b8"),
        ("bookId", 12, "12"),
        ("bookId", "", None),
        ("bookId", None, None),
    ],
)
def test_catalog_id_variants(parser: RecommendationParser, field, value, expected):
    text = json.dumps([{field: value, "title": "T", "author": "A"}])
    assert parser.parse(text)[0].catalog_id == expected
