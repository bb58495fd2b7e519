import pytest

from string_analyzer.crud.strings import create_string_record, list_string_records
from string_analyzer.services.filters import (
    FilterSet,
    FilterValidationError,
    parse_natural_language_query,
    parse_query_filters,
)


# ------------------------------------------------------------------------------
# Query parameters
# ------------------------------------------------------------------------------
def test_query_filters_parse_typed_values() -> None:
    filters = parse_query_filters({
        "is_palindrome": "false",
        "min_length": "3",
        "max_length": " 10 ",
        "word_count": "2",
        "contains_character": "z",
    })
    assert filters.applied() == {
        "is_palindrome": False,
        "min_length": 3,
        "max_length": 10,
        "word_count": 2,
        "contains_character": "z",
    }


def test_query_filters_ignore_absent_and_unknown_keys() -> None:
    filters = parse_query_filters({"min_length": None, "sort": "asc"})
    assert filters.is_empty()


@pytest.mark.parametrize("raw", ["True", "1", "yes", ""])
def test_is_palindrome_must_be_literal_true_or_false(raw: str) -> None:
    with pytest.raises(FilterValidationError) as excinfo:
        parse_query_filters({"is_palindrome": raw})
    assert excinfo.value.errors == {
        "is_palindrome": "Invalid value for 'is_palindrome', must be 'true' or 'false'"
    }


def test_every_invalid_integer_field_is_reported() -> None:
    with pytest.raises(FilterValidationError) as excinfo:
        parse_query_filters({"min_length": "abc", "max_length": ".5", "word_count": "7"})
    assert excinfo.value.errors == {
        "min_length": "Invalid value for 'min_length', must be an integer",
        "max_length": "Invalid value for 'max_length', must be an integer",
    }
    assert "min_length" in str(excinfo.value)


def test_integer_fields_use_the_leading_integer() -> None:
    filters = parse_query_filters({"min_length": "10abc", "max_length": "1.5", "word_count": " -2 words"})
    assert filters.applied() == {"min_length": 10, "max_length": 1, "word_count": -2}


def test_contains_character_must_be_a_string() -> None:
    with pytest.raises(FilterValidationError) as excinfo:
        parse_query_filters({"contains_character": ["a", "b"]})
    assert "contains_character" in excinfo.value.errors


# ------------------------------------------------------------------------------
# Natural language
# ------------------------------------------------------------------------------
@pytest.mark.parametrize("query, expected", [
    ("all single word palindromic strings", {"word_count": 1, "is_palindrome": True}),
    ("strings longer than 10 characters", {"min_length": 11}),
    ("strings containing the letter z", {"contains_character": "z"}),
    ("Palindrome strings that contain the FIRST VOWEL", {"is_palindrome": True, "contains_character": "a"}),
    ("one word", {"word_count": 1}),
])
def test_natural_language_heuristics(query: str, expected: dict) -> None:
    assert parse_natural_language_query(query).applied() == expected


def test_natural_language_later_rule_wins_on_same_field() -> None:
    filters = parse_natural_language_query(
        "strings longer than 5 containing the letter q with the first vowel"
    )
    assert filters.min_length == 6
    assert filters.contains_character == "a"


def test_unrecognised_natural_language_yields_empty_filters() -> None:
    assert parse_natural_language_query("show me something nice").is_empty()
    assert parse_natural_language_query("longer than ten").is_empty()


# ------------------------------------------------------------------------------
# Predicate rendering
# ------------------------------------------------------------------------------
@pytest.fixture
def seeded(db):
    for value in ["racecar", "Level", "hello world", "A man, a plan, a canal: Panama", "zz top", "50%_off"]:
        create_string_record(db, value)
    return db


def _values(db, **kwargs):
    return sorted(r.value for r in list_string_records(db, FilterSet(**kwargs)))


def test_empty_filter_set_matches_everything(seeded) -> None:
    assert len(_values(seeded)) == 6


def test_filters_combine_with_and(seeded) -> None:
    assert _values(seeded, is_palindrome=True, min_length=6) == [
        "A man, a plan, a canal: Panama",
        "racecar",
    ]
    assert _values(seeded, min_length=5, max_length=7) == ["50%_off", "Level", "racecar", "zz top"]
    assert _values(seeded, word_count=2) == ["hello world", "zz top"]


def test_contains_character_is_a_case_sensitive_substring(seeded) -> None:
    assert _values(seeded, contains_character="L") == ["Level"]
    assert _values(seeded, contains_character="z") == ["zz top"]
    assert _values(seeded, contains_character="%") == ["50%_off"]
    assert _values(seeded, contains_character="_") == ["50%_off"]
