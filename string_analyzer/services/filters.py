"""
Filter model shared by the ``GET /strings`` query parameters and the
natural-language endpoint.

Both construction paths produce a :class:`FilterSet`; :func:`apply_filters`
turns one into a WHERE clause over :class:`StringRecord`.
"""
import re
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import and_
from sqlalchemy.orm import Query

from string_analyzer.models.string_record import StringRecord


class FilterSet(BaseModel):
    is_palindrome: Optional[bool] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    word_count: Optional[int] = None
    contains_character: Optional[str] = None

    def applied(self) -> Dict:
        """Only the constraints that are actually set"""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.applied()


class FilterValidationError(ValueError):
    """One or more filter parameters could not be parsed."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(errors.values()))


# ------------------------------------------------------------------------------
# EXPLICIT CONSTRUCTION (query parameters)
# ------------------------------------------------------------------------------
# Leading integer; trailing text such as "10abc" or "1.5" is ignored
_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def _parse_bool(field: str, raw) -> bool:
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise ValueError(f"Invalid value for '{field}', must be 'true' or 'false'")


def _parse_int(field: str, raw) -> int:
    found = _LEADING_INTEGER.match(raw) if isinstance(raw, str) else None
    if not found:
        raise ValueError(f"Invalid value for '{field}', must be an integer")
    return int(found.group(1))


def _parse_str(field: str, raw) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"Invalid value for '{field}', must be a string")
    return raw


_PARSERS = {
    "is_palindrome": _parse_bool,
    "min_length": _parse_int,
    "max_length": _parse_int,
    "word_count": _parse_int,
    "contains_character": _parse_str,
}


def parse_query_filters(params: Mapping[str, object]) -> FilterSet:
    """
    Build a FilterSet from raw query-string values.

    Unknown keys are ignored. Every invalid field is reported, keyed by
    field name, in a single FilterValidationError.
    """
    values = {}
    errors = {}
    for field, parser in _PARSERS.items():
        if field not in params or params[field] is None:
            continue
        try:
            values[field] = parser(field, params[field])
        except ValueError as e:
            errors[field] = str(e)

    if errors:
        raise FilterValidationError(errors)
    return FilterSet(**values)


# ------------------------------------------------------------------------------
# NATURAL-LANGUAGE CONSTRUCTION
# ------------------------------------------------------------------------------
Rule = Tuple[Callable[[str], Optional[re.Match]], Callable[[re.Match], Dict]]


def _substring(*needles: str) -> Callable[[str], Optional[re.Match]]:
    pattern = re.compile("|".join(re.escape(n) for n in needles))
    return pattern.search


# Evaluated in order; a later rule overwrites an earlier one on the same field.
NATURAL_LANGUAGE_RULES: List[Rule] = [
    (_substring("palindrome", "palindromic"), lambda m: {"is_palindrome": True}),
    (_substring("single word", "one word"), lambda m: {"word_count": 1}),
    (re.compile(r"longer than (\d+)", re.ASCII).search,
     lambda m: {"min_length": int(m.group(1)) + 1}),
    (re.compile(r"containing the letter (\w)", re.ASCII).search,
     lambda m: {"contains_character": m.group(1)}),
    (_substring("first vowel"), lambda m: {"contains_character": "a"}),
]


def parse_natural_language_query(query: str) -> FilterSet:
    """
    Translate a free-text query into a FilterSet using fixed heuristics.

    Examples:
    - "all single word palindromic strings" -> {word_count: 1, is_palindrome: true}
    - "strings longer than 10 characters" -> {min_length: 11}
    - "strings containing the letter z" -> {contains_character: "z"}

    An empty FilterSet means nothing in the query was recognised.
    """
    text = query.lower()
    filters = {}
    for match, effect in NATURAL_LANGUAGE_RULES:
        found = match(text)
        if found:
            filters.update(effect(found))
    return FilterSet(**filters)


# ------------------------------------------------------------------------------
# PREDICATE RENDERING
# ------------------------------------------------------------------------------
def build_predicates(filters: FilterSet) -> list:
    """Render each set constraint as a SQLAlchemy boolean clause"""
    predicates = []

    if filters.is_palindrome is not None:
        predicates.append(StringRecord.is_palindrome == filters.is_palindrome)

    if filters.min_length is not None:
        predicates.append(StringRecord.length >= filters.min_length)

    if filters.max_length is not None:
        predicates.append(StringRecord.length <= filters.max_length)

    if filters.word_count is not None:
        predicates.append(StringRecord.word_count == filters.word_count)

    if filters.contains_character is not None:
        predicates.append(
            StringRecord.value.contains(filters.contains_character, autoescape=True)
        )

    return predicates


def apply_filters(query: Query, filters: FilterSet) -> Query:
    """Restrict ``query`` to records matching every constraint in ``filters``"""
    predicates = build_predicates(filters)
    if predicates:
        query = query.filter(and_(*predicates))
    return query
