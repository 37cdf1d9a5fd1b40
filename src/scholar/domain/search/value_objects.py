"""Search value objects."""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

from scholar.domain.shared.exceptions import ErrorCode, ValidationError

MAX_QUERY_LENGTH = 256
MIN_INDEX_QUERY_LENGTH = 2

FilterValue = Union[str, int, float, bool]


class EntityKind(str, Enum):
    WORK = "work"
    PERSON = "person"


class SearchEngine(str, Enum):
    """Which backend produced the id list of a result."""

    INDEX_PLUS_STORE = "INDEX_PLUS_STORE"
    STORE_FALLBACK = "STORE_FALLBACK"


ALLOWED_FILTERS: dict[EntityKind, frozenset[str]] = {
    EntityKind.WORK: frozenset(
        {"type", "language", "year_from", "year_to", "peer_reviewed", "venue_name"},
    ),
    EntityKind.PERSON: frozenset({"verified"}),
}

_INT_FILTERS = frozenset({"year_from", "year_to"})
_BOOL_FILTERS = frozenset({"peer_reviewed", "verified"})
_TRUE_STRINGS = frozenset({"1", "true", "yes"})
_FALSE_STRINGS = frozenset({"0", "false", "no"})


def _coerce_bool(key: str, value: FilterValue) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    msg = f"Filter '{key}' must be a boolean"
    raise ValidationError(msg, ErrorCode.INVALID_FILTER, {"filter": key})


def _coerce_int(key: str, value: FilterValue) -> int:
    if isinstance(value, bool):
        msg = f"Filter '{key}' must be an integer"
        raise ValidationError(msg, ErrorCode.INVALID_FILTER, {"filter": key})
    try:
        return int(str(value).strip())
    except ValueError:
        msg = f"Filter '{key}' must be an integer"
        raise ValidationError(
            msg,
            ErrorCode.INVALID_FILTER,
            {"filter": key},
        ) from None


class SearchRequest(BaseModel):
    """A validated search for one entity kind.

    Use ``SearchRequest.create`` to build one from raw caller input; it
    trims the query, drops empty filter values and coerces the typed ones.
    """

    query: str
    entity_kind: EntityKind
    filters: dict[str, FilterValue]

    model_config = ConfigDict(frozen=True)

    @classmethod
    def create(
        cls,
        query: Any,
        entity_kind: EntityKind,
        filters: dict[str, Any] | None = None,
    ) -> SearchRequest:
        if not isinstance(query, str) or not query.strip():
            msg = "Search query must not be empty"
            raise ValidationError(msg, ErrorCode.INVALID_QUERY)
        trimmed = query.strip()
        if len(trimmed) > MAX_QUERY_LENGTH:
            msg = f"Search query must be at most {MAX_QUERY_LENGTH} characters"
            raise ValidationError(
                msg,
                ErrorCode.INVALID_QUERY,
                {"length": len(trimmed)},
            )

        allowed = ALLOWED_FILTERS[entity_kind]
        cleaned: dict[str, FilterValue] = {}
        for key, value in (filters or {}).items():
            if key not in allowed:
                msg = f"Unknown filter '{key}' for {entity_kind.value} search"
                raise ValidationError(msg, ErrorCode.INVALID_FILTER, {"filter": key})
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            if not isinstance(value, (str, int, float, bool)):
                msg = f"Filter '{key}' must be a scalar value"
                raise ValidationError(msg, ErrorCode.INVALID_FILTER, {"filter": key})
            if key in _INT_FILTERS:
                cleaned[key] = _coerce_int(key, value)
            elif key in _BOOL_FILTERS:
                cleaned[key] = _coerce_bool(key, value)
            else:
                cleaned[key] = value.strip() if isinstance(value, str) else value

        year_from = cleaned.get("year_from")
        year_to = cleaned.get("year_to")
        if year_from is not None and year_to is not None and year_from > year_to:
            msg = "year_from must not be greater than year_to"
            raise ValidationError(
                msg,
                ErrorCode.INVALID_FILTER,
                {"year_from": year_from, "year_to": year_to},
            )

        return cls(query=trimmed, entity_kind=entity_kind, filters=cleaned)

    @property
    def uses_index(self) -> bool:
        return len(self.query) >= MIN_INDEX_QUERY_LENGTH
