"""Pagination value objects.

Callers may send any mix of ``page``, ``limit`` and ``offset`` as raw strings
or numbers. ``Pagination.normalize`` turns them into a consistent window where
``offset`` always sits on a page boundary, and ``PaginationMeta.build`` derives
the navigation fields returned alongside results.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _parse_int(raw: Any, default: int) -> int:
    """Parse an integer the lenient way query strings need.

    Accepts ints, integral floats and numeric strings (``"20"``, ``" 3 "``).
    Anything else, including booleans, falls back to ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw == raw else default  # NaN
    try:
        return int(str(raw).strip())
    except ValueError:
        try:
            return int(float(str(raw).strip()))
        except ValueError:
            return default


def _is_present(raw: Any) -> bool:
    return raw is not None and not (isinstance(raw, str) and not raw.strip())


class Pagination(BaseModel):
    """Normalized pagination window."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1, le=MAX_LIMIT)
    offset: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def normalize(
        cls,
        page: Any = None,
        limit: Any = None,
        offset: Any = None,
    ) -> Pagination:
        """Build a window from raw caller input.

        ``limit`` is clamped to ``[1, 100]`` with 0 and garbage meaning the
        default of 10. An explicit ``page`` wins over ``offset``; an offset
        alone snaps down to the page that contains it.
        """
        parsed_limit = _parse_int(limit, DEFAULT_LIMIT)
        if parsed_limit == 0:
            parsed_limit = DEFAULT_LIMIT
        parsed_limit = max(1, min(parsed_limit, MAX_LIMIT))

        if _is_present(page):
            parsed_page = max(1, _parse_int(page, 1))
        elif _is_present(offset):
            parsed_offset = max(0, _parse_int(offset, 0))
            parsed_page = parsed_offset // parsed_limit + 1
        else:
            parsed_page = 1

        return cls(
            page=parsed_page,
            limit=parsed_limit,
            offset=(parsed_page - 1) * parsed_limit,
        )

    @classmethod
    def from_mapping(cls, params: dict[str, Any]) -> Pagination:
        return cls.normalize(
            params.get("page"),
            params.get("limit"),
            params.get("offset"),
        )


class PaginationMeta(BaseModel):
    """Navigation metadata attached to a page of results."""

    page: int
    limit: int
    offset: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> PaginationMeta:
        total = max(0, int(total))
        total_pages = -(-total // limit) if total > 0 else 0
        return cls(
            page=page,
            limit=limit,
            offset=(page - 1) * limit,
            total=total,
            total_pages=total_pages,
            has_next=total_pages > 0 and page < total_pages,
            has_prev=total_pages > 0 and page > 1,
        )

    @classmethod
    def for_window(cls, window: Pagination, total: int) -> PaginationMeta:
        return cls.build(window.page, window.limit, total)
