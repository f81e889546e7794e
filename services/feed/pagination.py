"""Page/limit pagination constants and helpers."""

from __future__ import annotations

from typing import TypeVar

from ..errors import InvalidInput

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

RowT = TypeVar("RowT")


def page_offset(page: int, limit: int) -> int:
    if page < 1:
        raise InvalidInput("page must be >= 1")
    if limit < 1:
        raise InvalidInput("limit must be positive")
    return (page - 1) * limit


def split_lookahead(rows: list[RowT], limit: int) -> tuple[list[RowT], bool]:
    """Trim a ``limit + 1`` lookahead fetch; the extra row only signals more pages."""
    has_more = len(rows) > limit
    if has_more:
        rows = rows[:limit]
    return rows, has_more
