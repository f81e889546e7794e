"""Shared SQLAlchemy helpers for feed services."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, cast

from sqlalchemy.sql import ColumnElement


def eq(column: Any, value: Any) -> ColumnElement[bool]:
    """Typed equality expression helper."""
    return cast(ColumnElement[bool], column == value)


def desc(column: Any) -> Any:
    """Typed descending ordering helper."""
    return cast(Any, column).desc()


def asc(column: Any) -> Any:
    """Typed ascending ordering helper."""
    return cast(Any, column).asc()


def in_(column: Any, values: Iterable[Any]) -> ColumnElement[bool]:
    """Typed ``IN`` expression helper."""
    return cast(ColumnElement[bool], cast(Any, column).in_(list(values)))


def unique_ids(post_ids: Iterable[int | None]) -> list[int]:
    """Deduplicate ids while keeping first-seen order; drops ``None``."""
    return list(dict.fromkeys(post_id for post_id in post_ids if post_id is not None))
