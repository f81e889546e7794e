"""Which posts on a page the current viewer has liked."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Like
from .common import eq, in_, unique_ids


async def get_liked_post_ids(
    session: AsyncSession,
    viewer_id: str | None,
    post_ids: Iterable[int],
) -> set[int]:
    if viewer_id is None:
        return set()
    ids = unique_ids(post_ids)
    if not ids:
        return set()

    post_id_column = cast(ColumnElement[int], Like.post_id)
    result = await session.execute(
        select(post_id_column).where(
            eq(Like.user_id, viewer_id),
            in_(post_id_column, ids),
        )
    )
    return {row[0] for row in result.all()}
