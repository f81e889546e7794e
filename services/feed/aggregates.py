"""Per-post like and comment counts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Comment, Like
from .common import in_, unique_ids


@dataclass(frozen=True)
class PostAggregate:
    likes_count: int = 0
    comments_count: int = 0


ZERO_AGGREGATE = PostAggregate()


async def _count_by_post(
    session: AsyncSession,
    post_id_column: ColumnElement[int],
    counted_column: Any,
    post_ids: list[int],
) -> dict[int, int]:
    count_column = cast(Any, func.count(counted_column))
    result = await session.execute(
        select(post_id_column, count_column)
        .where(in_(post_id_column, post_ids))
        .group_by(post_id_column)
    )
    return {post_id: int(total or 0) for post_id, total in result.all()}


async def get_aggregates(
    session: AsyncSession,
    post_ids: Iterable[int],
) -> dict[int, PostAggregate]:
    """Return like/comment counts keyed by post id.

    Posts with neither likes nor comments are absent from the map; callers
    read them as ``ZERO_AGGREGATE``.
    """
    ids = unique_ids(post_ids)
    if not ids:
        return {}

    like_counts = await _count_by_post(
        session,
        cast(ColumnElement[int], Like.post_id),
        Like.id,
        ids,
    )
    comment_counts = await _count_by_post(
        session,
        cast(ColumnElement[int], Comment.post_id),
        Comment.id,
        ids,
    )
    return {
        post_id: PostAggregate(
            likes_count=like_counts.get(post_id, 0),
            comments_count=comment_counts.get(post_id, 0),
        )
        for post_id in like_counts.keys() | comment_counts.keys()
    }
