"""Comment lookups for list previews and post detail threads."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Comment, User
from .common import asc, desc, eq, in_, unique_ids
from .schemas import CommentWithAuthor

DEFAULT_PREVIEW_SIZE = 2


def _comment_with_author_query() -> Any:
    return select(cast(Any, Comment), cast(Any, User)).join(
        User, eq(User.id, Comment.author_id)
    )


async def get_recent_comments(
    session: AsyncSession,
    post_ids: Iterable[int],
    preview_size: int | None = DEFAULT_PREVIEW_SIZE,
) -> dict[int, list[CommentWithAuthor]]:
    """Return up to ``preview_size`` comments per post, newest first.

    ``preview_size=None`` returns every comment, still newest first.
    """
    ids = unique_ids(post_ids)
    if not ids:
        return {}
    if preview_size is not None and preview_size <= 0:
        return {}

    created_at_column = cast(Any, Comment.created_at)
    comment_id_column = cast(Any, Comment.id)
    query = _comment_with_author_query()
    if preview_size is None:
        query = query.where(in_(Comment.post_id, ids))
    else:
        preview_rank = func.row_number().over(
            partition_by=cast(Any, Comment.post_id),
            order_by=(desc(created_at_column), desc(comment_id_column)),
        )
        ranked = (
            select(comment_id_column.label("comment_id"), preview_rank.label("preview_rank"))
            .where(in_(Comment.post_id, ids))
            .subquery("ranked_comments")
        )
        query = query.join(ranked, eq(ranked.c.comment_id, Comment.id)).where(
            ranked.c.preview_rank <= preview_size
        )
    query = query.order_by(desc(created_at_column), desc(comment_id_column))

    result = await session.execute(query)
    previews: dict[int, list[CommentWithAuthor]] = {}
    for comment, author in result.all():
        previews.setdefault(comment.post_id, []).append(
            CommentWithAuthor.from_comment(comment, author)
        )
    return previews


async def get_comment_thread(
    session: AsyncSession,
    post_id: int,
) -> list[CommentWithAuthor]:
    """Return every comment on a post, oldest first (detail view order)."""
    query = (
        _comment_with_author_query()
        .where(eq(Comment.post_id, post_id))
        .order_by(asc(Comment.created_at), asc(Comment.id))
    )
    result = await session.execute(query)
    return [
        CommentWithAuthor.from_comment(comment, author)
        for comment, author in result.all()
    ]
