"""Feed assembly: base page query, secondary lookups and merge."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Post, User
from ..errors import NotFound, StoreUnavailable
from .aggregates import ZERO_AGGREGATE, PostAggregate, get_aggregates
from .comments import DEFAULT_PREVIEW_SIZE, get_comment_thread, get_recent_comments
from .common import desc, eq
from .pagination import page_offset, split_lookahead
from .schemas import CommentWithAuthor, EnrichedPost, FeedPage, PaginationMeta, PostStats
from .viewer_likes import get_liked_post_ids

logger = logging.getLogger(__name__)

FallbackT = TypeVar("FallbackT")


def _empty_page(page: int, limit: int) -> FeedPage:
    return FeedPage(
        posts=[],
        pagination=PaginationMeta(page=page, limit=limit, total=0, has_more=False),
    )


async def _or_default(
    session: AsyncSession,
    lookup: str,
    pending: Awaitable[FallbackT],
    fallback: FallbackT,
    *,
    post_ids: list[int],
) -> FallbackT:
    """Await a secondary lookup, degrading to ``fallback`` on store errors."""
    try:
        return await pending
    except SQLAlchemyError as exc:
        logger.warning(
            "Feed %s lookup failed; serving defaults",
            lookup,
            extra={"lookup": lookup, "post_ids": post_ids},
            exc_info=exc,
        )
        # Clear the failed transaction so the remaining lookups can still run.
        await session.rollback()
        return fallback


async def _resolve_author_id(session: AsyncSession, subject_id: str) -> str | None:
    user_id_column = cast(ColumnElement[str], User.id)
    try:
        result = await session.execute(
            select(user_id_column)
            .where(eq(User.external_subject_id, subject_id))
            .limit(1)
        )
    except SQLAlchemyError as exc:
        logger.warning(
            "Author filter resolution failed",
            extra={"author_subject_id": subject_id},
            exc_info=exc,
        )
        await session.rollback()
        return None
    return result.scalar_one_or_none()


async def enrich_posts(
    session: AsyncSession,
    posts: list[EnrichedPost],
    *,
    viewer_id: str | None,
    preview_size: int | None = DEFAULT_PREVIEW_SIZE,
) -> list[EnrichedPost]:
    """Attach counts, viewer like state and comment previews in place."""
    if not posts:
        return posts

    post_ids = [post.id for post in posts]
    aggregates: dict[int, PostAggregate] = await _or_default(
        session,
        "aggregates",
        get_aggregates(session, post_ids),
        {},
        post_ids=post_ids,
    )
    liked_ids: set[int] = await _or_default(
        session,
        "viewer_likes",
        get_liked_post_ids(session, viewer_id, post_ids),
        set(),
        post_ids=post_ids,
    )
    previews: dict[int, list[CommentWithAuthor]] = await _or_default(
        session,
        "comment_previews",
        get_recent_comments(session, post_ids, preview_size),
        {},
        post_ids=post_ids,
    )

    for post in posts:
        aggregate = aggregates.get(post.id, ZERO_AGGREGATE)
        post.stats = PostStats(
            likes_count=aggregate.likes_count,
            comments_count=aggregate.comments_count,
        )
        post.viewer_has_liked = post.id in liked_ids
        post.recent_comments = previews.get(post.id, [])
    return posts


async def get_feed(
    session: AsyncSession,
    *,
    page: int,
    limit: int,
    author_subject_id: str | None = None,
    viewer_id: str | None = None,
    preview_size: int | None = DEFAULT_PREVIEW_SIZE,
) -> FeedPage:
    """Return one page of posts, newest first, enriched for ``viewer_id``.

    ``author_subject_id`` is the identity-provider subject of the author to
    filter by; an unknown subject yields an empty page rather than an error.
    """
    offset = page_offset(page, limit)

    author_id: str | None = None
    if author_subject_id is not None:
        author_id = await _resolve_author_id(session, author_subject_id)
        if author_id is None:
            return _empty_page(page, limit)

    query = (
        select(cast(Any, Post), cast(Any, User))
        .join(User, eq(User.id, Post.author_id))
        .order_by(desc(Post.created_at), desc(Post.id))
    )
    if author_id is not None:
        query = query.where(eq(Post.author_id, author_id))
    if offset > 0:
        query = query.offset(offset)
    query = query.limit(limit + 1)

    try:
        result = await session.execute(query)
    except SQLAlchemyError as exc:
        logger.error(
            "Feed base page query failed",
            extra={"page": page, "limit": limit, "author_id": author_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to fetch posts") from exc

    rows, has_more = split_lookahead(list(result.all()), limit)
    posts = [EnrichedPost.from_row(post, author) for post, author in rows]
    await enrich_posts(
        session,
        posts,
        viewer_id=viewer_id,
        preview_size=preview_size,
    )
    return FeedPage(
        posts=posts,
        pagination=PaginationMeta(
            page=page,
            limit=limit,
            total=len(posts),
            has_more=has_more,
        ),
    )


async def get_post_detail(
    session: AsyncSession,
    post_id: int,
    *,
    viewer_id: str | None = None,
) -> EnrichedPost:
    """Return a single post with its full comment thread, oldest first."""
    try:
        result = await session.execute(
            select(cast(Any, Post), cast(Any, User))
            .join(User, eq(User.id, Post.author_id))
            .where(eq(Post.id, post_id))
            .limit(1)
        )
    except SQLAlchemyError as exc:
        logger.error(
            "Post detail query failed",
            extra={"post_id": post_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to fetch post") from exc

    row = result.first()
    if row is None:
        raise NotFound("Post not found")

    post, author = row
    enriched = EnrichedPost.from_row(post, author)
    # Previews are skipped here; the detail view carries the whole thread instead.
    await enrich_posts(session, [enriched], viewer_id=viewer_id, preview_size=0)
    enriched.recent_comments = await _or_default(
        session,
        "comment_thread",
        get_comment_thread(session, post_id),
        [],
        post_ids=[post_id],
    )
    return enriched
