"""Post creation, caption edits and deletion."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, cast
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Comment, Like, Post, User
from models._time import utcnow
from .errors import InvalidInput, NotFound, StoreUnavailable
from .feed.query import enrich_posts
from .feed.schemas import EnrichedPost
from .post_policy import authorize
from .storage import delete_object, upload_object

logger = logging.getLogger(__name__)

MAX_POST_CAPTION_LENGTH = 2200


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def normalize_caption(caption: str | None) -> str | None:
    """Trim a caption; blank captions are stored as NULL."""
    if caption is None:
        return None

    normalized_caption = caption.strip()
    if len(normalized_caption) > MAX_POST_CAPTION_LENGTH:
        raise InvalidInput(
            f"Caption must be at most {MAX_POST_CAPTION_LENGTH} characters"
        )
    if normalized_caption == "":
        return None
    return normalized_caption


def build_object_key(author_id: str) -> str:
    return f"posts/{author_id}/{uuid4().hex}.jpg"


async def _discard_upload(object_key: str) -> None:
    try:
        await asyncio.to_thread(delete_object, object_key)
    except Exception as exc:
        logger.warning(
            "Failed to remove uploaded media",
            extra={"object_key": object_key},
            exc_info=exc,
        )


async def create_post(
    session: AsyncSession,
    author: User,
    *,
    image_bytes: bytes,
    content_type: str,
    caption: str | None = None,
) -> EnrichedPost:
    """Upload processed media and insert the post row referencing it.

    When the insert fails the uploaded object is removed again, best-effort.
    """
    normalized_caption = normalize_caption(caption)
    author_id = author.id
    object_key = build_object_key(author_id)

    try:
        image_url = await asyncio.to_thread(
            upload_object,
            object_key,
            image_bytes,
            content_type,
        )
    except Exception as exc:
        logger.error(
            "Media upload failed",
            extra={"object_key": object_key, "author_id": author_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to upload image") from exc

    post = Post(
        author_id=author_id,
        image_key=object_key,
        image_url=image_url,
        caption=normalized_caption,
    )
    session.add(post)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "Failed to insert post",
            extra={"object_key": object_key, "author_id": author_id},
            exc_info=exc,
        )
        await _discard_upload(object_key)
        raise StoreUnavailable("Failed to create post") from exc

    await session.refresh(post)
    logger.info("Post created", extra={"post_id": post.id, "author_id": author_id})
    return EnrichedPost.from_row(post, author)


async def _load_post(session: AsyncSession, post_id: int) -> Post:
    result = await session.execute(select(Post).where(_eq(Post.id, post_id)).limit(1))
    post = result.scalar_one_or_none()
    if post is None:
        raise NotFound("Post not found")
    return post


async def update_post_caption(
    session: AsyncSession,
    post_id: int,
    actor: User,
    caption: str | None,
    *,
    caption_provided: bool = True,
) -> EnrichedPost:
    """Edit an owned post.

    A blank or null caption clears it. With ``caption_provided=False`` the
    caption is left as is and only ``updated_at`` moves.
    """
    normalized_caption = normalize_caption(caption) if caption_provided else None
    post = await _load_post(session, post_id)
    authorize("edit_post", actor.id, post.author_id)

    if caption_provided:
        post.caption = normalized_caption
    post.updated_at = utcnow()
    session.add(post)
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Failed to update post", extra={"post_id": post_id}, exc_info=exc)
        raise StoreUnavailable("Failed to update post") from exc

    await session.refresh(post)
    enriched = EnrichedPost.from_row(post, actor)
    await enrich_posts(session, [enriched], viewer_id=actor.id)
    return enriched


async def delete_post(session: AsyncSession, post_id: int, actor: User) -> None:
    """Delete a post with its likes and comments, then drop its media.

    The row removal is authoritative: a failed media delete is logged and
    leaves an orphaned object behind.
    """
    post = await _load_post(session, post_id)
    authorize("delete_post", actor.id, post.author_id)
    object_key = post.image_key

    try:
        await session.execute(delete(Like).where(_eq(Like.post_id, post_id)))
        await session.execute(delete(Comment).where(_eq(Comment.post_id, post_id)))
        await session.delete(post)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Failed to delete post", extra={"post_id": post_id}, exc_info=exc)
        raise StoreUnavailable("Failed to delete post") from exc

    logger.info("Post deleted", extra={"post_id": post_id, "author_id": actor.id})
    await _discard_upload(object_key)


__all__ = [
    "MAX_POST_CAPTION_LENGTH",
    "normalize_caption",
    "build_object_key",
    "create_post",
    "update_post_caption",
    "delete_post",
]
