"""Like, comment and follow mutations."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, cast

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_foreign_key_violation, is_unique_violation
from models import Comment, Follow, Like, User
from .accounts import find_user_by_id, is_following
from .errors import Conflict, InvalidInput, NotFound, StoreUnavailable
from .feed.schemas import CamelModel, CommentWithAuthor
from .post_policy import authorize, require_post_exists

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2200


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


class LikeRecord(CamelModel):
    id: int
    post_id: int
    account_id: str
    created_at: datetime

    @classmethod
    def from_like(cls, like: Like) -> "LikeRecord":
        if like.id is None:
            raise ValueError("Like record missing identifier")
        return cls(
            id=like.id,
            post_id=like.post_id,
            account_id=like.user_id,
            created_at=like.created_at,
        )


class FollowRecord(CamelModel):
    id: int
    follower_id: str
    following_id: str
    created_at: datetime

    @classmethod
    def from_follow(cls, follow: Follow) -> "FollowRecord":
        if follow.id is None:
            raise ValueError("Follow record missing identifier")
        return cls(
            id=follow.id,
            follower_id=follow.follower_id,
            following_id=follow.following_id,
            created_at=follow.created_at,
        )


def _already_liked() -> Conflict:
    return Conflict("Already liked", reason="already_liked", extra={"alreadyLiked": True})


def _already_following() -> Conflict:
    return Conflict(
        "Already following",
        reason="already_following",
        extra={"alreadyFollowing": True},
    )


async def _commit(session: AsyncSession, action: str, **context: Any) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Failed to %s", action, extra=context, exc_info=exc)
        raise StoreUnavailable(f"Failed to {action}") from exc


async def has_liked(session: AsyncSession, *, post_id: int, user_id: str) -> bool:
    like_id_column = cast(ColumnElement[int], Like.id)
    result = await session.execute(
        select(like_id_column)
        .where(_eq(Like.post_id, post_id), _eq(Like.user_id, user_id))
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def like_post(session: AsyncSession, actor: User, post_id: int) -> LikeRecord:
    """Record that ``actor`` likes the post; a second like is a ``Conflict``."""
    user_id = actor.id
    await require_post_exists(session, post_id)

    if await has_liked(session, post_id=post_id, user_id=user_id):
        raise _already_liked()

    like = Like(post_id=post_id, user_id=user_id)
    session.add(like)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise _already_liked() from exc
        if is_foreign_key_violation(exc):
            raise NotFound("Post not found") from exc
        logger.error(
            "Failed to like post",
            extra={"post_id": post_id, "user_id": user_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to like post") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "Failed to like post",
            extra={"post_id": post_id, "user_id": user_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to like post") from exc

    await session.refresh(like)
    return LikeRecord.from_like(like)


async def unlike_post(session: AsyncSession, actor: User, post_id: int) -> None:
    """Remove the caller's like; unliking a post never liked still succeeds."""
    await session.execute(
        delete(Like).where(_eq(Like.post_id, post_id), _eq(Like.user_id, actor.id))
    )
    await _commit(session, "unlike post", post_id=post_id, user_id=actor.id)


def normalize_comment_content(content: str | None) -> str:
    raw = content or ""
    if len(raw) > MAX_COMMENT_LENGTH:
        raise InvalidInput(f"Comment must be at most {MAX_COMMENT_LENGTH} characters")
    normalized = raw.strip()
    if not normalized:
        raise InvalidInput("Comment content is required")
    return normalized


async def create_comment(
    session: AsyncSession,
    actor: User,
    post_id: int,
    content: str | None,
) -> CommentWithAuthor:
    normalized = normalize_comment_content(content)
    author_id = actor.id
    await require_post_exists(session, post_id)

    comment = Comment(post_id=post_id, author_id=author_id, content=normalized)
    session.add(comment)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_foreign_key_violation(exc):
            raise NotFound("Post not found") from exc
        logger.error(
            "Failed to create comment",
            extra={"post_id": post_id, "author_id": author_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to create comment") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "Failed to create comment",
            extra={"post_id": post_id, "author_id": author_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to create comment") from exc

    await session.refresh(comment)
    return CommentWithAuthor.from_comment(comment, actor)


async def delete_comment(session: AsyncSession, actor: User, comment_id: int) -> None:
    result = await session.execute(
        select(Comment).where(_eq(Comment.id, comment_id)).limit(1)
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFound("Comment not found")
    authorize("delete_comment", actor.id, comment.author_id)

    await session.delete(comment)
    await _commit(session, "delete comment", comment_id=comment_id, author_id=actor.id)


async def follow_user(
    session: AsyncSession,
    actor: User,
    following_id: str,
) -> FollowRecord:
    """Make ``actor`` follow the account ``following_id``."""
    follower_id = actor.id
    if following_id == follower_id:
        raise InvalidInput("Cannot follow yourself")

    target = await find_user_by_id(session, following_id)
    if target is None:
        raise NotFound("User to follow not found")

    if await is_following(session, follower_id=follower_id, following_id=following_id):
        raise _already_following()

    follow = Follow(follower_id=follower_id, following_id=following_id)
    session.add(follow)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise _already_following() from exc
        if is_foreign_key_violation(exc):
            raise NotFound("User to follow not found") from exc
        logger.error(
            "Failed to follow user",
            extra={"follower_id": follower_id, "following_id": following_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to follow user") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "Failed to follow user",
            extra={"follower_id": follower_id, "following_id": following_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to follow user") from exc

    await session.refresh(follow)
    return FollowRecord.from_follow(follow)


async def unfollow_user(session: AsyncSession, actor: User, following_id: str) -> None:
    await session.execute(
        delete(Follow).where(
            _eq(Follow.follower_id, actor.id),
            _eq(Follow.following_id, following_id),
        )
    )
    await _commit(
        session,
        "unfollow user",
        follower_id=actor.id,
        following_id=following_id,
    )


__all__ = [
    "MAX_COMMENT_LENGTH",
    "LikeRecord",
    "FollowRecord",
    "has_liked",
    "like_post",
    "unlike_post",
    "normalize_comment_content",
    "create_comment",
    "delete_comment",
    "follow_user",
    "unfollow_user",
]
