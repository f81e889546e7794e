"""Account mirroring, lookup, search and profile statistics."""

from __future__ import annotations

import logging
from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.errors import is_unique_violation
from models import Follow, Post, User
from .errors import NotFound, StoreUnavailable
from .feed.schemas import CamelModel, UserSummary

logger = logging.getLogger(__name__)

MAX_DISPLAY_NAME_LENGTH = 80
SEARCH_RESULT_LIMIT = 20


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _ilike(column: Any, pattern: str) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column.ilike(pattern, escape="\\"))


class ProfileStats(CamelModel):
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0


class ProfileView(CamelModel):
    user: UserSummary
    stats: ProfileStats
    is_following: bool | None = None
    is_own_profile: bool | None = None


def normalize_display_name(display_name: str | None, fallback: str) -> str:
    """Trim ``display_name`` to the column width, falling back when blank."""
    candidate = (display_name or "").strip() or fallback.strip()
    return candidate[:MAX_DISPLAY_NAME_LENGTH]


async def find_user_by_subject(
    session: AsyncSession,
    subject_id: str,
) -> User | None:
    result = await session.execute(
        select(User).where(_eq(User.external_subject_id, subject_id)).limit(1)
    )
    return result.scalar_one_or_none()


async def find_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    result = await session.execute(select(User).where(_eq(User.id, user_id)).limit(1))
    return result.scalar_one_or_none()


async def sync_user(
    session: AsyncSession,
    subject_id: str,
    *,
    display_name: str | None = None,
    token_name: str | None = None,
) -> User:
    """Create or refresh the account mirrored for ``subject_id``.

    An explicit ``display_name`` wins; otherwise a new account takes the
    token's ``name`` claim and then the subject id itself. Existing accounts
    keep their name unless one is supplied explicitly.
    """
    user = await find_user_by_subject(session, subject_id)
    if user is not None:
        if display_name is not None and display_name.strip():
            user.display_name = normalize_display_name(display_name, user.display_name)
            session.add(user)
            try:
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error(
                    "Failed to update account",
                    extra={"subject_id": subject_id},
                    exc_info=exc,
                )
                raise StoreUnavailable("Failed to sync user") from exc
            await session.refresh(user)
        return user

    user = User(
        external_subject_id=subject_id,
        display_name=normalize_display_name(display_name or token_name, subject_id),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not is_unique_violation(exc):
            logger.error(
                "Failed to create account",
                extra={"subject_id": subject_id},
                exc_info=exc,
            )
            raise StoreUnavailable("Failed to sync user") from exc
        # A concurrent first sign-in created the row; use theirs.
        existing = await find_user_by_subject(session, subject_id)
        if existing is None:
            raise StoreUnavailable("Failed to sync user") from exc
        return existing
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error(
            "Failed to create account",
            extra={"subject_id": subject_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to sync user") from exc

    await session.refresh(user)
    logger.info("Account created", extra={"subject_id": subject_id, "user_id": user.id})
    return user


async def search_users(
    session: AsyncSession,
    query: str,
    *,
    limit: int = SEARCH_RESULT_LIMIT,
) -> list[UserSummary]:
    """Return accounts whose display name contains ``query``, ignoring case."""
    term = query.strip()
    if not term:
        return []

    name_column = cast(Any, User.display_name)
    try:
        result = await session.execute(
            select(User)
            .where(_ilike(name_column, f"%{_escape_like(term)}%"))
            .order_by(name_column.asc(), cast(Any, User.id).asc())
            .limit(limit)
        )
    except SQLAlchemyError as exc:
        logger.error("User search failed", extra={"query": term}, exc_info=exc)
        raise StoreUnavailable("Failed to search users") from exc
    return [UserSummary.from_user(user) for user in result.scalars().all()]


async def _count(session: AsyncSession, model: Any, column: Any, value: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(model).where(_eq(column, value))
    )
    return int(result.scalar_one() or 0)


async def is_following(
    session: AsyncSession,
    *,
    follower_id: str,
    following_id: str,
) -> bool:
    follow_id_column = cast(ColumnElement[int], Follow.id)
    result = await session.execute(
        select(follow_id_column)
        .where(
            _eq(Follow.follower_id, follower_id),
            _eq(Follow.following_id, following_id),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def get_profile(
    session: AsyncSession,
    subject_id: str,
    *,
    viewer: User | None = None,
) -> ProfileView:
    """Return the public profile for the account behind ``subject_id``.

    ``isFollowing`` and ``isOwnProfile`` are only filled in for a synced viewer.
    """
    try:
        user = await find_user_by_subject(session, subject_id)
        if user is None:
            raise NotFound("User not found")

        stats = ProfileStats(
            posts_count=await _count(session, Post, Post.author_id, user.id),
            followers_count=await _count(session, Follow, Follow.following_id, user.id),
            following_count=await _count(session, Follow, Follow.follower_id, user.id),
        )

        profile = ProfileView(user=UserSummary.from_user(user), stats=stats)
        if viewer is not None:
            profile.is_own_profile = viewer.id == user.id
            profile.is_following = (
                False
                if profile.is_own_profile
                else await is_following(
                    session,
                    follower_id=viewer.id,
                    following_id=user.id,
                )
            )
    except SQLAlchemyError as exc:
        logger.error(
            "Profile lookup failed",
            extra={"subject_id": subject_id},
            exc_info=exc,
        )
        raise StoreUnavailable("Failed to fetch user") from exc
    return profile


__all__ = [
    "ProfileStats",
    "ProfileView",
    "normalize_display_name",
    "find_user_by_subject",
    "find_user_by_id",
    "sync_user",
    "search_users",
    "is_following",
    "get_profile",
]
