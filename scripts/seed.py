"""Database seed script for local development.

Usage:
    python scripts/seed.py

Accounts are keyed by their identity-provider subject id, so running the
script twice leaves the data unchanged. Placeholder images are uploaded to
the configured bucket when MinIO is reachable.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, cast

from PIL import Image
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from db.session import AsyncSessionMaker  # noqa: E402
from models import Comment, Follow, Like, Post, User  # noqa: E402
from services.images import JPEG_CONTENT_TYPE  # noqa: E402
from services.storage import public_object_url, upload_object  # noqa: E402


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


@dataclass(frozen=True)
class SeedUser:
    subject_id: str
    display_name: str


@dataclass(frozen=True)
class SeedPost:
    subject_id: str
    image_key: str
    caption: str | None


@dataclass(frozen=True)
class SeedComment:
    subject_id: str
    image_key: str
    content: str


SEED_USERS: Sequence[SeedUser] = [
    SeedUser(subject_id="seed_alex", display_name="Alex Demo"),
    SeedUser(subject_id="seed_bella", display_name="Bella Demo"),
    SeedUser(subject_id="seed_cara", display_name="Cara Demo"),
    SeedUser(subject_id="seed_dan", display_name="Dan Demo"),
]

SEED_POSTS: Sequence[SeedPost] = [
    SeedPost("seed_alex", "posts/seed/alex-1.jpg", "Sunny day snapshots."),
    SeedPost("seed_alex", "posts/seed/alex-2.jpg", None),
    SeedPost("seed_bella", "posts/seed/bella-1.jpg", "First latte art attempt!"),
    SeedPost("seed_cara", "posts/seed/cara-1.jpg", "Golden hour on the way home."),
    SeedPost("seed_dan", "posts/seed/dan-1.jpg", "Sunday hill climb complete."),
]

SEED_LIKES: Sequence[tuple[str, str]] = [
    ("seed_bella", "posts/seed/alex-1.jpg"),
    ("seed_cara", "posts/seed/alex-1.jpg"),
    ("seed_alex", "posts/seed/bella-1.jpg"),
    ("seed_dan", "posts/seed/cara-1.jpg"),
]

SEED_COMMENTS: Sequence[SeedComment] = [
    SeedComment("seed_bella", "posts/seed/alex-1.jpg", "Love the light here."),
    SeedComment("seed_cara", "posts/seed/alex-1.jpg", "Where was this?"),
    SeedComment("seed_alex", "posts/seed/alex-1.jpg", "Riverside park!"),
    SeedComment("seed_dan", "posts/seed/bella-1.jpg", "Looks delicious."),
]

SEED_FOLLOWS: Sequence[tuple[str, str]] = [
    ("seed_alex", "seed_bella"),
    ("seed_bella", "seed_alex"),
    ("seed_cara", "seed_alex"),
    ("seed_dan", "seed_cara"),
]

PLACEHOLDER_COLORS: Sequence[tuple[int, int, int]] = [
    (243, 189, 80),
    (109, 163, 224),
    (170, 128, 215),
    (90, 170, 120),
]


def _build_placeholder_jpeg(seed_index: int) -> bytes:
    color = PLACEHOLDER_COLORS[seed_index % len(PLACEHOLDER_COLORS)]
    image = Image.new("RGB", (1080, 1080), color)
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=88)
    return buffer.getvalue()


def upload_seed_media(posts: Sequence[SeedPost]) -> dict[str, str]:
    """Upload placeholder images, returning the URL for each object key."""
    urls: dict[str, str] = {}
    for index, post in enumerate(posts):
        try:
            urls[post.image_key] = upload_object(
                post.image_key,
                _build_placeholder_jpeg(index),
                JPEG_CONTENT_TYPE,
            )
        except Exception as exc:
            print(f"Could not upload seed media '{post.image_key}': {exc}")
            urls[post.image_key] = public_object_url(post.image_key)
    return urls


async def get_or_create_user(session: AsyncSession, payload: SeedUser) -> User:
    result = await session.execute(
        select(User).where(_eq(User.external_subject_id, payload.subject_id))
    )
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(external_subject_id=payload.subject_id, display_name=payload.display_name)
    session.add(user)
    await session.flush()
    return user


async def ensure_posts(
    session: AsyncSession,
    users: dict[str, User],
    urls: dict[str, str],
) -> dict[str, Post]:
    posts: dict[str, Post] = {}
    for payload in SEED_POSTS:
        author = users[payload.subject_id]
        result = await session.execute(
            select(Post).where(
                _eq(Post.author_id, author.id),
                _eq(Post.image_key, payload.image_key),
            )
        )
        post = result.scalar_one_or_none()
        if post is None:
            post = Post(
                author_id=author.id,
                image_key=payload.image_key,
                image_url=urls[payload.image_key],
                caption=payload.caption,
            )
            session.add(post)
            await session.flush()
        posts[payload.image_key] = post
    return posts


async def ensure_likes(
    session: AsyncSession,
    users: dict[str, User],
    posts: dict[str, Post],
) -> None:
    for subject_id, image_key in SEED_LIKES:
        user = users[subject_id]
        post = posts[image_key]
        result = await session.execute(
            select(Like).where(_eq(Like.post_id, post.id), _eq(Like.user_id, user.id))
        )
        if result.scalar_one_or_none():
            continue
        session.add(Like(post_id=post.id, user_id=user.id))


async def ensure_comments(
    session: AsyncSession,
    users: dict[str, User],
    posts: dict[str, Post],
) -> None:
    for payload in SEED_COMMENTS:
        author = users[payload.subject_id]
        post = posts[payload.image_key]
        result = await session.execute(
            select(Comment).where(
                _eq(Comment.post_id, post.id),
                _eq(Comment.author_id, author.id),
                _eq(Comment.content, payload.content),
            )
        )
        if result.scalar_one_or_none():
            continue
        session.add(Comment(post_id=post.id, author_id=author.id, content=payload.content))
        # Distinct flushes keep comment timestamps in insertion order.
        await session.flush()


async def ensure_follows(session: AsyncSession, users: dict[str, User]) -> None:
    for follower_subject, following_subject in SEED_FOLLOWS:
        follower = users[follower_subject]
        following = users[following_subject]
        result = await session.execute(
            select(Follow).where(
                _eq(Follow.follower_id, follower.id),
                _eq(Follow.following_id, following.id),
            )
        )
        if result.scalar_one_or_none():
            continue
        session.add(Follow(follower_id=follower.id, following_id=following.id))


async def seed() -> None:
    urls = upload_seed_media(SEED_POSTS)

    async with AsyncSessionMaker() as session:
        users: dict[str, User] = {}
        for payload in SEED_USERS:
            users[payload.subject_id] = await get_or_create_user(session, payload)

        posts = await ensure_posts(session, users, urls)
        await ensure_likes(session, users, posts)
        await ensure_comments(session, users, posts)
        await ensure_follows(session, users)
        await session.commit()

    print("Seed data inserted.")
    print("   Accounts:", ", ".join(user.subject_id for user in SEED_USERS))
    print("   Posts:", len(SEED_POSTS))
    print("   Likes:", len(SEED_LIKES))
    print("   Comments:", len(SEED_COMMENTS))
    print("   Follows:", len(SEED_FOLLOWS))


if __name__ == "__main__":
    asyncio.run(seed())
