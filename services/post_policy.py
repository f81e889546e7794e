"""Ownership checks shared by post and comment mutations."""

from __future__ import annotations

from typing import Any, Literal, cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Post
from .errors import Forbidden, NotFound

OwnedAction = Literal["edit_post", "delete_post", "delete_comment"]

_FORBIDDEN_DETAILS: dict[str, str] = {
    "edit_post": "Only the post owner can edit",
    "delete_post": "Only the post owner can delete",
    "delete_comment": "You can only delete your own comments",
}


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def is_owner(actor_id: str, owner_id: str) -> bool:
    return actor_id == owner_id


def authorize(action: OwnedAction, actor_id: str, owner_id: str) -> None:
    """Raise ``Forbidden`` unless ``actor_id`` owns the resource."""
    if not is_owner(actor_id, owner_id):
        raise Forbidden(_FORBIDDEN_DETAILS[action])


async def require_post_exists(
    session: AsyncSession,
    post_id: int,
) -> str:
    """Return the post author id or raise ``NotFound`` when the post does not exist."""
    post_author_column = cast(ColumnElement[str], Post.author_id)
    result = await session.execute(
        select(post_author_column)
        .where(_eq(Post.id, post_id))
        .limit(1)
    )
    author_id = result.scalar_one_or_none()
    if author_id is None:
        raise NotFound("Post not found")
    return author_id
