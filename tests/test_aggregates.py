"""Tests for the per-post secondary lookups."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import Comment, Like, Post, User
from services.errors import InvalidInput
from services.feed import (
    ZERO_AGGREGATE,
    get_aggregates,
    get_comment_thread,
    get_liked_post_ids,
    get_recent_comments,
    page_offset,
)
from services.feed.pagination import split_lookahead

BASE_TIME = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


async def _seed(session: AsyncSession) -> tuple[list[User], list[Post]]:
    users = [User(external_subject_id=f"user_{i}", display_name=f"User {i}") for i in range(4)]
    session.add_all(users)
    await session.commit()

    posts = [
        Post(
            author_id=users[0].id,
            image_key=f"posts/{i}.jpg",
            image_url=f"http://media.local/posts/{i}.jpg",
        )
        for i in range(3)
    ]
    session.add_all(posts)
    await session.commit()
    return users, posts


@pytest.mark.asyncio
async def test_aggregates_count_likes_and_comments_exactly(db_session: AsyncSession):
    users, posts = await _seed(db_session)
    first, second, untouched = posts
    for user in users[:3]:
        db_session.add(Like(post_id=first.id, user_id=user.id))
    db_session.add(Like(post_id=second.id, user_id=users[1].id))
    for index in range(4):
        db_session.add(Comment(post_id=second.id, author_id=users[2].id, content=f"c{index}"))
    await db_session.commit()

    aggregates = await get_aggregates(db_session, [first.id, second.id, untouched.id])

    assert aggregates[first.id].likes_count == 3
    assert aggregates[first.id].comments_count == 0
    assert aggregates[second.id].likes_count == 1
    assert aggregates[second.id].comments_count == 4
    assert aggregates.get(untouched.id, ZERO_AGGREGATE) == ZERO_AGGREGATE


@pytest.mark.asyncio
async def test_lookups_skip_queries_for_empty_input(db_session: AsyncSession):
    assert await get_aggregates(db_session, []) == {}
    assert await get_recent_comments(db_session, []) == {}
    assert await get_liked_post_ids(db_session, "someone", []) == set()


@pytest.mark.asyncio
async def test_liked_post_ids_are_scoped_to_viewer(db_session: AsyncSession):
    users, posts = await _seed(db_session)
    db_session.add(Like(post_id=posts[0].id, user_id=users[1].id))
    db_session.add(Like(post_id=posts[2].id, user_id=users[2].id))
    await db_session.commit()
    post_ids = [post.id for post in posts]

    assert await get_liked_post_ids(db_session, users[1].id, post_ids) == {posts[0].id}
    assert await get_liked_post_ids(db_session, users[3].id, post_ids) == set()
    assert await get_liked_post_ids(db_session, None, post_ids) == set()


@pytest.mark.asyncio
async def test_recent_comments_respect_preview_size(db_session: AsyncSession):
    users, posts = await _seed(db_session)
    post = posts[0]
    for index in range(4):
        created_at = BASE_TIME + timedelta(minutes=index)
        db_session.add(
            Comment(
                post_id=post.id,
                author_id=users[index].id,
                content=f"c{index}",
                created_at=created_at,
                updated_at=created_at,
            )
        )
    await db_session.commit()

    previews = await get_recent_comments(db_session, [post.id], preview_size=3)
    everything = await get_recent_comments(db_session, [post.id], preview_size=None)
    thread = await get_comment_thread(db_session, post.id)

    assert [c.content for c in previews[post.id]] == ["c3", "c2", "c1"]
    assert [c.content for c in everything[post.id]] == ["c3", "c2", "c1", "c0"]
    assert [c.content for c in thread] == ["c0", "c1", "c2", "c3"]
    assert thread[0].author.display_name == "User 0"


def test_page_offset_and_lookahead():
    assert page_offset(1, 10) == 0
    assert page_offset(3, 10) == 20
    with pytest.raises(InvalidInput):
        page_offset(0, 10)

    rows, has_more = split_lookahead([1, 2, 3], 2)
    assert rows == [1, 2]
    assert has_more is True
    assert split_lookahead([1, 2], 2) == ([1, 2], False)
