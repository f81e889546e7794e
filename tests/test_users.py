"""Tests for account sync, search and profile endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import User
from services import accounts
from services.accounts import sync_user
from tests.helpers import DummyMinio, auth_headers, create_post_via_api, sync_account


@pytest.mark.asyncio
async def test_sync_creates_account_once(
    async_client: AsyncClient,
    db_session: AsyncSession,
):
    created = await sync_account(async_client, "user_new", "  New Person  ")
    assert created["externalSubjectId"] == "user_new"
    assert created["displayName"] == "New Person"

    again = await sync_account(async_client, "user_new")
    assert again["id"] == created["id"]
    assert again["displayName"] == "New Person"

    renamed = await sync_account(async_client, "user_new", "Renamed")
    assert renamed["id"] == created["id"]
    assert renamed["displayName"] == "Renamed"

    result = await db_session.execute(select(User))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_sync_falls_back_to_token_name_then_subject(async_client: AsyncClient):
    named = await async_client.post(
        "/api/users/sync",
        headers=auth_headers("user_named", name="Token Name"),
    )
    assert named.status_code == 200
    assert named.json()["user"]["displayName"] == "Token Name"

    anonymous = await sync_account(async_client, "user_plain")
    assert anonymous["displayName"] == "user_plain"


@pytest.mark.asyncio
async def test_sync_requires_token(async_client: AsyncClient):
    response = await async_client.post("/api/users/sync", json={})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_sync_user_recovers_from_concurrent_creation(
    db_session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
):
    first = await sync_user(db_session, "user_race", display_name="Racer")
    first_id = first.id
    real_lookup = accounts.find_user_by_subject
    calls = []

    async def stale_first_lookup(session, subject_id):
        calls.append(subject_id)
        if len(calls) == 1:
            return None
        return await real_lookup(session, subject_id)

    monkeypatch.setattr(accounts, "find_user_by_subject", stale_first_lookup)

    second = await sync_user(db_session, "user_race", display_name="Other")

    assert second.id == first_id
    assert second.display_name == "Racer"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_search_matches_substring_ignoring_case(async_client: AsyncClient):
    await sync_account(async_client, "user_1", "Charlie Brown")
    await sync_account(async_client, "user_2", "brownie baker")
    await sync_account(async_client, "user_3", "Alice")

    response = await async_client.get("/api/users/search", params={"q": "BROWN"})

    assert response.status_code == 200
    names = [user["displayName"] for user in response.json()["users"]]
    assert sorted(names, key=str.lower) == ["brownie baker", "Charlie Brown"]
    assert "Alice" not in names


@pytest.mark.asyncio
async def test_search_with_blank_query_returns_nothing(async_client: AsyncClient):
    await sync_account(async_client, "user_1", "Anyone")

    for params in ({}, {"q": ""}, {"q": "   "}):
        response = await async_client.get("/api/users/search", params=params)
        assert response.status_code == 200
        assert response.json() == {"users": []}


@pytest.mark.asyncio
async def test_search_caps_results(async_client: AsyncClient):
    for index in range(25):
        await sync_account(async_client, f"user_{index:02d}", f"Member {index:02d}")

    response = await async_client.get("/api/users/search", params={"q": "member"})

    users = response.json()["users"]
    assert len(users) == 20
    assert users[0]["displayName"] == "Member 00"


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(async_client: AsyncClient):
    await sync_account(async_client, "user_1", "Alice")
    await sync_account(async_client, "user_2", "100% Real")

    response = await async_client.get("/api/users/search", params={"q": "%"})
    names = [user["displayName"] for user in response.json()["users"]]
    assert names == ["100% Real"]

    response = await async_client.get("/api/users/search", params={"q": "_"})
    assert response.json() == {"users": []}


@pytest.mark.asyncio
async def test_profile_includes_stats_and_viewer_flags(
    async_client: AsyncClient,
    minio_stub: DummyMinio,
):
    alice = await sync_account(async_client, "user_alice", "Alice")
    bob = await sync_account(async_client, "user_bob", "Bob")
    await create_post_via_api(async_client, "user_alice")
    await create_post_via_api(async_client, "user_alice")
    await async_client.post(
        "/api/follows",
        json={"followingId": alice["id"]},
        headers=auth_headers("user_bob"),
    )
    await async_client.post(
        "/api/follows",
        json={"followingId": bob["id"]},
        headers=auth_headers("user_alice"),
    )

    anonymous = await async_client.get("/api/users/user_alice")
    assert anonymous.status_code == 200
    body = anonymous.json()
    assert body["user"]["id"] == alice["id"]
    assert body["stats"] == {"postsCount": 2, "followersCount": 1, "followingCount": 1}
    assert "isFollowing" not in body
    assert "isOwnProfile" not in body

    as_bob = await async_client.get("/api/users/user_alice", headers=auth_headers("user_bob"))
    assert as_bob.json()["isFollowing"] is True
    assert as_bob.json()["isOwnProfile"] is False

    as_alice = await async_client.get("/api/users/user_alice", headers=auth_headers("user_alice"))
    assert as_alice.json()["isOwnProfile"] is True
    assert as_alice.json()["isFollowing"] is False


@pytest.mark.asyncio
async def test_unknown_profile_is_not_found(async_client: AsyncClient):
    response = await async_client.get("/api/users/user_missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"
