"""Account sync, search and profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_optional_account, get_optional_claims
from api.schemas import SuccessResponse
from core import extract_subject
from models import User
from services.accounts import ProfileView, get_profile, search_users, sync_user
from services.errors import Unauthorized
from services.feed.schemas import CamelModel, UserSummary

router = APIRouter(prefix="/users", tags=["users"])


class SyncUserRequest(CamelModel):
    display_name: str | None = None


class SyncUserResponse(SuccessResponse):
    user: UserSummary


class UserSearchResponse(CamelModel):
    users: list[UserSummary]


@router.post("/sync", response_model=SyncUserResponse)
async def sync_current_user(
    payload: SyncUserRequest | None = None,
    claims: dict | None = Depends(get_optional_claims),
    session: AsyncSession = Depends(get_db),
) -> SyncUserResponse:
    """Mirror the signed-in identity into a local account."""
    if claims is None:
        raise Unauthorized()
    subject_id = extract_subject(claims)
    if subject_id is None:
        raise Unauthorized()

    token_name = claims.get("name")
    user = await sync_user(
        session,
        subject_id,
        display_name=payload.display_name if payload is not None else None,
        token_name=token_name if isinstance(token_name, str) else None,
    )
    return SyncUserResponse(user=UserSummary.from_user(user))


@router.get("/search", response_model=UserSearchResponse)
async def search(
    q: str = Query(default=""),
    session: AsyncSession = Depends(get_db),
) -> UserSearchResponse:
    return UserSearchResponse(users=await search_users(session, q))


@router.get(
    "/{subject_id}",
    response_model=ProfileView,
    response_model_exclude_none=True,
)
async def get_user_profile(
    subject_id: str,
    viewer: User | None = Depends(get_optional_account),
    session: AsyncSession = Depends(get_db),
) -> ProfileView:
    return await get_profile(session, subject_id, viewer=viewer)
