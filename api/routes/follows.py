"""Follow endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_account, get_db
from api.schemas import SuccessResponse
from models import User
from services.engagement import FollowRecord, follow_user, unfollow_user
from services.feed.schemas import CamelModel

router = APIRouter(prefix="/follows", tags=["follows"])


class FollowRequest(CamelModel):
    following_id: str


class FollowResponse(SuccessResponse):
    follow: FollowRecord


@router.post("", status_code=status.HTTP_201_CREATED, response_model=FollowResponse)
async def create_follow(
    payload: FollowRequest,
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> FollowResponse:
    follow = await follow_user(session, current_user, payload.following_id)
    return FollowResponse(follow=follow)


@router.delete("", response_model=SuccessResponse)
async def delete_follow(
    payload: FollowRequest = Body(...),
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await unfollow_user(session, current_user, payload.following_id)
    return SuccessResponse()
