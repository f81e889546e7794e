"""Like endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_account, get_db
from api.schemas import SuccessResponse
from models import User
from services.engagement import LikeRecord, like_post, unlike_post
from services.feed.schemas import CamelModel

router = APIRouter(prefix="/likes", tags=["likes"])


class LikeRequest(CamelModel):
    post_id: int


class LikeResponse(SuccessResponse):
    like: LikeRecord


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LikeResponse)
async def create_like(
    payload: LikeRequest,
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> LikeResponse:
    like = await like_post(session, current_user, payload.post_id)
    return LikeResponse(like=like)


@router.delete("", response_model=SuccessResponse)
async def delete_like(
    payload: LikeRequest = Body(...),
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await unlike_post(session, current_user, payload.post_id)
    return SuccessResponse()
