"""Comment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_account, get_db
from api.schemas import SuccessResponse
from models import User
from services.engagement import create_comment as create_comment_record
from services.engagement import delete_comment as delete_comment_record
from services.feed.schemas import CamelModel, CommentWithAuthor

router = APIRouter(prefix="/comments", tags=["comments"])


class CommentCreateRequest(CamelModel):
    post_id: int
    content: str


class CommentResponse(SuccessResponse):
    comment: CommentWithAuthor


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CommentResponse)
async def create_comment(
    payload: CommentCreateRequest,
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> CommentResponse:
    comment = await create_comment_record(
        session,
        current_user,
        payload.post_id,
        payload.content,
    )
    return CommentResponse(comment=comment)


@router.delete("/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await delete_comment_record(session, current_user, comment_id)
    return SuccessResponse()
