"""Post feed, detail and mutation endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_account, get_db, get_optional_account
from api.schemas import SuccessResponse
from core import settings
from models import User
from services import UploadTooLargeError, process_image_bytes, read_upload_file
from services.errors import InvalidInput
from services.feed import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    CamelModel,
    EnrichedPost,
    FeedPage,
    get_feed,
    get_post_detail,
)
from services.posts import (
    create_post as create_post_record,
    delete_post as delete_post_record,
    normalize_caption,
    update_post_caption,
)

router = APIRouter(prefix="/posts", tags=["posts"])


class PostUpdateRequest(CamelModel):
    caption: str | None = None


class PostMutationResponse(CamelModel):
    success: bool = True
    post: EnrichedPost


@router.get("", response_model=FeedPage)
async def list_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user_id: str | None = Query(default=None, alias="userId"),
    viewer: User | None = Depends(get_optional_account),
    session: AsyncSession = Depends(get_db),
) -> FeedPage:
    """Newest-first feed; ``userId`` narrows it to one author's subject id."""
    return await get_feed(
        session,
        page=page,
        limit=limit,
        author_subject_id=user_id,
        viewer_id=viewer.id if viewer is not None else None,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PostMutationResponse)
async def create_post(
    image: UploadFile | None = File(default=None),
    caption: str | None = Form(default=None),
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> PostMutationResponse:
    normalize_caption(caption)
    if image is None:
        raise InvalidInput("Image file is required")

    try:
        data = await read_upload_file(image, settings.upload_max_bytes)
        processed_bytes, content_type = await asyncio.to_thread(process_image_bytes, data)
    except UploadTooLargeError as exc:
        raise InvalidInput(str(exc), reason="file_too_large") from exc
    except ValueError as exc:
        raise InvalidInput(str(exc)) from exc

    post = await create_post_record(
        session,
        current_user,
        image_bytes=processed_bytes,
        content_type=content_type,
        caption=caption,
    )
    return PostMutationResponse(post=post)


@router.get("/{post_id}", response_model=EnrichedPost)
async def get_post(
    post_id: int,
    viewer: User | None = Depends(get_optional_account),
    session: AsyncSession = Depends(get_db),
) -> EnrichedPost:
    return await get_post_detail(
        session,
        post_id,
        viewer_id=viewer.id if viewer is not None else None,
    )


@router.put("/{post_id}", response_model=PostMutationResponse)
async def update_post(
    post_id: int,
    payload: PostUpdateRequest,
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> PostMutationResponse:
    post = await update_post_caption(
        session,
        post_id,
        current_user,
        payload.caption,
        caption_provided="caption" in payload.model_fields_set,
    )
    return PostMutationResponse(post=post)


@router.delete("/{post_id}", response_model=SuccessResponse)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_account),
    session: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await delete_post_record(session, post_id, current_user)
    return SuccessResponse()
