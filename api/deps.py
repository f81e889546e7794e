"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core import decode_token, extract_subject
from db import get_session
from models import User
from services.accounts import find_user_by_subject
from services.errors import NotFound, Unauthorized

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


async def get_optional_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict | None:
    """Verified token claims, or None when no bearer token was sent.

    A token that is present but fails verification is rejected rather than
    treated as anonymous.
    """
    if credentials is None:
        return None
    try:
        claims = decode_token(credentials.credentials)
    except ValueError as exc:
        raise Unauthorized("Invalid session token") from exc
    if extract_subject(claims) is None:
        raise Unauthorized("Session token has no subject")
    return claims


async def get_optional_subject(
    claims: dict | None = Depends(get_optional_claims),
) -> str | None:
    if claims is None:
        return None
    return extract_subject(claims)


async def get_current_subject(
    subject_id: str | None = Depends(get_optional_subject),
) -> str:
    if subject_id is None:
        raise Unauthorized()
    return subject_id


async def get_current_account(
    subject_id: str = Depends(get_current_subject),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller to their mirrored account."""
    user = await find_user_by_subject(session, subject_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def get_optional_account(
    subject_id: str | None = Depends(get_optional_subject),
    session: AsyncSession = Depends(get_db),
) -> User | None:
    if subject_id is None:
        return None
    return await find_user_by_subject(session, subject_id)
