"""Routers mounted under ``/api``."""

from fastapi import APIRouter

from . import comments, follows, likes, posts, users

api_router = APIRouter(prefix="/api")
api_router.include_router(posts.router)
api_router.include_router(likes.router)
api_router.include_router(comments.router)
api_router.include_router(follows.router)
api_router.include_router(users.router)

__all__ = ["api_router"]
