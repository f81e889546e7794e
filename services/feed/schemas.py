"""Feed API payload schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import Comment, Post, User


class CamelModel(BaseModel):
    """Serializes as camelCase while accepting snake_case on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserSummary(CamelModel):
    id: str
    external_subject_id: str
    display_name: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            external_subject_id=user.external_subject_id,
            display_name=user.display_name,
            created_at=user.created_at,
        )


class PostStats(CamelModel):
    likes_count: int = 0
    comments_count: int = 0


class CommentWithAuthor(CamelModel):
    id: int
    post_id: int
    author_account_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    author: UserSummary

    @classmethod
    def from_comment(cls, comment: Comment, author: User) -> "CommentWithAuthor":
        if comment.id is None:
            raise ValueError("Comment record missing identifier")
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            author_account_id=comment.author_id,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            author=UserSummary.from_user(author),
        )


class PostRecord(CamelModel):
    id: int
    author_account_id: str
    media_url: str
    caption: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostRecord":
        if post.id is None:
            raise ValueError("Post record missing identifier")
        return cls(
            id=post.id,
            author_account_id=post.author_id,
            media_url=post.image_url,
            caption=post.caption,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class EnrichedPost(PostRecord):
    author: UserSummary
    stats: PostStats = Field(default_factory=PostStats)
    viewer_has_liked: bool = False
    recent_comments: list[CommentWithAuthor] = Field(default_factory=list)

    @classmethod
    def from_row(cls, post: Post, author: User) -> "EnrichedPost":
        record = PostRecord.from_post(post)
        return cls(**record.model_dump(), author=UserSummary.from_user(author))


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    has_more: bool


class FeedPage(CamelModel):
    posts: list[EnrichedPost]
    pagination: PaginationMeta
