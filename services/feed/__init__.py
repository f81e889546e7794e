"""Feed read-path services."""

from .aggregates import ZERO_AGGREGATE, PostAggregate, get_aggregates
from .comments import DEFAULT_PREVIEW_SIZE, get_comment_thread, get_recent_comments
from .pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_offset
from .query import enrich_posts, get_feed, get_post_detail
from .schemas import (
    CamelModel,
    CommentWithAuthor,
    EnrichedPost,
    FeedPage,
    PaginationMeta,
    PostRecord,
    PostStats,
    UserSummary,
)
from .viewer_likes import get_liked_post_ids

__all__ = [
    "CamelModel",
    "CommentWithAuthor",
    "EnrichedPost",
    "FeedPage",
    "PaginationMeta",
    "PostRecord",
    "PostStats",
    "UserSummary",
    "PostAggregate",
    "ZERO_AGGREGATE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_PREVIEW_SIZE",
    "MAX_PAGE_SIZE",
    "page_offset",
    "get_aggregates",
    "get_liked_post_ids",
    "get_recent_comments",
    "get_comment_thread",
    "enrich_posts",
    "get_feed",
    "get_post_detail",
]
