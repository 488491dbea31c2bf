# src/lumo/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .collaboration import (
    CollaboratorAuthor,
    CollaboratorResponse,
    CollaboratorsResponse,
    ShareRequest,
    ShareResponse,
)
from .comment import CommentCreate, CommentResolveUpdate, CommentResponse
from .notification import (
    MarkReadRequest,
    MarkReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from .post import (
    AuthorSummary,
    BookmarkStatus,
    DashboardStats,
    LikeStatus,
    MyDraftsResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
    SharedDraftResponse,
)
from .user import FollowCounts, FollowStatus, UserPublic

__all__ = [
    "CollaboratorAuthor", "CollaboratorResponse", "CollaboratorsResponse",
    "ShareRequest", "ShareResponse",
    "CommentCreate", "CommentResolveUpdate", "CommentResponse",
    "MarkReadRequest", "MarkReadResponse", "NotificationResponse", "UnreadCountResponse",
    "AuthorSummary", "BookmarkStatus", "DashboardStats", "LikeStatus", "MyDraftsResponse",
    "PostCreate", "PostResponse", "PostUpdate", "SharedDraftResponse",
    "FollowCounts", "FollowStatus", "UserPublic",
]
