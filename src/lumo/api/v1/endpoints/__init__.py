# src/lumo/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .collaboration import router as collaboration_router
from .comments import router as comments_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .users import router as users_router

__all__ = [
    "collaboration_router",
    "comments_router",
    "notifications_router",
    "posts_router",
    "users_router",
]
