# src/lumo/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    collaboration_router,
    comments_router,
    notifications_router,
    posts_router,
    users_router,
)

__all__ = [
    "collaboration_router",
    "comments_router",
    "notifications_router",
    "posts_router",
    "users_router",
]
