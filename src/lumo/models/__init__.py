# src/lumo/models/__init__.py
"""SQLAlchemy models for the Lumo application."""

from .collaborator import PostCollaborator
from .comment import Comment
from .notification import Notification
from .post import Post, Tag, post_tag
from .social import Bookmark, Follow, Like
from .user import User

__all__ = [
    "Bookmark", "Follow", "Like",
    "Comment",
    "Notification",
    "Post", "Tag", "post_tag",
    "PostCollaborator",
    "User",
]
