"""Service layer: business rules over the ORM models."""

from .access import Permission, can_comment, can_edit, can_read, resolve_permission
from .collaboration import CollaborationService, ShareResult
from .comments import CommentService
from .mailer import InviteMailer, get_mailer
from .notifications import NotificationService
from .posts import PostService, to_post_response
from .social import SocialService

__all__ = [
    "CollaborationService",
    "CommentService",
    "InviteMailer",
    "NotificationService",
    "Permission",
    "PostService",
    "ShareResult",
    "SocialService",
    "can_comment",
    "can_edit",
    "can_read",
    "get_mailer",
    "resolve_permission",
    "to_post_response",
]
