"""Permission resolution for posts.

Every post-scoped operation starts here. The resolver itself is a pure
lookup; callers decide which levels an operation needs and raise
ForbiddenError when the resolved level falls short.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy.orm import Session

from lumo.models import Post, PostCollaborator


class Permission(str, Enum):
    """Access levels, strongest first."""

    AUTHOR = "author"
    EDIT = "edit"
    COMMENT = "comment"
    VIEW = "view"
    NONE = "none"


def get_grant(db: Session, post_id: str, user_id: int) -> PostCollaborator | None:
    """Return the collaboration grant for a (post, user) pair, if any."""
    return (
        db.query(PostCollaborator)
        .filter(PostCollaborator.post_id == post_id, PostCollaborator.user_id == user_id)
        .first()
    )


def resolve_permission(db: Session, post: Post, user_id: int | None) -> Permission:
    """Return the caller's permission level on a post.

    Args:
        db: Database session.
        post: The post being accessed.
        user_id: The caller, or None when anonymous.

    Returns:
        AUTHOR for the owner, the granted level for collaborators, NONE otherwise.
    """
    if user_id is None:
        return Permission.NONE
    if post.author_id == user_id:
        return Permission.AUTHOR

    grant = get_grant(db, post.id, user_id)
    if grant is None:
        return Permission.NONE
    return Permission(grant.permission)


def can_read(post: Post, permission: Permission) -> bool:
    """Published posts are public; drafts need the author or a grant."""
    return post.is_published or permission is not Permission.NONE


def can_edit(post: Post, permission: Permission) -> bool:
    """Authors can always edit; edit grants only apply while drafting."""
    if permission is Permission.AUTHOR:
        return True
    return permission is Permission.EDIT and not post.is_published


def can_comment(post: Post, permission: Permission, *, authenticated: bool) -> bool:
    """Return True if the caller may add a comment to the post."""
    if permission is Permission.AUTHOR:
        return True
    if post.is_published:
        return authenticated
    return permission in (Permission.EDIT, Permission.COMMENT)
