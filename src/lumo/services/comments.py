"""Comments on drafts and published posts."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from lumo.core.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from lumo.core.identity import AuthenticatedIdentity, RequestContext
from lumo.db.session import unit_of_work
from lumo.models import Comment, Post
from lumo.models.notification import NOTIFICATION_TYPE_COMMENT
from lumo.realtime.broadcaster import EVENT_NEW_COMMENT, RealtimeBroadcaster
from lumo.schemas.comment import CommentResponse
from lumo.services.access import Permission, can_comment, resolve_permission
from lumo.services.notifications import NotificationService

logger = logging.getLogger(__name__)


class CommentService:
    """Adds, lists and moderates comments."""

    def __init__(self, db: Session, broadcaster: RealtimeBroadcaster) -> None:
        self.db = db
        self.broadcaster = broadcaster
        self.notifications = NotificationService(db, broadcaster)

    def add_comment(self, ctx: RequestContext, post_id: str, content: str) -> Comment:
        """Add a comment and tell everyone watching the post.

        The post's author is notified unless they wrote the comment.

        Raises:
            ValidationError: If the content is blank.
            NotFoundError: If the post does not exist.
            ForbiddenError: If the caller may not comment on the post.
        """
        identity = ctx.require_identity()
        if not content or not content.strip():
            raise ValidationError("Comment content cannot be empty", field="content")

        post = self._load_post(post_id)
        permission = resolve_permission(self.db, post, identity.id)
        if not can_comment(post, permission, authenticated=True):
            raise ForbiddenError("Forbidden: You do not have permission to comment on this post")

        notification = None
        with unit_of_work(self.db):
            comment = Comment(post_id=post.id, user_id=identity.id, content=content.strip())
            self.db.add(comment)
            if post.author_id != identity.id:
                notification = self.notifications.create(
                    user_id=post.author_id,
                    actor_id=identity.id,
                    post_id=post.id,
                    type_=NOTIFICATION_TYPE_COMMENT,
                    message=f'{identity.username} commented on your draft "{post.title or "Untitled"}"',
                )
        self.db.refresh(comment)

        payload = CommentResponse.model_validate(comment).model_dump(mode="json")
        self.broadcaster.emit_to_post(post.id, EVENT_NEW_COMMENT, payload, skip_sid=ctx.socket_id)
        if notification is not None:
            self.notifications.push(notification)
        return comment

    def list_comments(self, ctx: RequestContext, post_id: str) -> list[Comment]:
        """Return comments visible to the caller, newest first.

        On a published post, and for the author, every comment is visible. A
        collaborator on a draft only sees their own comments.
        """
        post = self._load_post(post_id)
        permission = resolve_permission(self.db, post, ctx.user_id)
        query = (
            self.db.query(Comment)
            .filter(Comment.post_id == post.id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )

        if post.is_published or permission is Permission.AUTHOR:
            return query.all()
        if ctx.identity is None:
            raise UnauthorizedError("Unauthorized")
        if permission is Permission.NONE:
            raise ForbiddenError("You do not have access to this post")
        return query.filter(Comment.user_id == ctx.identity.id).all()

    def delete_comment(self, ctx: RequestContext, comment_id: int) -> None:
        """Delete a comment as its author or as the post's author."""
        identity = ctx.require_identity()
        comment = self._load_moderatable(identity, comment_id, action="delete")
        with unit_of_work(self.db):
            self.db.delete(comment)
        logger.info("Comment %s deleted by user %s", comment_id, identity.id)

    def set_resolved(self, ctx: RequestContext, comment_id: int, resolved: bool) -> Comment:
        """Mark a comment resolved or reopen it."""
        identity = ctx.require_identity()
        comment = self._load_moderatable(identity, comment_id, action="resolve")
        with unit_of_work(self.db):
            comment.is_resolved = resolved
        self.db.refresh(comment)
        return comment

    def _load_moderatable(
        self,
        identity: AuthenticatedIdentity,
        comment_id: int,
        *,
        action: str,
    ) -> Comment:
        comment = self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if identity.id not in (comment.user_id, comment.post.author_id):
            raise ForbiddenError(f"You do not have permission to {action} this comment")
        return comment

    def _load_post(self, post_id: str) -> Post:
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post
