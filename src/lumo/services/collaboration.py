"""Sharing drafts with other users."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import Session

from lumo.core.errors import ForbiddenError, NotFoundError, ValidationError
from lumo.core.identity import RequestContext
from lumo.db.session import unit_of_work
from lumo.models import Notification, Post, PostCollaborator, User
from lumo.models.collaborator import GRANT_PERMISSIONS
from lumo.models.notification import NOTIFICATION_TYPE_INVITE
from lumo.realtime.broadcaster import RealtimeBroadcaster
from lumo.schemas.collaboration import (
    CollaboratorAuthor,
    CollaboratorResponse,
    CollaboratorsResponse,
)
from lumo.services.access import Permission, get_grant, resolve_permission
from lumo.services.mailer import InviteMailer
from lumo.services.notifications import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class ShareResult:
    """Grants written by a share request and the emails that were rejected."""

    added: list[PostCollaborator] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _unique_emails(emails: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for raw in emails:
        email = raw.strip()
        if email and email.lower() not in seen:
            seen.add(email.lower())
            result.append(email)
    return result


class CollaborationService:
    """Grants, lists and revokes collaborator access to posts."""

    def __init__(
        self,
        db: Session,
        broadcaster: RealtimeBroadcaster,
        mailer: InviteMailer,
    ) -> None:
        self.db = db
        self.broadcaster = broadcaster
        self.mailer = mailer
        self.notifications = NotificationService(db, broadcaster)

    def share(
        self,
        ctx: RequestContext,
        post_id: str,
        emails: list[str],
        permission: str,
    ) -> ShareResult:
        """Grant ``permission`` on a post to every user named by email.

        Existing grants are updated in place and marked unseen again. Each
        invitee receives an invite notification, a realtime push and an email;
        the push and email are not awaited.

        Raises:
            NotFoundError: If the post does not exist.
            ForbiddenError: If the caller is not the author.
            ValidationError: If the permission is unknown.
        """
        identity = ctx.require_identity()
        if permission not in GRANT_PERMISSIONS:
            raise ValidationError(f"Invalid permission: {permission}", field="permission")

        post = self._load_post(post_id)
        if post.author_id != identity.id:
            raise ForbiddenError("Only the author can share this post")

        result = ShareResult()
        invited: list[tuple[User, Notification]] = []
        title = post.title or "Untitled"

        with unit_of_work(self.db):
            for email in _unique_emails(emails):
                user = (
                    self.db.query(User)
                    .filter(func.lower(User.email) == email.lower())
                    .first()
                )
                if user is None:
                    result.errors.append(f"User with email {email} not found")
                    continue
                if user.id == identity.id:
                    continue

                grant = get_grant(self.db, post.id, user.id)
                if grant is None:
                    grant = PostCollaborator(
                        post_id=post.id,
                        user_id=user.id,
                        permission=permission,
                        invited_by=identity.id,
                    )
                    self.db.add(grant)
                else:
                    grant.permission = permission

                # A re-share replaces the pending invite so the grant reads as unseen once.
                self.notifications.clear_pending_invites(user.id, post.id)
                notification = self.notifications.create(
                    user_id=user.id,
                    actor_id=identity.id,
                    post_id=post.id,
                    type_=NOTIFICATION_TYPE_INVITE,
                    message=f'{identity.username} invited you to collaborate on "{title}"',
                )
                result.added.append(grant)
                invited.append((user, notification))

        for user, notification in invited:
            self.notifications.push(notification)
            self.mailer.dispatch_invite(
                to_email=user.email,
                inviter_name=identity.username,
                post_title=post.title,
                post_id=post.id,
                permission=permission,
            )

        logger.info(
            "User %s shared post %s with %s user(s); %s email(s) rejected",
            identity.id,
            post.id,
            len(result.added),
            len(result.errors),
        )
        return result

    def list_collaborators(self, ctx: RequestContext, post_id: str) -> CollaboratorsResponse:
        """Return the author and every grant on a post.

        Visible to the author and to any collaborator.
        """
        identity = ctx.require_identity()
        post = self._load_post(post_id)
        if resolve_permission(self.db, post, identity.id) is Permission.NONE:
            raise ForbiddenError("You do not have access to this post")

        grants = (
            self.db.query(PostCollaborator)
            .filter(PostCollaborator.post_id == post.id)
            .order_by(PostCollaborator.invited_at, PostCollaborator.id)
            .all()
        )
        pending = self.notifications.pending_invitee_ids(post.id)
        collaborators = [
            CollaboratorResponse.model_validate(grant).model_copy(
                update={"is_viewed": grant.user_id not in pending}
            )
            for grant in grants
        ]
        return CollaboratorsResponse(
            author=CollaboratorAuthor.model_validate(post.author),
            collaborators=collaborators,
        )

    def revoke(self, ctx: RequestContext, post_id: str, user_id: int) -> None:
        """Remove a collaborator's grant and their pending invite."""
        identity = ctx.require_identity()
        post = self._load_post(post_id)
        if post.author_id != identity.id:
            raise ForbiddenError("Only the author can remove collaborators")

        grant = get_grant(self.db, post.id, user_id)
        if grant is None:
            raise NotFoundError("Collaborator not found")

        with unit_of_work(self.db):
            self.db.delete(grant)
            self.notifications.clear_pending_invites(user_id, post.id)
        logger.info("User %s revoked access to post %s for user %s", identity.id, post.id, user_id)

    def unread_invite_count(self, user_id: int) -> int:
        return self.notifications.unread_invite_count(user_id)

    def mark_invites_viewed(self, user_id: int) -> int:
        return self.notifications.mark_invites_viewed(user_id)

    def is_viewed(self, post_id: str, user_id: int) -> bool:
        """Return True once the user has acknowledged their invite to the post."""
        return post_id not in self.notifications.unseen_invite_post_ids(user_id)

    def _load_post(self, post_id: str) -> Post:
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post
