"""Notification ledger: creation, unread counters and acknowledgement.

Invite notifications double as the "seen" state of collaboration grants. A
grant is unseen while an unread ``invite`` notification exists for its
(user, post) pair, so the inbox badge and the shared-drafts badge are read
from the same rows and clear together.
"""

from __future__ import annotations

import logging

from sqlalchemy import and_, distinct, func
from sqlalchemy.orm import Query, Session

from lumo.core.errors import ValidationError
from lumo.core.settings import settings
from lumo.db.session import unit_of_work
from lumo.models import Notification, PostCollaborator
from lumo.models.notification import NOTIFICATION_TYPE_INVITE, NOTIFICATION_TYPES
from lumo.realtime.broadcaster import EVENT_NEW_NOTIFICATION, RealtimeBroadcaster
from lumo.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)


class NotificationService:
    """Reads and writes the notification ledger for one database session."""

    def __init__(self, db: Session, broadcaster: RealtimeBroadcaster) -> None:
        self.db = db
        self.broadcaster = broadcaster

    def create(
        self,
        *,
        user_id: int,
        type_: str,
        message: str,
        actor_id: int | None = None,
        post_id: str | None = None,
    ) -> Notification:
        """Add a notification to the current transaction.

        The row is flushed but not committed; callers commit it together with
        the write that caused it and call :meth:`push` afterwards.
        """
        if type_ not in NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type: {type_}", field="type")

        notification = Notification(
            user_id=user_id,
            actor_id=actor_id,
            post_id=post_id,
            type=type_,
            message=message,
            is_read=False,
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def push(self, notification: Notification) -> None:
        """Deliver a committed notification to the recipient's open sockets."""
        payload = NotificationResponse.model_validate(notification).model_dump(mode="json")
        self.broadcaster.emit_to_user(notification.user_id, EVENT_NEW_NOTIFICATION, payload)

    def list_for_user(self, user_id: int, limit: int | None = None) -> list[Notification]:
        """Return the user's most recent notifications, newest first."""
        page_size = limit if limit is not None else settings.notification_page_size
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(page_size)
            .all()
        )

    def unread_count(self, user_id: int) -> int:
        """Return how many notifications the user has not read."""
        count = (
            self.db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .scalar()
        )
        return int(count or 0)

    def mark_read(
        self,
        user_id: int,
        notification_id: int | None = None,
        post_id: str | None = None,
    ) -> int:
        """Mark notifications read and return how many changed.

        With ``notification_id`` only that row is touched; with ``post_id``
        every notification tied to the post (including its pending invite);
        with neither, everything the user has. Matching nothing is not an
        error.
        """
        query = self._unread(user_id)
        if notification_id is not None:
            query = query.filter(Notification.id == notification_id)
        elif post_id is not None:
            query = query.filter(Notification.post_id == post_id)

        with unit_of_work(self.db):
            updated = query.update({Notification.is_read: True}, synchronize_session="fetch")
        logger.debug("Marked %s notifications read for user %s", updated, user_id)
        return int(updated)

    # Invite ledger

    def clear_pending_invites(self, user_id: int, post_id: str) -> int:
        """Mark unread invites for a (user, post) pair read, inside the caller's transaction."""
        return int(
            self._pending_invites(user_id)
            .filter(Notification.post_id == post_id)
            .update({Notification.is_read: True}, synchronize_session="fetch")
        )

    def unread_invite_count(self, user_id: int) -> int:
        """Return the number of granted posts the user has not looked at yet."""
        count = (
            self.db.query(func.count(distinct(Notification.post_id)))
            .select_from(Notification)
            .join(
                PostCollaborator,
                and_(
                    PostCollaborator.post_id == Notification.post_id,
                    PostCollaborator.user_id == Notification.user_id,
                ),
            )
            .filter(
                Notification.user_id == user_id,
                Notification.type == NOTIFICATION_TYPE_INVITE,
                Notification.is_read.is_(False),
            )
            .scalar()
        )
        return int(count or 0)

    def mark_invites_viewed(self, user_id: int) -> int:
        """Acknowledge every pending invite for the user."""
        with unit_of_work(self.db):
            updated = self._pending_invites(user_id).update(
                {Notification.is_read: True}, synchronize_session="fetch"
            )
        return int(updated)

    def unseen_invite_post_ids(self, user_id: int) -> set[str]:
        """Return ids of posts whose invite the user has not acknowledged."""
        rows = (
            self._pending_invites(user_id)
            .with_entities(Notification.post_id)
            .filter(Notification.post_id.is_not(None))
            .distinct()
            .all()
        )
        return {post_id for (post_id,) in rows}

    def pending_invitee_ids(self, post_id: str) -> set[int]:
        """Return users who have an unacknowledged invite to the post."""
        rows = (
            self.db.query(Notification.user_id)
            .filter(
                Notification.post_id == post_id,
                Notification.type == NOTIFICATION_TYPE_INVITE,
                Notification.is_read.is_(False),
            )
            .distinct()
            .all()
        )
        return {user_id for (user_id,) in rows}

    def _unread(self, user_id: int) -> Query[Notification]:
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )

    def _pending_invites(self, user_id: int) -> Query[Notification]:
        return self._unread(user_id).filter(Notification.type == NOTIFICATION_TYPE_INVITE)
