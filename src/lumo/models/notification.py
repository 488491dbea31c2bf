# src/lumo/models/notification.py
"""Notification ledger rows derived from collaboration and comment events."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumo.db.session import Base
from lumo.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .post import Post
    from .user import User

NOTIFICATION_TYPE_COMMENT = "comment"
NOTIFICATION_TYPE_INVITE = "invite"
NOTIFICATION_TYPE_SYSTEM = "system"
NOTIFICATION_TYPES = (
    NOTIFICATION_TYPE_COMMENT,
    NOTIFICATION_TYPE_INVITE,
    NOTIFICATION_TYPE_SYSTEM,
)


class Notification(Base):
    """Message addressed to one user; never created directly by end users."""

    __tablename__ = "notification"
    __table_args__ = (
        CheckConstraint(
            "type IN ('comment', 'invite', 'system')",
            name="ck_notification_type",
        ),
        Index("ix_notification_user_read", "user_id", "is_read"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    post_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=True,
    )
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    actor: Mapped[User | None] = relationship("User", foreign_keys=[actor_id], lazy="joined")
    post: Mapped[Post | None] = relationship("Post", back_populates="notifications")
