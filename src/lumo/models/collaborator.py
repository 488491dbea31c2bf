# src/lumo/models/collaborator.py
"""Collaboration grants giving other users access to a draft."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumo.db.session import Base
from lumo.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .post import Post
    from .user import User

GRANT_PERMISSION_EDIT = "edit"
GRANT_PERMISSION_COMMENT = "comment"
GRANT_PERMISSION_VIEW = "view"
GRANT_PERMISSIONS = (GRANT_PERMISSION_EDIT, GRANT_PERMISSION_COMMENT, GRANT_PERMISSION_VIEW)


class PostCollaborator(Base):
    """Permission granted by a post's author to another user.

    Whether the invitee has seen the grant is not stored here; it is derived
    from the invite notifications (see NotificationService).
    """

    __tablename__ = "post_collaborator"
    __table_args__ = (
        # Re-sharing updates the row instead of inserting another.
        UniqueConstraint("post_id", "user_id", name="uq_post_collaborator_post_user"),
        CheckConstraint(
            "permission IN ('edit', 'comment', 'view')",
            name="ck_post_collaborator_permission",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    permission: Mapped[str] = mapped_column(String(16), nullable=False)
    invited_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    invited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    post: Mapped[Post] = relationship("Post", back_populates="collaborators")
    user: Mapped[User] = relationship("User", foreign_keys=[user_id], lazy="joined")
