# src/lumo/models/post.py
"""SQLAlchemy models for posts and their tags."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lumo.db.session import Base
from lumo.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .collaborator import PostCollaborator
    from .comment import Comment
    from .notification import Notification
    from .social import Bookmark, Like
    from .user import User

POST_STATUS_DRAFT = "draft"
POST_STATUS_PUBLISHED = "published"


def _new_post_id() -> str:
    return uuid.uuid4().hex


post_tag = Table(
    "post_tag",
    Base.metadata,
    Column("post_id", String(32), ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    """Lowercase topic label shared across posts."""

    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)


class Post(Base):
    """A story that starts as a draft and is published once by its author.

    Content is stored verbatim; the editor decides whether it is HTML or a
    JSON document.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint(
            f"status IN ('{POST_STATUS_DRAFT}', '{POST_STATUS_PUBLISHED}')",
            name="ck_post_status",
        ),
        Index("ix_post_author_status", "author_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_post_id)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=POST_STATUS_DRAFT)
    # Minutes, computed when the post is published.
    read_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    author: Mapped[User] = relationship("User", lazy="joined")
    tags: Mapped[list[Tag]] = relationship("Tag", secondary=post_tag, lazy="selectin")

    # Dependents are removed with the post.
    collaborators: Mapped[list[PostCollaborator]] = relationship(
        "PostCollaborator", back_populates="post", cascade="all, delete-orphan"
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment", back_populates="post", cascade="all, delete-orphan"
    )
    likes: Mapped[list[Like]] = relationship("Like", cascade="all, delete-orphan")
    bookmarks: Mapped[list[Bookmark]] = relationship("Bookmark", cascade="all, delete-orphan")
    notifications: Mapped[list[Notification]] = relationship(
        "Notification", back_populates="post", cascade="all, delete-orphan"
    )

    @property
    def is_published(self) -> bool:
        """Return True once the post has left the draft state."""
        return self.status == POST_STATUS_PUBLISHED

    @property
    def tag_names(self) -> list[str]:
        """Return tag names in a stable order."""
        return sorted(tag.name for tag in self.tags)
