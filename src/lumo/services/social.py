"""Likes, bookmarks and follows.

Every toggle is idempotent: liking twice leaves one like, unliking something
never liked is a no-op.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from lumo.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from lumo.core.identity import RequestContext
from lumo.db.session import unit_of_work
from lumo.models import Bookmark, Follow, Like, Post, User
from lumo.services.access import can_read, resolve_permission

logger = logging.getLogger(__name__)


class SocialService:
    """Social graph operations for a single request."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # Likes

    def like(self, ctx: RequestContext, post_id: str) -> None:
        identity = ctx.require_identity()
        post = self._readable_post(ctx, post_id)
        if self.has_liked(identity.id, post.id):
            return
        self._insert_once(Like(user_id=identity.id, post_id=post.id))

    def unlike(self, ctx: RequestContext, post_id: str) -> None:
        identity = ctx.require_identity()
        with unit_of_work(self.db):
            self.db.query(Like).filter(
                Like.user_id == identity.id, Like.post_id == post_id
            ).delete(synchronize_session="fetch")

    def like_count(self, post_id: str) -> int:
        count = self.db.query(func.count()).select_from(Like).filter(Like.post_id == post_id).scalar()
        return int(count or 0)

    def has_liked(self, user_id: int | None, post_id: str) -> bool:
        if user_id is None:
            return False
        return self.db.get(Like, (user_id, post_id)) is not None

    # Bookmarks

    def bookmark(self, ctx: RequestContext, post_id: str) -> None:
        identity = ctx.require_identity()
        post = self._readable_post(ctx, post_id)
        if self.has_bookmarked(identity.id, post.id):
            return
        self._insert_once(Bookmark(user_id=identity.id, post_id=post.id))

    def unbookmark(self, ctx: RequestContext, post_id: str) -> None:
        identity = ctx.require_identity()
        with unit_of_work(self.db):
            self.db.query(Bookmark).filter(
                Bookmark.user_id == identity.id, Bookmark.post_id == post_id
            ).delete(synchronize_session="fetch")

    def has_bookmarked(self, user_id: int | None, post_id: str) -> bool:
        if user_id is None:
            return False
        return (
            self.db.query(Bookmark.id)
            .filter(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
            .first()
            is not None
        )

    def list_bookmarks(self, ctx: RequestContext) -> list[Post]:
        """Return bookmarked posts the caller can still read, newest bookmark first."""
        identity = ctx.require_identity()
        posts = (
            self.db.query(Post)
            .join(Bookmark, Bookmark.post_id == Post.id)
            .filter(Bookmark.user_id == identity.id)
            .order_by(Bookmark.created_at.desc())
            .all()
        )
        return [
            post for post in posts
            if can_read(post, resolve_permission(self.db, post, identity.id))
        ]

    # Follows

    def follow(self, ctx: RequestContext, user_id: int) -> None:
        identity = ctx.require_identity()
        if user_id == identity.id:
            raise ValidationError("You cannot follow yourself", field="user_id")
        self.get_user(user_id)
        if self.is_following(identity.id, user_id):
            return
        self._insert_once(Follow(follower_id=identity.id, following_id=user_id))
        logger.info("User %s followed user %s", identity.id, user_id)

    def unfollow(self, ctx: RequestContext, user_id: int) -> None:
        identity = ctx.require_identity()
        with unit_of_work(self.db):
            self.db.query(Follow).filter(
                Follow.follower_id == identity.id, Follow.following_id == user_id
            ).delete(synchronize_session="fetch")

    def is_following(self, follower_id: int | None, following_id: int) -> bool:
        if follower_id is None:
            return False
        return self.db.get(Follow, (follower_id, following_id)) is not None

    def followers(self, user_id: int) -> list[User]:
        """Return users who follow ``user_id``, most recent first."""
        self.get_user(user_id)
        return (
            self.db.query(User)
            .join(Follow, Follow.follower_id == User.id)
            .filter(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc())
            .all()
        )

    def following(self, user_id: int) -> list[User]:
        """Return users that ``user_id`` follows, most recent first."""
        self.get_user(user_id)
        return (
            self.db.query(User)
            .join(Follow, Follow.following_id == User.id)
            .filter(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc())
            .all()
        )

    def follow_counts(self, user_id: int) -> dict[str, int]:
        self.get_user(user_id)
        followers = (
            self.db.query(func.count()).select_from(Follow)
            .filter(Follow.following_id == user_id).scalar()
        )
        following = (
            self.db.query(func.count()).select_from(Follow)
            .filter(Follow.follower_id == user_id).scalar()
        )
        return {"followers": int(followers or 0), "following": int(following or 0)}

    def get_user(self, user_id: int) -> User:
        """Return the user or raise NotFoundError."""
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _readable_post(self, ctx: RequestContext, post_id: str) -> Post:
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if not can_read(post, resolve_permission(self.db, post, ctx.user_id)):
            raise ForbiddenError("You do not have access to this post")
        return post

    def _insert_once(self, row: Like | Bookmark | Follow) -> None:
        try:
            with unit_of_work(self.db):
                self.db.add(row)
        except ConflictError:
            # Lost a race with a concurrent insert of the same pair.
            logger.debug("Ignored duplicate %s", type(row).__name__)
