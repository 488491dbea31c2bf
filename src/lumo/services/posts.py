"""Draft lifecycle: create, edit, publish, delete and the read-side listings."""

from __future__ import annotations

import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from lumo.core.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from lumo.core.identity import RequestContext
from lumo.core.settings import settings
from lumo.db.session import unit_of_work
from lumo.db.time import isoformat_utc, utcnow
from lumo.models import Comment, Like, Post, PostCollaborator, Tag, User
from lumo.models.post import POST_STATUS_DRAFT, POST_STATUS_PUBLISHED
from lumo.realtime.broadcaster import EVENT_POST_UPDATED, RealtimeBroadcaster
from lumo.schemas.post import (
    AuthorSummary,
    DashboardStats,
    MyDraftsResponse,
    PostResponse,
    PostUpdate,
    SharedDraftResponse,
)
from lumo.services.access import Permission, can_edit, can_read, resolve_permission
from lumo.services.content import compute_read_time, make_excerpt
from lumo.services.notifications import NotificationService

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 50
TAG_NAME_MAX_LENGTH = 50


def to_post_response(post: Post, permission: Permission | None = None) -> PostResponse:
    """Convert a Post ORM instance to an API schema."""
    return PostResponse(
        id=post.id,
        author_id=post.author_id,
        author=AuthorSummary.model_validate(post.author),
        title=post.title,
        content=post.content,
        cover_image_url=post.cover_image_url,
        status=post.status,
        read_time=post.read_time,
        tags=post.tag_names,
        excerpt=make_excerpt(post.content, settings.excerpt_length),
        created_at=post.created_at,
        updated_at=post.updated_at,
        published_at=post.published_at,
        permission=permission.value if permission is not None else None,
    )


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def normalize_tags(names: list[str]) -> list[str]:
    """Trim, lowercase and de-duplicate tag names, keeping their order.

    Raises:
        ValidationError: If more tags than allowed remain, or one is too long.
    """
    normalized: list[str] = []
    for raw in names:
        name = raw.strip().lower().lstrip("#")
        if name and name not in normalized:
            normalized.append(name)

    if len(normalized) > settings.max_tags_per_post:
        raise ValidationError(
            f"A post can have at most {settings.max_tags_per_post} tags",
            field="tags",
        )
    for name in normalized:
        if len(name) > TAG_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Tags must be at most {TAG_NAME_MAX_LENGTH} characters",
                field="tags",
            )
    return normalized


class PostService:
    """Operations on posts for a single request."""

    def __init__(self, db: Session, broadcaster: RealtimeBroadcaster) -> None:
        self.db = db
        self.broadcaster = broadcaster
        self.notifications = NotificationService(db, broadcaster)

    def load_post(self, post_id: str) -> Post:
        """Return the post or raise NotFoundError."""
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def create_draft(
        self,
        ctx: RequestContext,
        title: str | None = None,
        content: str | None = None,
    ) -> Post:
        """Start a new draft owned by the caller."""
        identity = ctx.require_identity()
        now = utcnow()
        post = Post(
            author_id=identity.id,
            title=title,
            content=content,
            status=POST_STATUS_DRAFT,
            created_at=now,
            updated_at=now,
        )
        with unit_of_work(self.db):
            self.db.add(post)
        self.db.refresh(post)
        logger.info("Draft %s created by user %s", post.id, identity.id)
        return post

    def get_post(self, ctx: RequestContext, post_id: str) -> tuple[Post, Permission]:
        """Fetch a post the caller is allowed to read, with their access level."""
        post = self.load_post(post_id)
        permission = resolve_permission(self.db, post, ctx.user_id)
        if can_read(post, permission):
            return post, permission
        if ctx.identity is None:
            raise UnauthorizedError("Unauthorized")
        raise ForbiddenError("You do not have access to this post")

    def update_draft(self, ctx: RequestContext, post_id: str, patch: PostUpdate) -> Post:
        """Apply a partial update; the most recent write wins.

        Only fields present in ``patch`` change. When ``tags`` is present the
        post's tags are replaced in the same transaction as the other fields.
        A ``post-updated`` event is pushed to the post room afterwards.

        Raises:
            NotFoundError: If the post does not exist.
            ForbiddenError: If the caller cannot edit it.
            ValidationError: If the tag list is rejected.
        """
        identity = ctx.require_identity()
        post = self.load_post(post_id)
        permission = resolve_permission(self.db, post, identity.id)
        if not can_edit(post, permission):
            raise ForbiddenError("You do not have permission to edit this post")

        changes = patch.model_dump(exclude_unset=True)
        tag_names = changes.pop("tags", None)
        tags = self._get_or_create_tags(normalize_tags(tag_names)) if tag_names is not None else None

        with unit_of_work(self.db):
            for field, value in changes.items():
                setattr(post, field, value)
            if tags is not None:
                post.tags = tags
            post.updated_at = utcnow()
        self.db.refresh(post)

        self.broadcaster.emit_to_post(
            post.id,
            EVENT_POST_UPDATED,
            {
                "post_id": post.id,
                "title": post.title,
                "content": post.content,
                "updated_by": identity.id,
                "updated_at": isoformat_utc(post.updated_at),
            },
            skip_sid=ctx.socket_id,
        )
        return post

    def publish(self, ctx: RequestContext, post_id: str) -> Post:
        """Publish a post, recomputing read time and publication date.

        Publishing an already published post is allowed and refreshes both.
        """
        identity = ctx.require_identity()
        post = self.load_post(post_id)
        if post.author_id != identity.id:
            raise ForbiddenError("Only the author can publish this post")

        now = utcnow()
        with unit_of_work(self.db):
            post.read_time = compute_read_time(post.content, settings.words_per_minute)
            post.status = POST_STATUS_PUBLISHED
            post.published_at = now
            post.updated_at = now
        self.db.refresh(post)
        logger.info("Post %s published by user %s (%s min read)", post.id, identity.id, post.read_time)
        return post

    def delete_post(self, ctx: RequestContext, post_id: str) -> None:
        """Delete a post together with its grants, comments, likes and notifications."""
        identity = ctx.require_identity()
        post = self.load_post(post_id)
        if post.author_id != identity.id:
            raise ForbiddenError("Only the author can delete this post")

        with unit_of_work(self.db):
            self.db.delete(post)
        logger.info("Post %s deleted by user %s", post_id, identity.id)

    def list_my_drafts(self, ctx: RequestContext) -> MyDraftsResponse:
        """Return the caller's drafts and the drafts shared with them."""
        identity = ctx.require_identity()
        own = (
            self.db.query(Post)
            .filter(Post.author_id == identity.id, Post.status == POST_STATUS_DRAFT)
            .order_by(Post.updated_at.desc())
            .all()
        )
        shared = (
            self.db.query(Post, PostCollaborator.permission)
            .join(PostCollaborator, PostCollaborator.post_id == Post.id)
            .filter(
                PostCollaborator.user_id == identity.id,
                Post.status == POST_STATUS_DRAFT,
            )
            .order_by(Post.updated_at.desc())
            .all()
        )
        unseen = self.notifications.unseen_invite_post_ids(identity.id)

        shared_with_me = []
        for post, grant_permission in shared:
            fields = to_post_response(post).model_dump(exclude={"permission"})
            shared_with_me.append(
                SharedDraftResponse(
                    **fields,
                    author_name=post.author.username,
                    permission=grant_permission,
                    is_viewed=post.id not in unseen,
                )
            )
        return MyDraftsResponse(
            my_drafts=[to_post_response(post, Permission.AUTHOR) for post in own],
            shared_with_me=shared_with_me,
        )

    def list_my_published(self, ctx: RequestContext) -> list[Post]:
        identity = ctx.require_identity()
        return (
            self.db.query(Post)
            .filter(Post.author_id == identity.id, Post.status == POST_STATUS_PUBLISHED)
            .order_by(Post.published_at.desc())
            .all()
        )

    def list_published(self, limit: int = 20, offset: int = 0) -> list[Post]:
        """Return the public feed, most recently published first."""
        return (
            self.db.query(Post)
            .filter(Post.status == POST_STATUS_PUBLISHED)
            .order_by(Post.published_at.desc(), Post.id)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def search_posts(self, query: str) -> list[Post]:
        """Search published posts.

        ``#tag`` tokens must all be present on a post. The remaining words are
        matched as one phrase against the title or the author's username,
        ignoring case. An empty query returns no results.
        """
        tokens = query.split()
        tags = [token[1:].lower() for token in tokens if token.startswith("#") and len(token) > 1]
        text = " ".join(token for token in tokens if not token.startswith("#")).strip()
        if not tags and not text:
            return []

        search = self.db.query(Post).filter(Post.status == POST_STATUS_PUBLISHED)
        for tag in tags:
            search = search.filter(Post.tags.any(Tag.name == tag))
        if text:
            pattern = f"%{_escape_like(text)}%"
            search = search.filter(
                or_(
                    Post.title.ilike(pattern, escape="\\"),
                    Post.author.has(User.username.ilike(pattern, escape="\\")),
                )
            )
        return search.order_by(Post.published_at.desc()).limit(SEARCH_RESULT_LIMIT).all()

    def dashboard_stats(self, ctx: RequestContext) -> DashboardStats:
        """Return draft and published counts plus engagement on the caller's posts."""
        identity = ctx.require_identity()
        counts = dict(
            self.db.query(Post.status, func.count(Post.id))
            .filter(Post.author_id == identity.id)
            .group_by(Post.status)
            .all()
        )
        likes_received = (
            self.db.query(func.count())
            .select_from(Like)
            .join(Post, Post.id == Like.post_id)
            .filter(Post.author_id == identity.id)
            .scalar()
        )
        comments_received = (
            self.db.query(func.count(Comment.id))
            .select_from(Comment)
            .join(Post, Post.id == Comment.post_id)
            .filter(Post.author_id == identity.id, Comment.user_id != identity.id)
            .scalar()
        )
        return DashboardStats(
            drafts=int(counts.get(POST_STATUS_DRAFT, 0)),
            published=int(counts.get(POST_STATUS_PUBLISHED, 0)),
            likes_received=int(likes_received or 0),
            comments_received=int(comments_received or 0),
        )

    def _get_or_create_tags(self, names: list[str]) -> list[Tag]:
        if not names:
            return []
        existing = {tag.name: tag for tag in self.db.query(Tag).filter(Tag.name.in_(names)).all()}
        tags = []
        for name in names:
            tag = existing.get(name)
            if tag is None:
                tag = Tag(name=name)
                self.db.add(tag)
            tags.append(tag)
        return tags
