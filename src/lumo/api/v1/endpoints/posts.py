# src/lumo/api/v1/endpoints/posts.py
"""Post-related endpoints for the Lumo API."""

from fastapi import APIRouter, Query, status

from lumo.api.v1.dependencies import (
    BroadcasterDep,
    ContextDep,
    OptionalContextDep,
    SessionDep,
)
from lumo.schemas.post import (
    BookmarkStatus,
    DashboardStats,
    LikeStatus,
    MyDraftsResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from lumo.services.posts import PostService, to_post_response
from lumo.services.social import SocialService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> PostResponse:
    """Start a new draft owned by the caller."""
    service = PostService(db, broadcaster)
    post = service.create_draft(ctx, title=payload.title, content=payload.content)
    return to_post_response(post)


@router.get("/drafts", response_model=MyDraftsResponse)
async def list_drafts(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> MyDraftsResponse:
    """Return the caller's drafts and the drafts shared with them."""
    return PostService(db, broadcaster).list_my_drafts(ctx)


@router.get("/my-published", response_model=list[PostResponse])
async def list_my_published(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> list[PostResponse]:
    posts = PostService(db, broadcaster).list_my_published(ctx)
    return [to_post_response(post) for post in posts]


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> DashboardStats:
    return PostService(db, broadcaster).dashboard_stats(ctx)


@router.get("/bookmarks", response_model=list[PostResponse])
async def list_bookmarks(ctx: ContextDep, db: SessionDep) -> list[PostResponse]:
    """Return the caller's bookmarked posts."""
    return [to_post_response(post) for post in SocialService(db).list_bookmarks(ctx)]


@router.get("/published", response_model=list[PostResponse])
async def list_published(
    db: SessionDep,
    broadcaster: BroadcasterDep,
    limit: int = Query(20, ge=1, le=100, description="Maximum number of posts to return"),
    offset: int = Query(0, ge=0, description="Number of posts to skip"),
) -> list[PostResponse]:
    """Public feed of published posts, newest first."""
    posts = PostService(db, broadcaster).list_published(limit=limit, offset=offset)
    return [to_post_response(post) for post in posts]


@router.get("/search", response_model=list[PostResponse])
async def search_posts(
    db: SessionDep,
    broadcaster: BroadcasterDep,
    q: str = Query("", max_length=200, description="Words and #tags to search for"),
) -> list[PostResponse]:
    """Search published posts by title, author and tags."""
    posts = PostService(db, broadcaster).search_posts(q)
    return [to_post_response(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    ctx: OptionalContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> PostResponse:
    """Get a specific post by ID.

    Published posts are public. Drafts are visible to their author and
    collaborators only.
    """
    post, permission = PostService(db, broadcaster).get_post(ctx, post_id)
    return to_post_response(post, permission)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> PostResponse:
    """Update the fields present in the request body."""
    post = PostService(db, broadcaster).update_draft(ctx, post_id, payload)
    return to_post_response(post)


@router.post("/{post_id}/publish", response_model=PostResponse)
async def publish_post(
    post_id: str,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> PostResponse:
    post = PostService(db, broadcaster).publish(ctx, post_id)
    return to_post_response(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> None:
    """Delete a post and everything attached to it."""
    PostService(db, broadcaster).delete_post(ctx, post_id)


@router.post("/{post_id}/like", response_model=LikeStatus)
async def like_post(post_id: str, ctx: ContextDep, db: SessionDep) -> LikeStatus:
    service = SocialService(db)
    service.like(ctx, post_id)
    return LikeStatus(liked=True, like_count=service.like_count(post_id))


@router.delete("/{post_id}/like", response_model=LikeStatus)
async def unlike_post(post_id: str, ctx: ContextDep, db: SessionDep) -> LikeStatus:
    service = SocialService(db)
    service.unlike(ctx, post_id)
    return LikeStatus(liked=False, like_count=service.like_count(post_id))


@router.get("/{post_id}/like", response_model=LikeStatus)
async def like_status(post_id: str, ctx: OptionalContextDep, db: SessionDep) -> LikeStatus:
    """Return the like total and whether the caller liked the post."""
    service = SocialService(db)
    return LikeStatus(
        liked=service.has_liked(ctx.user_id, post_id),
        like_count=service.like_count(post_id),
    )


@router.post("/{post_id}/bookmark", response_model=BookmarkStatus)
async def bookmark_post(post_id: str, ctx: ContextDep, db: SessionDep) -> BookmarkStatus:
    SocialService(db).bookmark(ctx, post_id)
    return BookmarkStatus(bookmarked=True)


@router.delete("/{post_id}/bookmark", response_model=BookmarkStatus)
async def unbookmark_post(post_id: str, ctx: ContextDep, db: SessionDep) -> BookmarkStatus:
    SocialService(db).unbookmark(ctx, post_id)
    return BookmarkStatus(bookmarked=False)
