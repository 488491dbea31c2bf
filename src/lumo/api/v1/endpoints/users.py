# src/lumo/api/v1/endpoints/users.py
"""User profile and follow endpoints."""

from fastapi import APIRouter

from lumo.api.v1.dependencies import ContextDep, OptionalContextDep, SessionDep
from lumo.models import Post
from lumo.models.post import POST_STATUS_PUBLISHED
from lumo.schemas.post import PostResponse
from lumo.schemas.user import FollowCounts, FollowStatus, UserPublic
from lumo.services.posts import to_post_response
from lumo.services.social import SocialService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(user_id: int, db: SessionDep) -> UserPublic:
    """Return a user's public profile."""
    return UserPublic.model_validate(SocialService(db).get_user(user_id))


@router.get("/{user_id}/posts", response_model=list[PostResponse])
async def list_user_posts(user_id: int, db: SessionDep) -> list[PostResponse]:
    """Return a user's published posts, newest first."""
    SocialService(db).get_user(user_id)
    posts = (
        db.query(Post)
        .filter(Post.author_id == user_id, Post.status == POST_STATUS_PUBLISHED)
        .order_by(Post.published_at.desc())
        .all()
    )
    return [to_post_response(post) for post in posts]


@router.post("/{user_id}/follow", response_model=FollowStatus)
async def follow_user(user_id: int, ctx: ContextDep, db: SessionDep) -> FollowStatus:
    SocialService(db).follow(ctx, user_id)
    return FollowStatus(following=True)


@router.delete("/{user_id}/follow", response_model=FollowStatus)
async def unfollow_user(user_id: int, ctx: ContextDep, db: SessionDep) -> FollowStatus:
    SocialService(db).unfollow(ctx, user_id)
    return FollowStatus(following=False)


@router.get("/{user_id}/followers", response_model=list[UserPublic])
async def list_followers(user_id: int, db: SessionDep) -> list[UserPublic]:
    return [UserPublic.model_validate(user) for user in SocialService(db).followers(user_id)]


@router.get("/{user_id}/following", response_model=list[UserPublic])
async def list_following(user_id: int, db: SessionDep) -> list[UserPublic]:
    return [UserPublic.model_validate(user) for user in SocialService(db).following(user_id)]


@router.get("/{user_id}/follow-status", response_model=FollowStatus)
async def follow_status(user_id: int, ctx: OptionalContextDep, db: SessionDep) -> FollowStatus:
    """Whether the caller follows the user; always false for anonymous callers."""
    return FollowStatus(following=SocialService(db).is_following(ctx.user_id, user_id))


@router.get("/{user_id}/follow-counts", response_model=FollowCounts)
async def follow_counts(user_id: int, db: SessionDep) -> FollowCounts:
    return FollowCounts(**SocialService(db).follow_counts(user_id))
