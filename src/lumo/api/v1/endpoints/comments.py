# src/lumo/api/v1/endpoints/comments.py
"""Comment endpoints."""

from fastapi import APIRouter, status

from lumo.api.v1.dependencies import (
    BroadcasterDep,
    ContextDep,
    OptionalContextDep,
    SessionDep,
)
from lumo.schemas.comment import CommentCreate, CommentResolveUpdate, CommentResponse
from lumo.services.comments import CommentService

router = APIRouter(tags=["comments"])


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: str,
    ctx: OptionalContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> list[CommentResponse]:
    """List comments on a post, newest first.

    Collaborators reviewing a draft only see their own comments.
    """
    comments = CommentService(db, broadcaster).list_comments(ctx, post_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> CommentResponse:
    comment = CommentService(db, broadcaster).add_comment(ctx, post_id, payload.content)
    return CommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> None:
    CommentService(db, broadcaster).delete_comment(ctx, comment_id)


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def resolve_comment(
    comment_id: int,
    payload: CommentResolveUpdate,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> CommentResponse:
    """Mark a comment resolved or reopen it."""
    comment = CommentService(db, broadcaster).set_resolved(ctx, comment_id, payload.is_resolved)
    return CommentResponse.model_validate(comment)
