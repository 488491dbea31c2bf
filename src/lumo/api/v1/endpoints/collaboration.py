# src/lumo/api/v1/endpoints/collaboration.py
"""Endpoints for sharing drafts with collaborators."""

from fastapi import APIRouter, status

from lumo.api.v1.dependencies import BroadcasterDep, ContextDep, MailerDep, SessionDep
from lumo.schemas.collaboration import (
    CollaboratorResponse,
    CollaboratorsResponse,
    ShareRequest,
    ShareResponse,
)
from lumo.services.collaboration import CollaborationService

router = APIRouter(prefix="/posts", tags=["collaboration"])


@router.post("/{post_id}/share", response_model=ShareResponse)
async def share_post(
    post_id: str,
    payload: ShareRequest,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
    mailer: MailerDep,
) -> ShareResponse:
    """Grant access to a draft by email.

    Unknown emails do not fail the request; they are listed in ``errors``.
    """
    service = CollaborationService(db, broadcaster, mailer)
    result = service.share(ctx, post_id, payload.emails, payload.permission)
    return ShareResponse(
        added=[
            CollaboratorResponse.model_validate(grant).model_copy(update={"is_viewed": False})
            for grant in result.added
        ],
        errors=result.errors,
    )


@router.get("/{post_id}/collaborators", response_model=CollaboratorsResponse)
async def list_collaborators(
    post_id: str,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
    mailer: MailerDep,
) -> CollaboratorsResponse:
    """List the author and collaborators of a post."""
    return CollaborationService(db, broadcaster, mailer).list_collaborators(ctx, post_id)


@router.delete("/{post_id}/collaborators/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_collaborator(
    post_id: str,
    user_id: int,
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
    mailer: MailerDep,
) -> None:
    CollaborationService(db, broadcaster, mailer).revoke(ctx, post_id, user_id)
