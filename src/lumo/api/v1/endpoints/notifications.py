# src/lumo/api/v1/endpoints/notifications.py
"""Notification inbox and badge endpoints."""

from fastapi import APIRouter, Query

from lumo.api.v1.dependencies import BroadcasterDep, ContextDep, SessionDep
from lumo.core.settings import settings
from lumo.schemas.notification import (
    MarkReadRequest,
    MarkReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from lumo.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
    limit: int = Query(settings.notification_page_size, ge=1, le=200),
) -> list[NotificationResponse]:
    """Return the caller's latest notifications, newest first."""
    identity = ctx.require_identity()
    notifications = NotificationService(db, broadcaster).list_for_user(identity.id, limit)
    return [NotificationResponse.model_validate(item) for item in notifications]


@router.get("/count", response_model=UnreadCountResponse)
async def unread_count(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> UnreadCountResponse:
    identity = ctx.require_identity()
    return UnreadCountResponse(count=NotificationService(db, broadcaster).unread_count(identity.id))


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_read(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
    payload: MarkReadRequest | None = None,
) -> MarkReadResponse:
    """Mark one notification, a post's notifications, or all of them as read."""
    identity = ctx.require_identity()
    request = payload or MarkReadRequest()
    updated = NotificationService(db, broadcaster).mark_read(
        identity.id,
        notification_id=request.notification_id,
        post_id=request.post_id,
    )
    return MarkReadResponse(updated=updated)


@router.get("/invites/count", response_model=UnreadCountResponse)
async def unread_invite_count(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> UnreadCountResponse:
    """Badge count for drafts shared with the caller that they have not opened."""
    identity = ctx.require_identity()
    count = NotificationService(db, broadcaster).unread_invite_count(identity.id)
    return UnreadCountResponse(count=count)


@router.post("/invites/mark-viewed", response_model=MarkReadResponse)
async def mark_invites_viewed(
    ctx: ContextDep,
    db: SessionDep,
    broadcaster: BroadcasterDep,
) -> MarkReadResponse:
    identity = ctx.require_identity()
    updated = NotificationService(db, broadcaster).mark_invites_viewed(identity.id)
    return MarkReadResponse(updated=updated)
