# src/lumo/schemas/notification.py
"""Notification schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NotificationResponse(BaseModel):
    """A notification with the actor and post details the inbox renders."""

    id: int
    user_id: int
    actor_id: int | None
    post_id: str | None
    type: str
    message: str
    is_read: bool
    created_at: datetime
    actor_name: str | None = None
    actor_avatar: str | None = None
    post_title: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_relations(cls, data: object) -> object:
        if isinstance(data, dict):
            return data

        actor = getattr(data, "actor", None)
        post = getattr(data, "post", None)
        return {
            "id": data.id,
            "user_id": data.user_id,
            "actor_id": data.actor_id,
            "post_id": data.post_id,
            "type": data.type,
            "message": data.message,
            "is_read": data.is_read,
            "created_at": data.created_at,
            "actor_name": actor.username if actor is not None else None,
            "actor_avatar": actor.avatar_url if actor is not None else None,
            "post_title": post.title if post is not None else None,
        }

    model_config = ConfigDict(from_attributes=True)


class UnreadCountResponse(BaseModel):
    """Badge counter."""

    count: int


class MarkReadRequest(BaseModel):
    """Acknowledge one notification, every notification for a post, or all."""

    notification_id: int | None = Field(None, description="Mark a single notification")
    post_id: str | None = Field(None, description="Mark everything tied to a post")


class MarkReadResponse(BaseModel):
    """Number of notifications that changed state."""

    updated: int
