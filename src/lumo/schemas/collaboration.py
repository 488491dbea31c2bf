# src/lumo/schemas/collaboration.py
"""Schemas for sharing drafts with collaborators."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ShareRequest(BaseModel):
    """Invite one or more users to a draft by email."""

    emails: list[str] = Field(..., min_length=1, description="Invitee email addresses")
    permission: Literal["edit", "comment", "view"] = Field(
        "view",
        description="Access level granted to every invitee",
    )


class CollaboratorResponse(BaseModel):
    """A collaboration grant joined with the invitee's identity."""

    id: int
    post_id: str
    user_id: int
    username: str
    email: str
    avatar_url: str | None = None
    permission: str
    invited_by: int
    invited_at: datetime
    is_viewed: bool = True

    @model_validator(mode="before")
    @classmethod
    def _flatten_user(cls, data: object) -> object:
        if isinstance(data, dict):
            return data

        user = getattr(data, "user", None)
        return {
            "id": data.id,
            "post_id": data.post_id,
            "user_id": data.user_id,
            "username": getattr(user, "username", ""),
            "email": getattr(user, "email", ""),
            "avatar_url": getattr(user, "avatar_url", None),
            "permission": data.permission,
            "invited_by": data.invited_by,
            "invited_at": data.invited_at,
        }

    model_config = ConfigDict(from_attributes=True)


class ShareResponse(BaseModel):
    """Outcome of a share request; unknown emails end up in ``errors``."""

    added: list[CollaboratorResponse]
    errors: list[str]


class CollaboratorAuthor(BaseModel):
    """The owner of a shared post."""

    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class CollaboratorsResponse(BaseModel):
    """Everyone with access to a post."""

    author: CollaboratorAuthor
    collaborators: list[CollaboratorResponse]
