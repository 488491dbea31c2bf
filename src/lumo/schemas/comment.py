# src/lumo/schemas/comment.py
"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CommentCreate(BaseModel):
    """Schema for adding a comment."""

    content: str = Field(..., max_length=5000)


class CommentResolveUpdate(BaseModel):
    """Toggle a comment's resolved flag."""

    is_resolved: bool


class CommentResponse(BaseModel):
    """A comment together with its author's display fields."""

    id: int
    post_id: str
    user_id: int
    content: str
    is_resolved: bool
    created_at: datetime
    username: str
    email: str
    avatar_url: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_author(cls, data: object) -> object:
        if isinstance(data, dict):
            return data

        author = getattr(data, "author", None)
        return {
            "id": data.id,
            "post_id": data.post_id,
            "user_id": data.user_id,
            "content": data.content,
            "is_resolved": data.is_resolved,
            "created_at": data.created_at,
            "username": getattr(author, "username", ""),
            "email": getattr(author, "email", ""),
            "avatar_url": getattr(author, "avatar_url", None),
        }

    model_config = ConfigDict(from_attributes=True)
