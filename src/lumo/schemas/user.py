# src/lumo/schemas/user.py
"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserPublic(BaseModel):
    """Public profile fields."""

    id: int
    username: str
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FollowStatus(BaseModel):
    """Whether the caller follows a user."""

    following: bool


class FollowCounts(BaseModel):
    """Follower and following totals for a user."""

    followers: int
    following: int
