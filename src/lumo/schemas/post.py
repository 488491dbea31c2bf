# src/lumo/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for starting a new draft."""

    title: str | None = Field(None, max_length=300, description="Working title")
    content: str | None = Field(None, description="Editor output, stored verbatim")


class PostUpdate(BaseModel):
    """Partial update for a draft; omitted fields are left unchanged."""

    title: str | None = Field(None, max_length=300)
    content: str | None = None
    cover_image_url: str | None = None
    tags: list[str] | None = Field(None, description="Replaces the post's tags when present")


class AuthorSummary(BaseModel):
    """Public identity of a post's author."""

    id: int
    username: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    author_id: int
    author: AuthorSummary
    title: str | None
    content: str | None
    cover_image_url: str | None
    status: str
    read_time: int | None
    tags: list[str] = Field(default_factory=list)
    excerpt: str = ""
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None
    permission: str | None = Field(
        None,
        description="Caller's access level when the post was fetched individually",
    )

    model_config = ConfigDict(from_attributes=True)


class SharedDraftResponse(PostResponse):
    """A draft another author shared with the caller."""

    author_name: str
    permission: str
    is_viewed: bool


class MyDraftsResponse(BaseModel):
    """Drafts the caller owns plus drafts shared with them."""

    my_drafts: list[PostResponse]
    shared_with_me: list[SharedDraftResponse]


class DashboardStats(BaseModel):
    """Counters shown on the author's dashboard."""

    drafts: int
    published: int
    likes_received: int
    comments_received: int


class LikeStatus(BaseModel):
    """Like state of a post for the caller."""

    liked: bool
    like_count: int


class BookmarkStatus(BaseModel):
    """Bookmark state of a post for the caller."""

    bookmarked: bool
