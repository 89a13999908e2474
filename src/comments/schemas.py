"""Pydantic schemas for the comment API.

Wire format is camelCase (``parentId``, ``isLiked``, ...) to match the
browser client; Python code uses the snake_case field names.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Comment, CommentType, DisplayMode
from .tree import CommentNode


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommentView(str, Enum):
    """Server-side arrangement of a comment listing."""

    RAW = "raw"  # flat records, chronological, parentId only
    FLAT = "flat"  # depth-first thread with levels
    TREE = "tree"  # nested replies, newest threads first

    @property
    def display_mode(self) -> DisplayMode:
        return DisplayMode.GUESTBOOK if self is CommentView.TREE else DisplayMode.FULL


# ==============================================================================
# Request Schemas
# ==============================================================================


class UserInfo(CamelModel):
    """Guest identity sent with a new comment."""

    nickname: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=200)
    website: str | None = Field(None, max_length=500)
    avatar: str | None = Field(None, max_length=500)


class CreateCommentRequest(CamelModel):
    """Request to create a new comment."""

    identifier: str = Field(..., min_length=1, max_length=500)
    comment_type: CommentType = CommentType.BLOG
    content: str = Field(..., min_length=1, max_length=10000)
    parent_id: str | None = None
    user_info: UserInfo | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and validate content."""
        v = v.strip()
        if not v:
            msg = "Content cannot be empty"
            raise ValueError(msg)
        return v


class CommentLikeRequest(CamelModel):
    """Request to toggle a device's like on a comment."""

    comment_id: str = Field(..., min_length=1)
    comment_type: CommentType = CommentType.BLOG
    device_id: str = Field(..., min_length=1, max_length=100)


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(CamelModel):
    """Response for a single comment.

    ``level`` is set for arranged views; ``replies`` only in tree view.
    """

    id: str
    identifier: str
    comment_type: CommentType
    parent_id: str | None = None
    nickname: str
    email: str | None = None
    website: str | None = None
    avatar: str | None = None
    content: str
    is_admin: bool = False
    likes: int = 0
    is_liked: bool = False
    created_at: datetime
    level: int | None = None
    replies: list["CommentResponse"] | None = None

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        include_email: bool = False,
    ) -> "CommentResponse":
        """Create response from a Comment entity.

        Emails are only exposed to admins.
        """
        return cls(
            id=comment.id,
            identifier=comment.identifier,
            comment_type=comment.comment_type,
            parent_id=comment.parent_id,
            nickname=comment.nickname,
            email=comment.email if include_email else None,
            website=comment.website,
            avatar=comment.avatar,
            content=comment.content,
            is_admin=comment.is_admin,
            likes=comment.likes,
            is_liked=comment.is_liked,
            created_at=comment.created_at,
        )

    @classmethod
    def from_node(cls, node: CommentNode, nested: bool = False) -> "CommentResponse":
        """Create response from a placed comment, recursing into replies."""
        response = cls.from_comment(node.comment)
        response.level = node.level
        if nested:
            response.replies = [cls.from_node(child, nested=True) for child in node.children]
        return response


class CommentListResponse(CamelModel):
    """Comments of one scope."""

    comments: list[CommentResponse]
    view: CommentView
    total: int


class CreateCommentResponse(CamelModel):
    """Response for a created comment."""

    success: bool = True
    comment: CommentResponse
