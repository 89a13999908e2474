"""Pydantic schemas for post likes."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import LikeToggleResult


class PostLikeRequest(BaseModel):
    """Request to toggle a device's like on a post."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    post_id: str = Field(..., min_length=1, max_length=500)
    device_id: str = Field(..., min_length=1, max_length=100)


class LikeStatusResponse(BaseModel):
    """Current like state of an entity for one device."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    like_count: int = 0
    is_liked: bool = False


class LikeToggleResponse(LikeStatusResponse):
    """Result of a like toggle, shared by posts and comments."""

    success: bool = True

    @classmethod
    def from_result(cls, result: LikeToggleResult) -> "LikeToggleResponse":
        return cls(like_count=result.like_count, is_liked=result.is_liked)
