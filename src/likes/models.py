"""Like entities shared by post likes, comment likes and the client."""

from dataclasses import dataclass


# LeanCloud classes for post likes
POST_LIKES_CLASS = "PostLikes"  # aggregate counter per post
POST_LIKE_LOG_CLASS = "PostLikeLog"  # one row per (post, device)


@dataclass(frozen=True)
class LikeToggleResult:
    """Server-authoritative like state of one entity for one device."""

    like_count: int
    is_liked: bool
