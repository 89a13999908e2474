"""Client side of the blog API.

Device identity, optimistic like reconciliation and the comment feed, for
use by scripts, bots and tests that talk to a running server.
"""

from .device import DeviceStore
from .feed import CommentFeed, PostLikes
from .http import BlogApiClient, BlogApiError
from .reconciler import LikePhase, LikeReconciler, LikeState


__all__ = [
    "BlogApiClient",
    "BlogApiError",
    "CommentFeed",
    "DeviceStore",
    "LikePhase",
    "LikeReconciler",
    "LikeState",
    "PostLikes",
]
