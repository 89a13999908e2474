"""Post likes module.

Note: Router is not exported here to avoid circular imports.
"""

from .models import LikeToggleResult
from .service import PostLikeService


__all__ = ["LikeToggleResult", "PostLikeService"]
