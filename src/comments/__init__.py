"""Comment system module.

Provides threaded comments with:
- Flat storage in LeanCloud with parent pointers
- Thread reconstruction (tree or level-annotated list)
- Device-scoped likes
- Rate limiting and duplicate detection

Note: Router is not exported here to avoid circular imports.
Import directly from src.comments.router when needed.
"""

from .models import Comment, CommentAuthor, CommentType, DisplayMode
from .service import CommentService
from .tree import CommentNode, arrange_comments, build_comment_tree, flatten_comment_tree


__all__ = [
    "Comment",
    "CommentAuthor",
    "CommentNode",
    "CommentService",
    "CommentType",
    "DisplayMode",
    "arrange_comments",
    "build_comment_tree",
    "flatten_comment_tree",
]
