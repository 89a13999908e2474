"""Blog posts, short links and search.

Note: Router is not exported here to avoid circular imports.
"""

from .posts import BlogPost, PostRepository
from .search import SearchQueryError, SearchResult, search_posts


__all__ = [
    "BlogPost",
    "PostRepository",
    "SearchQueryError",
    "SearchResult",
    "search_posts",
]
