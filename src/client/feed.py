"""Client-side comment feed and post like tracking.

``CommentFeed`` keeps the arranged comments of one page. Every refresh is
a full replace; when refreshes overlap, whichever response arrives last
is kept.
"""

import structlog

from src.comments.models import Comment, CommentType, DisplayMode
from src.comments.tree import CommentNode, arrange_comments

from .device import LIKED_COMMENTS_KEY, LIKED_POSTS_KEY, DeviceStore
from .http import BlogApiClient, BlogApiError
from .reconciler import LikeReconciler, LikeState


logger = structlog.get_logger(__name__)


def _walk(nodes: list[CommentNode]):
    stack = list(nodes)
    while stack:
        node = stack.pop()
        yield node
        stack.extend(node.children)


class CommentFeed:
    """Comments of one page with optimistic likes."""

    def __init__(
        self,
        api: BlogApiClient,
        device: DeviceStore,
        identifier: str,
        comment_type: CommentType = CommentType.BLOG,
        display_mode: DisplayMode = DisplayMode.FULL,
    ):
        self.api = api
        self.identifier = identifier
        self.comment_type = comment_type
        self.display_mode = display_mode
        self.device_id = device.device_id
        self.comments: list[CommentNode] = []
        self.last_error: BlogApiError | None = None
        self.likes = LikeReconciler(
            self._toggle_like,
            self.device_id,
            device.liked(LIKED_COMMENTS_KEY),
        )

    async def _toggle_like(self, comment_id: str, device_id: str):
        return await self.api.toggle_comment_like(comment_id, device_id, self.comment_type)

    async def refresh(self) -> list[CommentNode]:
        """Fetch and arrange the comments.

        On failure the previous list is kept and the error is logged and
        stored in ``last_error``.
        """
        try:
            comments = await self.api.list_comments(
                self.identifier, self.comment_type, self.device_id
            )
        except BlogApiError as e:
            logger.warning(
                "comment_feed_refresh_failed",
                identifier=self.identifier,
                error=e.message,
            )
            self.last_error = e
            return self.comments

        self.last_error = None
        self.comments = arrange_comments(comments, self.display_mode)
        for comment in comments:
            self.likes.seed(comment.id, comment.likes, comment.is_liked)
        return self.comments

    def like_state(self, comment_id: str) -> LikeState:
        return self.likes.state(comment_id)

    async def like(self, comment_id: str) -> LikeState | None:
        """Toggle a comment like; see ``LikeReconciler.toggle``."""
        result = await self.likes.toggle(comment_id)
        if result is not None:
            for node in _walk(self.comments):
                if node.id == comment_id:
                    node.comment.likes = result.like_count
                    node.comment.is_liked = result.is_liked
        return result

    async def submit(
        self,
        content: str,
        user_info: dict[str, str] | None = None,
        parent_id: str | None = None,
    ) -> Comment:
        """Post a comment and reload the feed."""
        comment = await self.api.create_comment(
            self.identifier,
            content,
            comment_type=self.comment_type,
            user_info=user_info,
            parent_id=parent_id,
        )
        await self.refresh()
        return comment


class PostLikes:
    """Like button state of blog posts."""

    def __init__(self, api: BlogApiClient, device: DeviceStore):
        self.api = api
        self.device_id = device.device_id
        self.likes = LikeReconciler(
            api.toggle_post_like,
            self.device_id,
            device.liked(LIKED_POSTS_KEY),
        )

    async def load(self, post_id: str) -> LikeState:
        """Fetch the server state of a post.

        When the fetch fails the count stays unknown (0) and the liked flag
        comes from the local liked set.
        """
        try:
            result = await self.api.get_post_like(post_id, self.device_id)
        except BlogApiError as e:
            logger.warning("post_like_load_failed", post_id=post_id, error=e.message)
            self.likes.seed(post_id, 0)
        else:
            self.likes.seed(post_id, result.like_count, result.is_liked)
        return self.likes.state(post_id)

    async def toggle(self, post_id: str) -> LikeState | None:
        return await self.likes.toggle(post_id)
