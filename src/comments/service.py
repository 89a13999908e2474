"""Comment system service layer.

Business logic for:
- Reading one comment scope with like counts and device like flags
- Creating comments (Markdown rendering, sanitisation, rate limiting)
- Toggling device-scoped comment likes
- Admin listing and cascading deletion
"""

import hashlib
from collections import Counter
from typing import TYPE_CHECKING, Any

import bleach
import markdown

from src.core.leancloud import MAX_QUERY_LIMIT, LeanCloudClient, LeanObject, pointer
from src.core.logging import get_logger
from src.core.redis import comment_rate_key, comment_recent_key
from src.likes.models import LikeToggleResult

from .models import Comment, CommentAuthor, CommentType, DisplayMode
from .tree import CommentNode, arrange_comments, build_comment_tree, flatten_comment_tree


if TYPE_CHECKING:
    from redis.asyncio import Redis


logger = get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class InvalidCommentError(CommentError):
    """Request is missing required comment data."""

    def __init__(self, message: str = "Missing required parameters"):
        super().__init__(message, "invalid_comment")


class RateLimitExceededError(CommentError):
    """Rate limit exceeded."""

    def __init__(self, message: str = "Too many comments, slow down"):
        super().__init__(message, "rate_limit_exceeded")


class DuplicateCommentError(CommentError):
    """Same author posted the same content recently."""

    def __init__(self, message: str = "Duplicate comment detected"):
        super().__init__(message, "duplicate_comment")


# ==============================================================================
# Content Rendering
# ==============================================================================


ALLOWED_TAGS = [
    "a", "abbr", "b", "blockquote", "br", "code", "del", "em", "h1", "h2",
    "h3", "h4", "h5", "h6", "hr", "i", "img", "li", "ol", "p", "pre",
    "span", "strong", "table", "tbody", "td", "th", "thead", "tr", "ul",
]  # fmt: skip
ALLOWED_ATTRS = {
    "*": ["class"],
    "a": ["href", "title", "rel"],
    "img": ["src", "alt", "title"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]


def render_content(content: str) -> str:
    """Render Markdown to HTML and strip everything outside the allow-list."""
    html = markdown.markdown(content, extensions=["fenced_code", "tables"])
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def content_hash(content: str) -> str:
    """Fingerprint of comment content for duplicate detection."""
    return hashlib.sha256(content.encode()).hexdigest()[:32]


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment management backed by LeanCloud."""

    COMMENTS_PER_MINUTE = 5
    COMMENTS_PER_HOUR = 60

    def __init__(self, leancloud: LeanCloudClient, redis: "Redis | None" = None):
        self.leancloud = leancloud
        self.redis = redis

    async def _query_all(
        self,
        class_name: str,
        where: dict[str, Any],
        order: str | None = None,
        include: str | None = None,
    ) -> list[LeanObject]:
        """Page through a query until every match is read."""
        results: list[LeanObject] = []
        skip = 0
        while True:
            page = await self.leancloud.query(
                class_name,
                where,
                order=order,
                include=include,
                limit=MAX_QUERY_LIMIT,
                skip=skip,
            )
            results.extend(page)
            if len(page) < MAX_QUERY_LIMIT:
                return results
            skip += MAX_QUERY_LIMIT

    # ==========================================================================
    # Rate Limiting (Redis-based)
    # ==========================================================================

    async def check_rate_limit(self, author: str) -> None:
        """Raise RateLimitExceededError when the author posts too often."""
        if not self.redis:
            return

        minute_count = await self.redis.get(comment_rate_key(author, "minute"))
        if minute_count and int(minute_count) >= self.COMMENTS_PER_MINUTE:
            raise RateLimitExceededError

        hour_count = await self.redis.get(comment_rate_key(author, "hour"))
        if hour_count and int(hour_count) >= self.COMMENTS_PER_HOUR:
            raise RateLimitExceededError("Hourly comment limit exceeded")

    async def increment_rate_limit(self, author: str) -> None:
        """Increment rate limit counters."""
        if not self.redis:
            return

        key_minute = comment_rate_key(author, "minute")
        key_hour = comment_rate_key(author, "hour")

        pipe = self.redis.pipeline()
        pipe.incr(key_minute)
        pipe.expire(key_minute, 60)
        pipe.incr(key_hour)
        pipe.expire(key_hour, 3600)
        await pipe.execute()

    async def check_duplicate(self, author: str, content: str) -> None:
        """Raise DuplicateCommentError if the author just posted this content."""
        if not self.redis:
            return

        recent = await self.redis.lrange(comment_recent_key(author), 0, -1)
        if content_hash(content) in recent:
            raise DuplicateCommentError

    async def remember_content(self, author: str, content: str) -> None:
        """Record stored content so an identical repost is refused."""
        if not self.redis:
            return

        key = comment_recent_key(author)
        await self.redis.lpush(key, content_hash(content))
        await self.redis.ltrim(key, 0, 9)
        await self.redis.expire(key, 3600)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def list_comments(
        self,
        identifier: str,
        comment_type: CommentType,
        device_id: str | None = None,
    ) -> list[Comment]:
        """Fetch every comment of one scope, oldest first.

        Like counts come from the like records of the whole batch (one
        query), ``is_liked`` from the records of ``device_id``.
        """
        objects = await self._query_all(
            comment_type.class_name,
            {comment_type.identifier_field: identifier},
            order="createdAt",
            include="parent",
        )
        if not objects:
            return []

        comments = [Comment.from_lean_object(o, comment_type) for o in objects]

        likes = await self._query_all(
            comment_type.like_class_name,
            {"commentId": {"$in": [c.id for c in comments]}},
        )
        like_counts = Counter(like.get("commentId") for like in likes)
        liked_by_device = {
            like.get("commentId")
            for like in likes
            if device_id and like.get("deviceId") == device_id
        }

        for comment in comments:
            comment.likes = like_counts.get(comment.id, 0)
            comment.is_liked = comment.id in liked_by_device

        logger.debug(
            "comments_fetched",
            identifier=identifier,
            comment_type=comment_type.value,
            count=len(comments),
        )
        return comments

    async def get_thread(
        self,
        identifier: str,
        comment_type: CommentType,
        device_id: str | None = None,
        display_mode: DisplayMode = DisplayMode.FULL,
    ) -> list[CommentNode]:
        """Fetch one scope and arrange it for ``display_mode``."""
        comments = await self.list_comments(identifier, comment_type, device_id)
        return arrange_comments(comments, display_mode)

    async def get_comment(
        self,
        comment_id: str,
        comment_type: CommentType,
    ) -> Comment | None:
        """Find a single comment by id."""
        obj = await self.leancloud.first(
            comment_type.class_name, {"objectId": comment_id}
        )
        return Comment.from_lean_object(obj, comment_type) if obj else None

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def create_comment(
        self,
        identifier: str,
        comment_type: CommentType,
        content: str,
        author: CommentAuthor,
        parent_id: str | None = None,
    ) -> Comment:
        """Create a new comment.

        Performs:
        - Rate limiting and duplicate checks (admins are exempt)
        - Parent validation (same comment space and scope)
        - Markdown rendering and HTML sanitisation
        """
        if not identifier or not content.strip():
            raise InvalidCommentError

        if not author.is_admin:
            await self.check_rate_limit(author.email)
            await self.check_duplicate(author.email, content)

        if parent_id:
            parent = await self.get_comment(parent_id, comment_type)
            if parent is None or parent.identifier != identifier:
                raise CommentNotFoundError("Parent comment not found")

        data: dict[str, Any] = {
            "nickname": author.nickname,
            "email": author.email,
            "website": author.website,
            "avatar": author.avatar,
            "content": render_content(content),
            "isAdmin": author.is_admin,
            comment_type.identifier_field: identifier,
        }
        if parent_id:
            data["parent"] = pointer(comment_type.class_name, parent_id)

        saved = await self.leancloud.create(comment_type.class_name, data)

        if not author.is_admin:
            await self.increment_rate_limit(author.email)
            await self.remember_content(author.email, content)

        comment = Comment.from_lean_object(saved, comment_type)
        logger.info(
            "comment_created",
            comment_id=comment.id,
            identifier=identifier,
            comment_type=comment_type.value,
            parent_id=parent_id,
            is_admin=author.is_admin,
        )
        return comment

    async def toggle_like(
        self,
        comment_id: str,
        comment_type: CommentType,
        device_id: str,
    ) -> LikeToggleResult:
        """Like or unlike a comment for one device and recount."""
        like_class = comment_type.like_class_name
        where = {"commentId": comment_id, "deviceId": device_id}

        existing = await self.leancloud.first(like_class, where)
        if existing:
            await self.leancloud.destroy(like_class, existing["objectId"])
        else:
            await self.leancloud.create(like_class, where)

        total = await self.leancloud.count(like_class, {"commentId": comment_id})
        result = LikeToggleResult(like_count=total, is_liked=existing is None)

        logger.info(
            "comment_like_toggled",
            comment_id=comment_id,
            comment_type=comment_type.value,
            is_liked=result.is_liked,
            like_count=result.like_count,
        )
        return result

    # ==========================================================================
    # Moderation
    # ==========================================================================

    async def list_all(
        self,
        comment_type: CommentType,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Comment], int]:
        """List every comment of a space, newest first, with the total."""
        objects = await self.leancloud.query(
            comment_type.class_name,
            order="-createdAt",
            limit=limit,
            skip=(page - 1) * limit,
        )
        total = await self.leancloud.count(comment_type.class_name)
        return [Comment.from_lean_object(o, comment_type) for o in objects], total

    async def delete_comment(self, comment_id: str, comment_type: CommentType) -> int:
        """Delete a comment, all of its replies and their like records.

        Returns:
            Number of comments removed.
        """
        target = await self.get_comment(comment_id, comment_type)
        if target is None:
            raise CommentNotFoundError

        scope = await self._query_all(
            comment_type.class_name,
            {comment_type.identifier_field: target.identifier},
        )
        comments = [Comment.from_lean_object(o, comment_type) for o in scope]

        subtree: list[str] = []
        for root in build_comment_tree(comments):
            nodes = flatten_comment_tree([root])
            for index, node in enumerate(nodes):
                if node.id == comment_id:
                    subtree = [node.id]
                    for descendant in nodes[index + 1 :]:
                        if descendant.level <= node.level:
                            break
                        subtree.append(descendant.id)
                    break
            if subtree:
                break
        if not subtree:
            subtree = [comment_id]

        likes = await self._query_all(
            comment_type.like_class_name,
            {"commentId": {"$in": subtree}},
        )
        if likes:
            await self.leancloud.destroy_all(
                comment_type.like_class_name, [like["objectId"] for like in likes]
            )
        await self.leancloud.destroy_all(comment_type.class_name, subtree)

        logger.info(
            "comment_deleted",
            comment_id=comment_id,
            comment_type=comment_type.value,
            removed=len(subtree),
            likes_removed=len(likes),
        )
        return len(subtree)
