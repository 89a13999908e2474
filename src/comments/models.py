"""Comment entities.

Comments live in LeanCloud as flat records. Each record carries an optional
``parent`` pointer to another comment of the same class; the thread shape is
rebuilt from those pointers on every read (see ``src.comments.tree``).

Two independent comment spaces exist:
- blog comments, scoped by post slug
- Telegram comments, scoped by channel post id
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from src.core.leancloud import LeanObject, parse_date


class CommentType(str, Enum):
    """Comment space a record belongs to."""

    BLOG = "blog"
    TELEGRAM = "telegram"

    @property
    def class_name(self) -> str:
        """LeanCloud class holding the comments."""
        return "TelegramComment" if self is CommentType.TELEGRAM else "Comment"

    @property
    def like_class_name(self) -> str:
        """LeanCloud class holding one record per (comment, device) like."""
        return "TelegramCommentLike" if self is CommentType.TELEGRAM else "CommentLike"

    @property
    def identifier_field(self) -> str:
        """Field that scopes comments to a page."""
        return "postId" if self is CommentType.TELEGRAM else "slug"


class DisplayMode(str, Enum):
    """How a comment batch is arranged for display."""

    FULL = "full"
    COMPACT = "compact"
    GUESTBOOK = "guestbook"


@dataclass
class CommentAuthor:
    """Identity attached to a new comment."""

    nickname: str
    email: str
    website: str | None = None
    avatar: str | None = None
    is_admin: bool = False


@dataclass
class Comment:
    """Flat comment record as stored in LeanCloud."""

    id: str
    identifier: str
    comment_type: CommentType
    nickname: str
    email: str
    content: str
    created_at: datetime
    parent_id: str | None = None
    website: str | None = None
    avatar: str | None = None
    is_admin: bool = False
    likes: int = 0
    is_liked: bool = False

    @classmethod
    def from_lean_object(
        cls,
        obj: LeanObject,
        comment_type: CommentType,
    ) -> "Comment":
        """Create Comment from a LeanCloud object.

        ``parent`` may be a bare pointer or an included object; both carry
        ``objectId``.
        """
        parent = obj.get("parent")
        parent_id = parent.get("objectId") if isinstance(parent, dict) else None

        return cls(
            id=obj.get("objectId") or obj["id"],
            identifier=obj.get(comment_type.identifier_field) or "",
            comment_type=comment_type,
            nickname=obj.get("nickname") or "匿名",
            email=obj.get("email") or "",
            content=obj.get("content") or "",
            created_at=parse_date(obj.get("createdAt")) or datetime.now(UTC),
            parent_id=parent_id,
            website=obj.get("website"),
            avatar=obj.get("avatar"),
            is_admin=bool(obj.get("isAdmin", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "identifier": self.identifier,
            "comment_type": self.comment_type.value,
            "parent_id": self.parent_id,
            "nickname": self.nickname,
            "website": self.website,
            "avatar": self.avatar,
            "content": self.content,
            "is_admin": self.is_admin,
            "likes": self.likes,
            "is_liked": self.is_liked,
            "created_at": self.created_at.isoformat(),
        }

