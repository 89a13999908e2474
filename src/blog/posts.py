"""Blog post loading.

Posts are Markdown files with a YAML front matter block::

    ---
    title: Strongly connected components
    pubDate: 2024-05-01
    tags: [graph]
    categories: [algorithms]
    ---
    Body...
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import yaml

from src.core.logging import get_logger
from src.shortlink.service import SinkClient


logger = get_logger(__name__)

FRONT_MATTER_DELIMITER = "---"


@dataclass
class BlogPost:
    slug: str
    title: str
    pub_date: datetime
    body: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    draft: bool = False
    long_url: str = ""
    short_link: str | None = None

    @property
    def url(self) -> str:
        """Short link when one exists, else the full URL."""
        return self.short_link or self.long_url


def split_front_matter(raw: str) -> tuple[dict[str, Any], str]:
    """Split a document into (front matter, body).

    Documents without front matter return an empty mapping.
    """
    lines = raw.lstrip("\ufeff").splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, raw

    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_DELIMITER:
            meta = yaml.safe_load("".join(lines[1:index])) or {}
            return (meta if isinstance(meta, dict) else {}), "".join(lines[index + 1 :])

    return {}, raw


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str) and value:
        return _as_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
    return datetime.fromtimestamp(0, UTC)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def load_post(path: Path, content_dir: Path) -> BlogPost:
    """Read one Markdown file."""
    meta, body = split_front_matter(path.read_text(encoding="utf-8"))

    relative = path.relative_to(content_dir).with_suffix("")
    if relative.name == "index" and relative.parent != Path("."):
        relative = relative.parent
    slug = str(meta.get("slug") or relative.as_posix())

    return BlogPost(
        slug=slug,
        title=str(meta.get("title") or relative.name),
        pub_date=_as_datetime(meta.get("pubDate")),
        body=body,
        description=str(meta.get("description") or ""),
        tags=_as_list(meta.get("tags")),
        categories=_as_list(meta.get("categories")),
        draft=bool(meta.get("draft", False)),
    )


class PostRepository:
    """Published posts with their long and short URLs.

    Posts are read once and kept for the lifetime of the repository.
    """

    def __init__(
        self,
        content_dir: Path | str,
        site_url: str,
        sink: SinkClient | None = None,
    ):
        self.content_dir = Path(content_dir)
        self.site_url = site_url.rstrip("/")
        self.sink = sink
        self._posts: list[BlogPost] | None = None
        self._lock = asyncio.Lock()

    def load(self) -> list[BlogPost]:
        """Read every non-draft post, newest first, without short links."""
        if not self.content_dir.is_dir():
            logger.warning("blog_content_dir_missing", content_dir=str(self.content_dir))
            return []

        posts = []
        for path in sorted(self.content_dir.rglob("*.md*")):
            if path.suffix not in (".md", ".mdx"):
                continue
            post = load_post(path, self.content_dir)
            if post.draft:
                continue
            post.long_url = f"{self.site_url}/blog/{post.slug}"
            posts.append(post)

        posts.sort(key=lambda p: p.pub_date, reverse=True)
        return posts

    async def _attach_short_link(self, post: BlogPost) -> None:
        if self.sink is not None:
            post.short_link = await self.sink.get_short_link(post.long_url, slug=post.slug)

    async def all_posts(self) -> list[BlogPost]:
        """Published posts with short links, newest first."""
        async with self._lock:
            if self._posts is None:
                posts = self.load()
                await asyncio.gather(*(self._attach_short_link(p) for p in posts))
                self._posts = posts
                logger.info("blog_posts_loaded", count=len(posts))
        return self._posts
