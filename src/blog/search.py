"""Keyword search over blog posts.

Each keyword adds to a post's score per field it appears in:
title 100, category 50, tag 30, body text 10.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

import markdown
from bs4 import BeautifulSoup

from .posts import BlogPost


TITLE_SCORE = 100
CATEGORY_SCORE = 50
TAG_SCORE = 30
CONTENT_SCORE = 10

MIN_QUERY_LENGTH = 2
SNIPPET_LEAD = 50
SNIPPET_LENGTH = 100


class SearchQueryError(ValueError):
    """Query is too short or has no keywords."""


@dataclass
class MatchDetails:
    title: bool = False
    categories: bool = False
    tags: bool = False
    content: bool = False


@dataclass
class SearchResult:
    title: str
    url: str
    snippet: str
    tags: list[str]
    categories: list[str]
    match_score: int
    match_details: MatchDetails = field(default_factory=MatchDetails)


def markdown_to_text(body: str) -> str:
    """Plain text of a Markdown document."""
    html = markdown.markdown(body, extensions=["fenced_code", "tables"])
    return BeautifulSoup(html, "html.parser").get_text()


def parse_keywords(query: str | None) -> list[str]:
    if not query or len(query) < MIN_QUERY_LENGTH:
        raise SearchQueryError("Invalid search query.")
    keywords = query.strip().lower().split()
    if not keywords:
        raise SearchQueryError("No valid keywords.")
    return keywords


def _snippet(text: str, keywords: list[str], fallback: str) -> str:
    lowered = text.lower()
    hit = next((k for k in keywords if k in lowered), None)
    if hit is None:
        return fallback
    start = max(0, lowered.index(hit) - SNIPPET_LEAD)
    prefix = "..." if start > 0 else ""
    return f"{prefix}{text[start : start + SNIPPET_LENGTH]}..."


def score_post(post: BlogPost, keywords: list[str]) -> SearchResult | None:
    """Score one post; None when no keyword matches."""
    text = markdown_to_text(post.body)
    lowered_text = text.lower()
    title = post.title.lower()
    tags = [t.lower() for t in post.tags]
    categories = [c.lower() for c in post.categories]

    score = 0
    details = MatchDetails()
    for keyword in keywords:
        if keyword in title:
            score += TITLE_SCORE
            details.title = True
        if any(keyword in t for t in tags):
            score += TAG_SCORE
            details.tags = True
        if any(keyword in c for c in categories):
            score += CATEGORY_SCORE
            details.categories = True
        if keyword in lowered_text:
            score += CONTENT_SCORE
            details.content = True

    if score == 0:
        return None

    snippet = post.description
    if details.content:
        snippet = _snippet(text, keywords, post.description)

    return SearchResult(
        title=post.title,
        url=post.url,
        snippet=snippet,
        tags=post.tags,
        categories=post.categories,
        match_score=score,
        match_details=details,
    )


def search_posts(
    posts: Iterable[BlogPost],
    query: str | None,
    tags: list[str] | None = None,
    categories: list[str] | None = None,
) -> tuple[list[str], list[SearchResult]]:
    """Search posts.

    ``tags``/``categories`` filters keep posts having at least one of the
    given values.

    Returns:
        The parsed keywords and the results, best match first (ties by title).

    Raises:
        SearchQueryError: Query shorter than two characters or blank
    """
    keywords = parse_keywords(query)

    results = []
    for post in posts:
        if tags and not any(t in post.tags for t in tags):
            continue
        if categories and not any(c in post.categories for c in categories):
            continue
        result = score_post(post, keywords)
        if result is not None:
            results.append(result)

    results.sort(key=lambda r: (-r.match_score, r.title))
    return keywords, results
