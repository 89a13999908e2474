"""Tests for comment thread reconstruction."""

from datetime import UTC, datetime, timedelta

import pytest

from src.comments.models import Comment, CommentType, DisplayMode
from src.comments.tree import (
    arrange_comments,
    build_comment_tree,
    flatten_comment_tree,
)


BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def make_comment(comment_id: str, minute: int, parent_id: str | None = None) -> Comment:
    return Comment(
        id=comment_id,
        identifier="hello-world",
        comment_type=CommentType.BLOG,
        nickname=f"user-{comment_id}",
        email=f"{comment_id}@example.com",
        content=f"<p>{comment_id}</p>",
        created_at=BASE_TIME + timedelta(minutes=minute),
        parent_id=parent_id,
    )


@pytest.fixture
def thread() -> list[Comment]:
    """Two threads: a -> (b -> c, d) and e, stored out of order."""
    return [
        make_comment("d", 3, parent_id="a"),
        make_comment("c", 2, parent_id="b"),
        make_comment("e", 4),
        make_comment("a", 0),
        make_comment("b", 1, parent_id="a"),
    ]


class TestBuildCommentTree:
    """Tests for build_comment_tree."""

    def test_nests_replies_under_parents(self, thread: list[Comment]):
        roots = build_comment_tree(thread)

        assert [r.id for r in roots] == ["a", "e"]
        assert [c.id for c in roots[0].children] == ["b", "d"]
        assert [c.id for c in roots[0].children[0].children] == ["c"]

    def test_assigns_levels(self, thread: list[Comment]):
        roots = build_comment_tree(thread)

        a = roots[0]
        assert a.level == 0
        assert a.children[0].level == 1
        assert a.children[0].children[0].level == 2
        assert roots[1].level == 0

    def test_newest_first_orders_roots_only(self, thread: list[Comment]):
        roots = build_comment_tree(thread, newest_first=True)

        assert [r.id for r in roots] == ["e", "a"]
        assert [c.id for c in roots[1].children] == ["b", "d"]

    def test_orphan_becomes_root(self):
        comments = [
            make_comment("a", 0),
            make_comment("x", 1, parent_id="deleted"),
        ]

        roots = build_comment_tree(comments)

        assert [r.id for r in roots] == ["a", "x"]
        assert roots[1].level == 0

    def test_cycle_is_broken(self):
        comments = [
            make_comment("a", 0, parent_id="b"),
            make_comment("b", 1, parent_id="a"),
        ]

        flat = flatten_comment_tree(build_comment_tree(comments))

        assert sorted(n.id for n in flat) == ["a", "b"]
        assert flat[0].level == 0
        assert flat[1].level == 1

    def test_reply_hanging_off_a_cycle_keeps_its_parent(self):
        comments = [
            make_comment("d", 3, parent_id="a"),
            make_comment("a", 0, parent_id="b"),
            make_comment("b", 1, parent_id="a"),
        ]

        flat = flatten_comment_tree(build_comment_tree(comments))

        assert [(n.id, n.level) for n in flat] == [("b", 0), ("a", 1), ("d", 2)]

    def test_self_parent_is_root(self):
        roots = build_comment_tree([make_comment("a", 0, parent_id="a")])

        assert [r.id for r in roots] == ["a"]
        assert roots[0].children == []

    def test_empty_batch(self):
        assert build_comment_tree([]) == []


class TestFlattenCommentTree:
    """Tests for flatten_comment_tree."""

    def test_depth_first_chronological(self, thread: list[Comment]):
        flat = flatten_comment_tree(build_comment_tree(thread))

        assert [(n.id, n.level) for n in flat] == [
            ("a", 0),
            ("b", 1),
            ("c", 2),
            ("d", 1),
            ("e", 0),
        ]

    def test_emitted_nodes_have_no_children(self, thread: list[Comment]):
        flat = flatten_comment_tree(build_comment_tree(thread))

        assert all(n.children == [] for n in flat)

    def test_every_comment_emitted_once(self):
        comments = [make_comment(str(i), i, parent_id=str(i - 1) if i else None) for i in range(50)]
        comments.append(make_comment("orphan", 60, parent_id="missing"))

        flat = flatten_comment_tree(build_comment_tree(comments))

        assert len(flat) == len(comments)
        assert len({n.id for n in flat}) == len(comments)
        assert flat[49].level == 49


class TestArrangeComments:
    """Tests for arrange_comments display modes."""

    def test_full_mode_is_flat(self, thread: list[Comment]):
        nodes = arrange_comments(thread, DisplayMode.FULL)

        assert [n.id for n in nodes] == ["a", "b", "c", "d", "e"]

    def test_compact_mode_is_flat(self, thread: list[Comment]):
        nodes = arrange_comments(thread, DisplayMode.COMPACT)

        assert [n.level for n in nodes] == [0, 1, 2, 1, 0]

    def test_guestbook_mode_is_tree_newest_first(self, thread: list[Comment]):
        nodes = arrange_comments(thread, DisplayMode.GUESTBOOK)

        assert [n.id for n in nodes] == ["e", "a"]
        assert len(nodes[1].children) == 2
