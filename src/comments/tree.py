"""Comment thread reconstruction.

Comments are stored flat with an optional parent pointer. This module turns
one fetched batch into either:

- a tree: root nodes with nested, chronologically ordered ``children``
- a flat list: depth-first, chronological, each node carrying its ``level``
  and no children (compact/threaded display)

A parent that is not part of the batch makes the comment a root. A parent
pointer that would close a cycle is treated the same way, so every input
comment is emitted exactly once.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from .models import Comment, DisplayMode


@dataclass
class CommentNode:
    """A comment placed in its thread."""

    comment: Comment
    level: int = 0
    children: list["CommentNode"] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.comment.id


def _created_at(node: CommentNode):
    return node.comment.created_at


def _resolve_parents(nodes: dict[str, CommentNode]) -> dict[str, str | None]:
    """Map each comment id to its parent id inside the batch (or None)."""
    parents: dict[str, str | None] = {}
    for comment_id, node in nodes.items():
        parent_id = node.comment.parent_id
        parents[comment_id] = parent_id if parent_id in nodes else None

    # Break cycles: walk up from every node, cut the edge that loops back
    for comment_id in nodes:
        seen = {comment_id}
        previous, current = comment_id, parents[comment_id]
        while current is not None:
            if current in seen:
                parents[previous] = None
                break
            seen.add(current)
            previous, current = current, parents[current]

    return parents


def _assign_levels(roots: list[CommentNode]) -> None:
    stack = [(root, 0) for root in roots]
    while stack:
        node, level = stack.pop()
        node.level = level
        stack.extend((child, level + 1) for child in node.children)


def build_comment_tree(
    comments: Iterable[Comment],
    *,
    newest_first: bool = False,
) -> list[CommentNode]:
    """Build the comment forest of one batch.

    Children are always sorted oldest first. Roots are sorted oldest first,
    or newest first when ``newest_first`` is set (card/guestbook view).
    """
    nodes: dict[str, CommentNode] = {c.id: CommentNode(comment=c) for c in comments}
    parents = _resolve_parents(nodes)

    roots: list[CommentNode] = []
    for comment_id, node in nodes.items():
        parent_id = parents[comment_id]
        if parent_id is None:
            roots.append(node)
        else:
            nodes[parent_id].children.append(node)

    for node in nodes.values():
        node.children.sort(key=_created_at)

    roots.sort(key=_created_at, reverse=newest_first)
    _assign_levels(roots)
    return roots


def flatten_comment_tree(roots: Iterable[CommentNode]) -> list[CommentNode]:
    """Flatten a forest depth-first, keeping each node's level.

    Emitted nodes are copies without children.
    """
    flat: list[CommentNode] = []
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        flat.append(replace(node, children=[]))
        stack.extend(reversed(node.children))
    return flat


def arrange_comments(
    comments: Iterable[Comment],
    display_mode: DisplayMode = DisplayMode.FULL,
) -> list[CommentNode]:
    """Arrange a batch for a display mode.

    Guestbook shows the tree with the newest cards first; every other mode
    shows the flattened thread in chronological order.
    """
    if display_mode is DisplayMode.GUESTBOOK:
        return build_comment_tree(comments, newest_first=True)
    return flatten_comment_tree(build_comment_tree(comments))
