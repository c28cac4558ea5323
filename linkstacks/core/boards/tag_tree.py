"""
Build a navigable tree out of a board's flat set of tag paths.

The tree is a pure projection: it holds no state of its own and is rebuilt
from scratch whenever the set of tag paths changes. Boards have modest numbers
of distinct tags, so this is cheap compared to the query that feeds it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .data import Breadcrumb
from .tag_paths import TagPath, to_tag_path


@dataclass(eq=False)
class TagNode:
    """
    One node of a tag tree.

    ``is_leaf`` means "this exact path was one of the inputs", not "this node
    has no children": "Tech" can be both a leaf and the parent of "Tech/AI".
    Nodes that only exist because a longer path passes through them have
    ``is_leaf=False``.

    ``link_count`` counts memberships at exactly this path (descendants are
    not included). It is None when the tree was built without counts.
    """
    name: str
    full_path: str
    children: Dict[str, TagNode] = field(default_factory=dict)
    is_leaf: bool = False
    link_count: Optional[int] = None

    @property
    def is_root(self) -> bool:
        return self.full_path == ""

    def __repr__(self):
        return f"<{self.__class__.__name__}> {self.full_path or '(root)'}"


def build(
    tag_paths: Iterable[Union[str, TagPath]],
    link_counts: Mapping[str, int] | None = None,
) -> TagNode:
    """
    Build a tree from ``tag_paths`` and return its (unnamed) root node.

    Every input path gets a node, and so does every ancestor of every input
    path. Children are sorted by name with a case-sensitive ordinal compare,
    so the same input always produces the same tree.

    If ``link_counts`` (a mapping of full path string -> count) is given, each
    node's ``link_count`` is set from it, defaulting to 0.
    """
    root = TagNode(name="", full_path="")

    for raw_path in tag_paths:
        tag_path = to_tag_path(raw_path)
        current = root
        for depth in range(1, tag_path.depth + 1):
            segment = tag_path.segments[depth - 1]
            child = current.children.get(segment)
            if child is None:
                child = TagNode(name=segment, full_path=str(TagPath(tag_path.segments[:depth])))
                current.children[segment] = child
            current = child
        current.is_leaf = True

    _sort_children(root)
    if link_counts is not None:
        for node in flatten(root):
            node.link_count = link_counts.get(node.full_path, 0)
    return root


def _sort_children(node: TagNode) -> None:
    node.children = dict(sorted(node.children.items()))
    for child in node.children.values():
        _sort_children(child)


def flatten(node: TagNode) -> List[TagNode]:
    """
    Pre-order traversal of ``node`` and everything under it.

    The root node itself is never included, so ``flatten(root)`` lists every
    real tag in tree order.
    """
    result: List[TagNode] = []

    def traverse(current: TagNode):
        if not current.is_root:
            result.append(current)
        for child in current.children.values():
            traverse(child)

    traverse(node)
    return result


def find(root: TagNode, path: Union[str, TagPath]) -> TagNode | None:
    """
    Walk down from ``root`` one segment at a time. None if any segment is missing.
    """
    current = root
    for segment in to_tag_path(path).segments:
        child = current.children.get(segment)
        if child is None:
            return None
        current = child
    return current


def breadcrumbs(path: Union[str, TagPath]) -> List[Breadcrumb]:
    """
    One ``{"name", "path"}`` entry per prefix of ``path``, root first.

    This only looks at the path itself; no tree is needed.
    """
    tag_path = to_tag_path(path)
    return [
        {"name": segment, "path": str(TagPath(tag_path.segments[:depth]))}
        for depth, segment in enumerate(tag_path.segments, start=1)
    ]


def all_parent_paths(path: Union[str, TagPath]) -> List[TagPath]:
    return to_tag_path(path).ancestors()


def all_child_paths(root: TagNode, path: Union[str, TagPath]) -> List[str]:
    """
    Full paths of every descendant of ``path`` in the tree (not ``path`` itself).

    Empty if ``path`` isn't in the tree.
    """
    node = find(root, path)
    if node is None:
        return []
    return [n.full_path for n in flatten(node) if n is not node]
