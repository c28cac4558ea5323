"""
Data structures returned by the boards API.

Like Django ``values()`` rows, these are plain dictionaries at runtime; the
TypedDicts only describe their shape.
"""
from __future__ import annotations

from typing import TypedDict


class Breadcrumb(TypedDict):
    """
    One step of the path from the root to a tag, e.g. for "Tech/AI":
    ``{"name": "AI", "path": "Tech/AI"}``.
    """
    name: str
    path: str


class PositionUpdate(TypedDict):
    """
    The position a link should have within one tag path.
    """
    link_id: int
    tag_path: str
    position: int


class TagPathCount(TypedDict):
    """
    A tag path used on a board and how many active links are filed under it.
    """
    tag_path: str
    link_count: int
