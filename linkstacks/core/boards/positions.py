"""
List arithmetic for manually ordered tag memberships.

Nothing in here touches the database. The API module uses these helpers to
work out what to write; the drag-and-drop handler can use ``reorder_list`` to
simulate a move before sending the complete new order.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, TypeVar

from .data import PositionUpdate

T = TypeVar("T")


def get_next_position(existing_positions: Iterable[int | None]) -> int:
    """
    One past the highest existing position, or 0 if there are none.

    Tombstoned memberships (position None) are ignored.
    """
    positions = [p for p in existing_positions if p is not None]
    if not positions:
        return 0
    return max(positions) + 1


def reorder_list(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """
    Return a copy of ``items`` with the element at ``from_index`` moved to
    ``to_index``. Every other element keeps its relative order.
    """
    size = len(items)
    if not 0 <= from_index < size:
        raise IndexError(f"from_index {from_index} is out of range for {size} items")
    if not 0 <= to_index < size:
        raise IndexError(f"to_index {to_index} is out of range for {size} items")
    new_items = list(items)
    moved = new_items.pop(from_index)
    new_items.insert(to_index, moved)
    return new_items


def normalize_positions(link_ids: Iterable[int], tag_path: str) -> List[PositionUpdate]:
    """
    Assign ``position = index`` to each link id, in the given order.
    """
    return [
        {"link_id": link_id, "tag_path": tag_path, "position": index}
        for index, link_id in enumerate(link_ids)
    ]


def calculate_new_positions(
    link_ids: Sequence[int],
    from_index: int,
    to_index: int,
    tag_path: str,
) -> List[PositionUpdate]:
    """
    The full set of position updates for dragging one link from ``from_index``
    to ``to_index`` within ``tag_path``.
    """
    return normalize_positions(reorder_list(link_ids, from_index, to_index), tag_path)
