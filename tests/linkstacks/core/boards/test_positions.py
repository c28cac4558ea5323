"""
Tests for the position arithmetic helpers
"""
import ddt  # type: ignore[import]

from linkstacks.core.boards import positions
from linkstacks.lib.test_utils import TestCase


@ddt.ddt
class TestPositions(TestCase):
    """
    Test the positions module
    """

    @ddt.data(
        ([], 0),
        ([None], 0),
        ([0], 1),
        ([0, 1, 2], 3),
        ([4, None, 1], 5),
    )
    @ddt.unpack
    def test_get_next_position(self, existing, expected):
        assert positions.get_next_position(existing) == expected

    @ddt.data(
        (0, 2, ["b", "c", "a", "d"]),
        (2, 0, ["c", "a", "b", "d"]),
        (3, 1, ["a", "d", "b", "c"]),
        (1, 1, ["a", "b", "c", "d"]),
    )
    @ddt.unpack
    def test_reorder_list(self, from_index, to_index, expected):
        items = ["a", "b", "c", "d"]
        assert positions.reorder_list(items, from_index, to_index) == expected
        # The input is left alone.
        assert items == ["a", "b", "c", "d"]

    @ddt.data(
        (-1, 0),
        (4, 0),
        (0, 4),
        (0, -1),
    )
    @ddt.unpack
    def test_reorder_list_out_of_range(self, from_index, to_index):
        with self.assertRaises(IndexError):
            positions.reorder_list(["a", "b", "c", "d"], from_index, to_index)

    def test_normalize_positions(self):
        assert positions.normalize_positions([7, 3, 9], "Tech/AI") == [
            {"link_id": 7, "tag_path": "Tech/AI", "position": 0},
            {"link_id": 3, "tag_path": "Tech/AI", "position": 1},
            {"link_id": 9, "tag_path": "Tech/AI", "position": 2},
        ]

    def test_calculate_new_positions(self):
        # Drag the first link to the end.
        updates = positions.calculate_new_positions([10, 11, 12], 0, 2, "Tech")
        assert [(u["link_id"], u["position"]) for u in updates] == [(11, 0), (12, 1), (10, 2)]
