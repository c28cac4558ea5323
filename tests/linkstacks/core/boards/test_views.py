"""
Tests for the boards REST API views
"""
from __future__ import annotations

from datetime import datetime, timezone

import ddt  # type: ignore[import]
from freezegun import freeze_time
from rest_framework import status

from linkstacks.core.boards import api
from linkstacks.core.boards.models import Board, Link
from linkstacks.lib.test_utils import APITestCase

BOARD_LIST_URL = "/boards/rest_api/v1/boards/"
BOARD_DETAIL_URL = "/boards/rest_api/v1/boards/{pk}/"
BOARD_TAGS_URL = "/boards/rest_api/v1/boards/{pk}/tags/"
BOARD_LINKS_URL = "/boards/rest_api/v1/boards/{pk}/links/"
BOARD_POSITIONS_URL = "/boards/rest_api/v1/boards/{pk}/positions/"
LINK_DETAIL_URL = "/boards/rest_api/v1/links/{pk}/"
LINK_RESTORE_URL = "/boards/rest_api/v1/links/{pk}/restore/"


class BoardViewTestMixin:
    """
    Creates a board with a few links.
    """
    board: Board
    link_a: Link
    link_b: Link
    link_c: Link

    def setUp(self):
        super().setUp()
        self.board = api.create_board("team/reading", title="Reading list")
        with freeze_time("2024-08-05 10:00:00"):
            self.link_a = api.create_link(
                self.board.id, "https://example.com/a", tag_paths=["Tech/AI"], title="Agents",
            )
        with freeze_time("2024-08-05 11:00:00"):
            self.link_b = api.create_link(
                self.board.id, "https://example.com/b", tag_paths=["Tech/AI", "Tech/ML"], title="Machines",
            )
        with freeze_time("2024-08-05 12:00:00"):
            self.link_c = api.create_link(
                self.board.id, "https://example.com/c", tag_paths=["Cooking"], title="Pasta",
            )


class TestBoardView(BoardViewTestMixin, APITestCase):
    """
    Test the board endpoints
    """

    def test_lookup(self):
        response = self.client.get(BOARD_LIST_URL, {"slug_path": "team/reading"})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == self.board.id
        assert response.data["slug_path"] == "team/reading"
        assert response.data["slug_segments"] == ["team", "reading"]
        assert response.data["title"] == "Reading list"
        assert response.data["uuid"] == str(self.board.uuid)

    def test_lookup_missing(self):
        response = self.client.get(BOARD_LIST_URL, {"slug_path": "nope"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = self.client.get(BOARD_LIST_URL)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create(self):
        response = self.client.post(BOARD_LIST_URL, {"slug_path": "new/board", "title": "New"}, format="json")
        assert response.status_code == status.HTTP_201_CREATED
        board = Board.objects.get(slug_path="new/board")
        assert response.data["id"] == board.id
        assert board.title == "New"

    def test_create_existing(self):
        response = self.client.post(BOARD_LIST_URL, {"slug_path": "team/reading"}, format="json")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == self.board.id
        assert Board.objects.count() == 1

    def test_create_invalid(self):
        response = self.client.post(BOARD_LIST_URL, {"slug_path": "x" * 81}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve(self):
        response = self.client.get(BOARD_DETAIL_URL.format(pk=self.board.id))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["slug_path"] == "team/reading"

        response = self.client.get(BOARD_DETAIL_URL.format(pk=12345))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_title(self):
        url = BOARD_DETAIL_URL.format(pk=self.board.id)
        response = self.client.patch(url, {"title": "Renamed", "slug_path": "ignored"}, format="json")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Renamed"
        assert response.data["slug_path"] == "team/reading"

    def test_tag_tree(self):
        response = self.client.get(BOARD_TAGS_URL.format(pk=self.board.id))
        assert response.status_code == status.HTTP_200_OK
        root = response.data
        assert root["full_path"] == ""
        assert [child["name"] for child in root["children"]] == ["Cooking", "Tech"]
        tech = root["children"][1]
        assert tech == {
            "name": "Tech",
            "full_path": "Tech",
            "is_leaf": False,
            "link_count": 0,
            "children": [
                {"name": "AI", "full_path": "Tech/AI", "is_leaf": True, "link_count": 2, "children": []},
                {"name": "ML", "full_path": "Tech/ML", "is_leaf": True, "link_count": 1, "children": []},
            ],
        }

    def test_delete_tag(self):
        url = BOARD_TAGS_URL.format(pk=self.board.id)

        response = self.client.delete(url, {"tag_path": "Tech"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = self.client.delete(url, {"tag_path": "Tech", "with_subtags": True}, format="json")
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"deleted": 3}
        assert api.get_tag_paths(self.board.id) == ["Cooking"]

        response = self.client.delete(url, {"tag_path": "Tech"}, format="json")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_invalid_tag(self):
        response = self.client.delete(BOARD_TAGS_URL.format(pk=self.board.id), {"tag_path": "a//b"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@ddt.ddt
class TestBoardLinksView(BoardViewTestMixin, APITestCase):
    """
    Test listing and adding links, and reordering them
    """

    def test_list_all(self):
        response = self.client.get(BOARD_LINKS_URL.format(pk=self.board.id))
        assert response.status_code == status.HTTP_200_OK
        assert [link["id"] for link in response.data] == [self.link_c.id, self.link_b.id, self.link_a.id]
        link_b = response.data[1]
        assert link_b["url"] == "https://example.com/b"
        assert link_b["title"] == "Machines"
        assert link_b["tag_position"] is None
        assert link_b["link_tags"] == [
            {"tag_path": "Tech/AI", "position": 1, "lineage": ["Tech", "AI"]},
            {"tag_path": "Tech/ML", "position": 0, "lineage": ["Tech", "ML"]},
        ]

    def test_list_for_tag(self):
        response = self.client.get(BOARD_LINKS_URL.format(pk=self.board.id), {"tag_path": "Tech/AI"})
        assert response.status_code == status.HTTP_200_OK
        assert [(link["id"], link["tag_position"]) for link in response.data] == [
            (self.link_a.id, 0),
            (self.link_b.id, 1),
        ]

    def test_search(self):
        response = self.client.get(BOARD_LINKS_URL.format(pk=self.board.id), {"search": "MACHINE"})
        assert response.status_code == status.HTTP_200_OK
        assert [link["id"] for link in response.data] == [self.link_b.id]

    def test_list_invalid_tag(self):
        response = self.client.get(BOARD_LINKS_URL.format(pk=self.board.id), {"tag_path": "a//b"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_missing_board(self):
        response = self.client.get(BOARD_LINKS_URL.format(pk=12345))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create(self):
        with freeze_time("2024-08-06 09:30:00"):
            response = self.client.post(
                BOARD_LINKS_URL.format(pk=self.board.id),
                {
                    "url": "https://example.com/new",
                    "title": "New link",
                    "tag_paths": ["Tech/AI", "Reading"],
                    "client_id": "client-1",
                },
                format="json",
            )
        assert response.status_code == status.HTTP_201_CREATED
        link = Link.objects.get(pk=response.data["id"])
        assert link.client_id == "client-1"
        assert link.created == datetime(2024, 8, 6, 9, 30, tzinfo=timezone.utc)
        assert response.data["link_tags"] == [
            {"tag_path": "Reading", "position": 0, "lineage": ["Reading"]},
            {"tag_path": "Tech/AI", "position": 2, "lineage": ["Tech", "AI"]},
        ]

    @ddt.data(
        {"url": "ftp://example.com/", "tag_paths": ["Tech"]},
        {"url": "https://example.com/", "tag_paths": []},
        {"url": "https://example.com/", "tag_paths": ["Tech//AI"]},
        {"url": "https://example.com/"},
        {"tag_paths": ["Tech"]},
    )
    def test_create_invalid(self, body):
        response = self.client.post(BOARD_LINKS_URL.format(pk=self.board.id), body, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Link.objects.count() == 3

    def test_reorder(self):
        url = BOARD_POSITIONS_URL.format(pk=self.board.id)
        response = self.client.put(
            url,
            {"tag_path": "Tech/AI", "link_ids": [self.link_b.id, self.link_a.id]},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data == [
            {"link_id": self.link_b.id, "tag_path": "Tech/AI", "position": 0},
            {"link_id": self.link_a.id, "tag_path": "Tech/AI", "position": 1},
        ]
        ordered = [link.id for link in api.get_links_for_tag(self.board.id, "Tech/AI")]
        assert ordered == [self.link_b.id, self.link_a.id]

    def test_reorder_stale(self):
        url = BOARD_POSITIONS_URL.format(pk=self.board.id)
        response = self.client.put(url, {"tag_path": "Tech/AI", "link_ids": [self.link_a.id]}, format="json")
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_reorder_duplicates(self):
        url = BOARD_POSITIONS_URL.format(pk=self.board.id)
        response = self.client.put(
            url,
            {"tag_path": "Tech/AI", "link_ids": [self.link_a.id, self.link_a.id]},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestLinkView(BoardViewTestMixin, APITestCase):
    """
    Test the single link endpoints
    """

    def test_retrieve(self):
        response = self.client.get(LINK_DETAIL_URL.format(pk=self.link_a.id))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["board_id"] == self.board.id
        assert response.data["soft_deleted"] is False

        response = self.client.get(LINK_DETAIL_URL.format(pk=12345))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update(self):
        response = self.client.patch(
            LINK_DETAIL_URL.format(pk=self.link_b.id),
            {"title": "Renamed", "tag_paths": ["Tech/ML", "Reading"]},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data["title"] == "Renamed"
        assert [m["tag_path"] for m in response.data["link_tags"]] == ["Reading", "Tech/ML"]
        assert [link.id for link in api.get_links_for_tag(self.board.id, "Tech/AI")] == [self.link_a.id]

    def test_update_invalid(self):
        response = self.client.patch(
            LINK_DETAIL_URL.format(pk=self.link_b.id),
            {"tag_paths": ["x" * 25]},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_invalid_changes_nothing(self):
        response = self.client.patch(
            LINK_DETAIL_URL.format(pk=self.link_b.id),
            {"title": "Renamed", "tag_paths": ["x" * 25]},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        link = Link.objects.get(pk=self.link_b.id)
        assert link.title == "Machines"
        assert sorted(link.link_tags.values_list("tag_path", flat=True)) == ["Tech/AI", "Tech/ML"]

    def test_delete_and_restore(self):
        response = self.client.delete(LINK_DETAIL_URL.format(pk=self.link_a.id))
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert Link.objects.get(pk=self.link_a.id).soft_deleted

        response = self.client.get(BOARD_LINKS_URL.format(pk=self.board.id), {"tag_path": "Tech/AI"})
        assert [(link["id"], link["tag_position"]) for link in response.data] == [(self.link_b.id, 0)]

        # Deleting twice is fine.
        response = self.client.delete(LINK_DETAIL_URL.format(pk=self.link_a.id))
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = self.client.post(LINK_RESTORE_URL.format(pk=self.link_a.id))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["soft_deleted"] is False
        assert response.data["link_tags"] == [{"tag_path": "Tech/AI", "position": 1, "lineage": ["Tech", "AI"]}]

    def test_delete_missing(self):
        response = self.client.delete(LINK_DETAIL_URL.format(pk=12345))
        assert response.status_code == status.HTTP_404_NOT_FOUND
