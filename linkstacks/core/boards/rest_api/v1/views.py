"""
Boards API Views
"""
from __future__ import annotations

from django.http import Http404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from ... import api
from ...models import Board, Link
from ..utils import api_errors
from .serializers import (
    BoardCreateBodySerializer,
    BoardListQueryParamsSerializer,
    BoardSerializer,
    BoardUpdateBodySerializer,
    LinkCreateBodySerializer,
    LinkListQueryParamsSerializer,
    LinkSerializer,
    LinkUpdateBodySerializer,
    PositionsUpdateBodySerializer,
    TagDeleteBodySerializer,
    TagNodeSerializer,
)


class BoardView(GenericViewSet):
    """
    View to look up, create or retitle Boards, and to read and write the
    links and tags of a board.

    Boards are anonymous: anyone who knows a board's slug path can use it.

    **Lookup Query Parameters**
        * slug_path (required) - The slug path of the board, e.g. "team/reading"

    **Lookup Example Requests**
        GET boards/rest_api/v1/boards/?slug_path=team/reading

    **Lookup Query Returns**
        * 200 - Success
        * 400 - Missing slug_path
        * 404 - No board with that slug path

    **Create Request Body**
        * slug_path (required): The slug path of the board
        * title (optional): The display name of the board

    **Create Example Requests**
        POST boards/rest_api/v1/boards/                  - Create a board, or get the existing one
        {
            "slug_path": "team/reading",
            "title": "Team reading list"
        }

    **Create Query Returns**
        * 200 - The board already existed
        * 201 - Created
        * 400 - Invalid parameters provided

    **Update Example Requests**
        PATCH boards/rest_api/v1/boards/:id/             - Change the title of a board
        {
            "title": "Renamed"
        }

    **Update Query Returns**
        * 200 - Success
        * 400 - Invalid parameters provided
        * 404 - Board not found
    """

    permission_classes = [AllowAny]
    serializer_class = BoardSerializer
    queryset = Board.objects.all()
    lookup_value_regex = r"\d+"

    def get_board(self) -> Board:
        """
        Get the board from `pk` or raise 404.
        """
        with api_errors("Board not found"):
            return api.get_board(int(self.kwargs["pk"]))

    def list(self, request: Request) -> Response:
        """
        Looks a board up by its slug path.
        """
        query_params = BoardListQueryParamsSerializer(data=request.query_params.dict())
        query_params.is_valid(raise_exception=True)
        board = api.get_board_by_slug(query_params.validated_data["slug_path"])
        if board is None:
            raise Http404("Board not found")
        return Response(self.serializer_class(board).data)

    def create(self, request: Request) -> Response:
        """
        Creates a board, or returns the one that already has this slug path.
        """
        body = BoardCreateBodySerializer(data=request.data)
        body.is_valid(raise_exception=True)
        slug_path = body.validated_data["slug_path"]

        existed = api.get_board_by_slug(slug_path) is not None
        with api_errors():
            board = api.get_or_create_board(slug_path, title=body.validated_data.get("title"))
        return Response(
            self.serializer_class(board).data,
            status=status.HTTP_200_OK if existed else status.HTTP_201_CREATED,
        )

    def retrieve(self, request: Request, pk=None) -> Response:
        return Response(self.serializer_class(self.get_board()).data)

    def partial_update(self, request: Request, pk=None) -> Response:
        """
        Changes the title of a board. The slug path can't be changed.
        """
        board = self.get_board()
        body = BoardUpdateBodySerializer(data=request.data)
        body.is_valid(raise_exception=True)
        with api_errors():
            board = api.update_board_title(board.id, body.validated_data["title"])
        return Response(self.serializer_class(board).data)

    @action(detail=True, methods=["get", "delete"])
    def tags(self, request: Request, pk=None) -> Response:
        """
        GET returns the board's tag tree, nested, with the number of links
        filed at each tag. The root node has an empty name and full_path.

        DELETE removes every link from a tag (the links themselves stay). If
        the tag has sub-tags, with_subtags must be true.

            DELETE boards/rest_api/v1/boards/:id/tags/
            {
                "tag_path": "Tech/AI",
                "with_subtags": true
            }
        """
        board = self.get_board()
        if request.method == "DELETE":
            body = TagDeleteBodySerializer(data=request.data)
            body.is_valid(raise_exception=True)
            with api_errors("Tag not found"):
                num_deleted = api.delete_tag_path(
                    board.id,
                    body.validated_data["tag_path"],
                    with_subtags=body.validated_data["with_subtags"],
                    client_id=body.validated_data.get("client_id"),
                )
            return Response({"deleted": num_deleted})

        root = api.get_tag_tree(board.id)
        return Response(TagNodeSerializer(root).data)

    @action(detail=True, methods=["get", "post"])
    def links(self, request: Request, pk=None) -> Response:
        """
        GET lists the board's links:
            * ?search=term - links whose title or URL contains the term, newest first
            * ?tag_path=Tech/AI - links filed at exactly that tag, in their manual order
            * otherwise every link on the board, each once, newest first

        POST adds a link under one or more tags:

            POST boards/rest_api/v1/boards/:id/links/
            {
                "url": "https://example.com/",
                "title": "Example",
                "tag_paths": ["Tech/AI", "Reading"],
                "client_id": "a1b2c3"
            }
        """
        board = self.get_board()
        if request.method == "POST":
            body = LinkCreateBodySerializer(data=request.data)
            body.is_valid(raise_exception=True)
            with api_errors():
                link = api.create_link(
                    board.id,
                    body.validated_data["url"],
                    tag_paths=body.validated_data["tag_paths"],
                    title=body.validated_data.get("title"),
                    client_id=body.validated_data.get("client_id"),
                )
            link = api.with_active_memberships(Link.objects.filter(pk=link.pk)).get()
            return Response(LinkSerializer(link).data, status=status.HTTP_201_CREATED)

        query_params = LinkListQueryParamsSerializer(data=request.query_params.dict())
        query_params.is_valid(raise_exception=True)
        search = query_params.validated_data.get("search")
        tag_path = query_params.validated_data.get("tag_path")
        with api_errors():
            if search is not None:
                links = api.search_links(board.id, search)
            elif tag_path is not None:
                links = api.get_links_for_tag(board.id, tag_path)
            else:
                links = api.get_links_for_board(board.id)
            data = LinkSerializer(links, many=True).data
        return Response(data)

    @action(detail=True, methods=["put"])
    def positions(self, request: Request, pk=None) -> Response:
        """
        Overwrites the order of the links in one tag. link_ids must list every
        link currently in the tag, once each, in the new order.

            PUT boards/rest_api/v1/boards/:id/positions/
            {
                "tag_path": "Tech/AI",
                "link_ids": [12, 7, 9]
            }

        Returns 409 if the tag's links changed since the caller loaded them.
        """
        board = self.get_board()
        body = PositionsUpdateBodySerializer(data=request.data)
        body.is_valid(raise_exception=True)
        with api_errors():
            updates = api.reorder_links(
                board.id,
                body.validated_data["tag_path"],
                body.validated_data["link_ids"],
                client_id=body.validated_data.get("client_id"),
            )
        return Response(updates)


class LinkView(GenericViewSet):
    """
    View to retrieve, edit, delete or restore a single Link.

    **Update Request Body**
        * title (optional): The new title
        * tag_paths (optional): The complete new list of tag paths
        * client_id (optional): Who is making the change

    **Update Example Requests**
        PATCH boards/rest_api/v1/links/:id/
        {
            "title": "Better title",
            "tag_paths": ["Tech/AI"]
        }

    **Delete Example Requests**
        DELETE boards/rest_api/v1/links/:id/             - Soft delete the link
        POST boards/rest_api/v1/links/:id/restore/       - Undo the delete

    **Query Returns**
        * 200 - Success (204 for DELETE)
        * 400 - Invalid parameters provided
        * 404 - Link not found
        * 409 - The board was changed by someone else
    """

    permission_classes = [AllowAny]
    serializer_class = LinkSerializer
    queryset = Link.objects.all()
    lookup_value_regex = r"\d+"

    def get_link(self) -> Link:
        """
        Get the link from `pk` or raise 404.
        """
        with api_errors("Link not found"):
            return api.get_link(int(self.kwargs["pk"]))

    def _response(self, link: Link, **kwargs) -> Response:
        link = api.with_active_memberships(Link.objects.filter(pk=link.pk)).get()
        return Response(self.serializer_class(link).data, **kwargs)

    def retrieve(self, request: Request, pk=None) -> Response:
        return self._response(self.get_link())

    def partial_update(self, request: Request, pk=None) -> Response:
        """
        Changes the title and/or the tag paths of a link.
        """
        link = self.get_link()
        body = LinkUpdateBodySerializer(data=request.data)
        body.is_valid(raise_exception=True)
        with api_errors():
            link = api.update_link(
                link.id,
                title=body.validated_data.get("title"),
                tag_paths=body.validated_data.get("tag_paths"),
                client_id=body.validated_data.get("client_id"),
            )
        return self._response(link)

    def destroy(self, request: Request, pk=None) -> Response:
        """
        Soft deletes a link. Deleting it again does nothing.
        """
        link = self.get_link()
        with api_errors():
            api.soft_delete_link(link.id, client_id=request.query_params.get("client_id"))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def restore(self, request: Request, pk=None) -> Response:
        """
        Restores a soft-deleted link at the end of each of its tags.
        """
        link = self.get_link()
        with api_errors():
            link = api.restore_link(link.id, client_id=request.data.get("client_id"))
        return self._response(link)
