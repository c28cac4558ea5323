"""
API Serializers for boards and links
"""
from __future__ import annotations

from rest_framework import serializers

from linkstacks.core.boards.models import BOARD_SLUG_MAX_LENGTH, Board, Link, LinkTag
from linkstacks.core.boards.tag_tree import TagNode


class BoardSerializer(serializers.ModelSerializer):
    """
    Serializer for the Board model.
    """
    slug_segments = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = Board
        fields = [
            "id",
            "uuid",
            "slug_path",
            "slug_segments",
            "title",
            "created",
        ]
        read_only_fields = fields


class BoardListQueryParamsSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the query params for the board lookup
    """
    slug_path = serializers.CharField(max_length=BOARD_SLUG_MAX_LENGTH)


class BoardCreateBodySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the body params for the create board request
    """
    slug_path = serializers.CharField(max_length=BOARD_SLUG_MAX_LENGTH)
    title = serializers.CharField(required=False, allow_blank=True)


class BoardUpdateBodySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the body params for the update board request
    """
    title = serializers.CharField(allow_blank=True)


class LinkTagSerializer(serializers.ModelSerializer):
    """
    Serializer for the LinkTag model: one of a link's tag paths and its position there.
    """
    lineage = serializers.ListField(child=serializers.CharField(), source="get_lineage", read_only=True)

    class Meta:
        model = LinkTag
        fields = ["tag_path", "position", "lineage"]


class LinkSerializer(serializers.ModelSerializer):
    """
    Serializer for the Link model, with its active tag paths.
    """
    link_tags = LinkTagSerializer(many=True, read_only=True)
    tag_position = serializers.SerializerMethodField()

    class Meta:
        model = Link
        fields = [
            "id",
            "board_id",
            "url",
            "title",
            "client_id",
            "soft_deleted",
            "created",
            "link_tags",
            "tag_position",
        ]

    def get_tag_position(self, instance) -> int | None:
        """
        The link's position in the tag path being listed, if the list is for a single tag path.
        """
        return getattr(instance, "tag_position", None)


class LinkListQueryParamsSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the query params for the link list
    """
    tag_path = serializers.CharField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class LinkCreateBodySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the body params for the create link request
    """
    url = serializers.CharField()
    title = serializers.CharField(required=False, allow_blank=True)
    tag_paths = serializers.ListField(child=serializers.CharField(), allow_empty=False)
    client_id = serializers.CharField(required=False, allow_blank=True)


class LinkUpdateBodySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the body params for the update link request
    """
    title = serializers.CharField(required=False, allow_blank=True)
    tag_paths = serializers.ListField(child=serializers.CharField(), required=False, allow_empty=False)
    client_id = serializers.CharField(required=False, allow_blank=True)


class PositionsUpdateBodySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the body params for the reorder request
    """
    tag_path = serializers.CharField()
    link_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    client_id = serializers.CharField(required=False, allow_blank=True)


class TagDeleteBodySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for the body params for the delete tag request
    """
    tag_path = serializers.CharField()
    with_subtags = serializers.BooleanField(required=False, default=False)
    client_id = serializers.CharField(required=False, allow_blank=True)


class TagNodeSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """
    Serializer for a TagNode and, recursively, its children.
    """
    name = serializers.CharField()
    full_path = serializers.CharField()
    is_leaf = serializers.BooleanField()
    link_count = serializers.IntegerField(allow_null=True)
    children = serializers.SerializerMethodField()

    def get_children(self, instance: TagNode) -> list[dict]:
        return TagNodeSerializer(list(instance.children.values()), many=True, context=self.context).data
