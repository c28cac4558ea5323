"""
Core models for link boards.

A Board is a named collection of Links. Each Link is filed under one or more
hierarchical tag paths (see ``tag_paths.py``) through LinkTag rows, and each
LinkTag carries the link's manual position within that one tag path. A link's
position in "Tech/AI" has nothing to do with its position in "Tech/ML".

Tag paths are not stored in a table of their own: a board's tags are simply
the distinct ``LinkTag.tag_path`` values of its active links, and the tree is
derived from those on demand.

Don't create or modify these models directly. Use the functions in ``api.py``,
which keep positions contiguous and serialize concurrent writers.
"""
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from linkstacks.lib.fields import (
    case_insensitive_char_field,
    case_sensitive_char_field,
    immutable_uuid_field,
    manual_date_time_field,
)
from linkstacks.lib.validators import validate_link_url

from .tag_paths import TAG_PATH_MAX_LENGTH, TAG_PATH_SEPARATOR, parse_tag_path

__all__ = [
    "Board",
    "Link",
    "LinkTag",
]

BOARD_SLUG_MAX_LENGTH = 80
LINK_URL_MAX_LENGTH = 2048


class Board(models.Model):
    """
    A shared board of links, identified by its slug path (e.g. "team/reading").

    The slug path is fixed at creation. Only the title may change afterwards.
    """

    id = models.BigAutoField(primary_key=True)
    uuid = immutable_uuid_field()
    slug_path = case_sensitive_char_field(
        max_length=BOARD_SLUG_MAX_LENGTH,
        unique=True,
        help_text=_("Path that identifies this board in its URL, e.g. 'team/reading'."),
    )
    title = case_insensitive_char_field(
        max_length=500,
        blank=True,
        default="",
        help_text=_("Optional display name for the board."),
    )
    created = manual_date_time_field()

    def __repr__(self):
        """
        Developer-facing representation of a Board.
        """
        return str(self)

    def __str__(self):
        """
        User-facing string representation of a Board.
        """
        return f"<{self.__class__.__name__}> ({self.id}) {self.slug_path}"

    @property
    def slug_segments(self) -> list[str]:
        return self.slug_path.split("/")

    @property
    def display_title(self) -> str:
        return self.title or self.slug_path


class LinkQuerySet(models.QuerySet):
    """
    Custom QuerySet for Links.
    """

    def active(self):
        """
        Links that haven't been soft-deleted.
        """
        return self.filter(soft_deleted=False)


class Link(models.Model):
    """
    A URL saved to a board.

    Deleting a link only sets ``soft_deleted``: the row stays (as a tombstone)
    so that it can be restored, but it disappears from every list and search.
    """
    objects = LinkQuerySet.as_manager()

    id = models.BigAutoField(primary_key=True)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name="links",
    )
    url = models.URLField(
        max_length=LINK_URL_MAX_LENGTH,
        validators=[validate_link_url],
        help_text=_("The http(s) URL being saved."),
    )
    title = case_insensitive_char_field(
        max_length=500,
        blank=True,
        default="",
    )
    client_id = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text=_("Opaque token identifying who added this link, for anonymous attribution."),
    )
    soft_deleted = models.BooleanField(
        default=False,
        help_text=_("Soft-deleted links are hidden everywhere but kept in the database."),
    )
    created = manual_date_time_field()

    class Meta:
        indexes = [
            models.Index(fields=["board", "soft_deleted", "created"], name="ls_boards_link_board_idx"),
        ]

    def __repr__(self):
        """
        Developer-facing representation of a Link.
        """
        return str(self)

    def __str__(self):
        """
        User-facing string representation of a Link.
        """
        return f"<{self.__class__.__name__}> ({self.id}) {self.url}"

    @property
    def display_title(self) -> str:
        return self.title or self.url


class LinkTag(models.Model):
    """
    Files a Link under one tag path, at a manual position within that path.

    For a given board and tag path, the positions of active memberships are
    0, 1, 2, ... with no gaps or duplicates. When the link is soft-deleted its
    memberships are kept with ``position=None`` so they can be restored.
    """

    id = models.BigAutoField(primary_key=True)
    link = models.ForeignKey(
        Link,
        on_delete=models.CASCADE,
        related_name="link_tags",
    )
    # Same as link.board. It's copied here so the position constraint below
    # can be expressed on a single table.
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name="+",
    )
    tag_path = case_sensitive_char_field(
        max_length=TAG_PATH_MAX_LENGTH,
        help_text=_("Slash-separated tag path, e.g. 'Tech/AI/Agents'."),
    )
    position = models.IntegerField(
        null=True,
        blank=True,
        help_text=_("Zero-based manual order of this link within the tag path. Null for deleted links."),
    )

    class Meta:
        ordering = ["tag_path", "position", "link_id"]
        indexes = [
            models.Index(fields=["board", "tag_path", "position"], name="ls_boards_linktag_path_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["link", "tag_path"],
                name="ls_boards_linktag_uniq_link_path",
            ),
            # Two rows at the same position means two writers raced each other.
            models.UniqueConstraint(
                fields=["board", "tag_path", "position"],
                name="ls_boards_linktag_uniq_position",
            ),
        ]

    def __repr__(self):
        """
        Developer-facing representation of a LinkTag.
        """
        return str(self)

    def __str__(self):
        """
        User-facing string representation of a LinkTag.
        """
        return f"<{self.__class__.__name__}> {self.link_id}: {self.tag_path} @ {self.position}"

    @property
    def is_deleted(self) -> bool:
        return self.position is None

    def get_lineage(self) -> list[str]:
        """
        The segments of this membership's tag path, root first.
        """
        return self.tag_path.split(TAG_PATH_SEPARATOR)

    def clean(self):
        """
        Validate this LinkTag.

        Note: like all Django model validation, this doesn't run on save().
        """
        parse_tag_path(self.tag_path)
        if self.link_id and self.board_id and self.link.board_id != self.board_id:
            raise ValidationError("LinkTag's board does not match the Link's board")
        if self.position is not None and self.position < 0:
            raise ValidationError("Position cannot be negative")
