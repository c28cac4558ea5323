"""
Hierarchical tag paths.

A tag path is a "/"-separated list of segments, like "Tech/AI/Agents". Every
strict prefix of a tag path ("Tech", "Tech/AI") is one of its ancestors, even
if no link was ever tagged with that prefix directly.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Union

from django.utils.translation import gettext as _

from linkstacks.lib.cache import lru_cache

from .exceptions import InvalidTagPathFormat, TagPathTooLong, TagSegmentTooLong, TooFewSegments

TAG_PATH_SEPARATOR = "/"
TAG_PATH_MAX_LENGTH = 200
TAG_SEGMENT_MAX_LENGTH = 24

# One or more segments of letters, digits, spaces, '_' and '-', joined by single slashes.
TAG_PATH_RE = re.compile(r"[A-Za-z0-9 _-]+(/[A-Za-z0-9 _-]+)*")


@dataclass(frozen=True, order=True)
class TagPath:
    """
    An immutable, already-validated tag path.

    Equality and ordering compare the segment tuples, so siblings sort by
    case-sensitive ordinal comparison of their names at each level, and a
    parent always sorts before its children.

    Use ``TagPath.parse()`` to build one from user input.
    """
    segments: tuple[str, ...]

    @classmethod
    def parse(cls, raw: str) -> TagPath:
        """
        Parse and validate ``raw``, raising a ``TagPathError`` if it's invalid.
        """
        return parse_tag_path(raw)

    @property
    def depth(self) -> int:
        """
        Number of segments. One for root-level tags.
        """
        return len(self.segments)

    @property
    def name(self) -> str:
        """
        The last segment.
        """
        return self.segments[-1]

    def ancestors(self) -> List[TagPath]:
        """
        Every strict prefix of this path, from the root down to the parent.
        """
        return [TagPath(self.segments[:i]) for i in range(1, len(self.segments))]

    def parent(self) -> TagPath | None:
        if len(self.segments) < 2:
            return None
        return TagPath(self.segments[:-1])

    def __str__(self):
        return TAG_PATH_SEPARATOR.join(self.segments)


@lru_cache(maxsize=1024)
def parse_tag_path(raw: str) -> TagPath:
    """
    Parse ``raw`` into a TagPath.

    Raises:
      * TooFewSegments if ``raw`` is empty (or not a string).
      * TagPathTooLong if it's longer than TAG_PATH_MAX_LENGTH characters.
      * InvalidTagPathFormat if it has disallowed characters, or an empty
        segment (e.g. "a//b", "/a", "a/").
      * TagSegmentTooLong if a segment is longer than TAG_SEGMENT_MAX_LENGTH.
    """
    if not isinstance(raw, str) or raw == "":
        raise TooFewSegments(_("Tag path cannot be empty."))
    if len(raw) > TAG_PATH_MAX_LENGTH:
        raise TagPathTooLong(
            _("Tag path must be at most {max_length} characters.").format(max_length=TAG_PATH_MAX_LENGTH)
        )
    if not TAG_PATH_RE.fullmatch(raw):
        raise InvalidTagPathFormat(
            _("Tag path must contain only letters, numbers, spaces, _, -, and / separators.")
        )
    segments = tuple(raw.split(TAG_PATH_SEPARATOR))
    for segment in segments:
        if len(segment) > TAG_SEGMENT_MAX_LENGTH:
            raise TagSegmentTooLong(
                _("Each tag segment must be 1-{max_length} characters long.").format(
                    max_length=TAG_SEGMENT_MAX_LENGTH,
                )
            )
    return TagPath(segments)


def to_tag_path(value: Union[str, TagPath]) -> TagPath:
    """
    Accept either a TagPath or a raw string, and return a TagPath.
    """
    if isinstance(value, TagPath):
        return value
    return parse_tag_path(value)
