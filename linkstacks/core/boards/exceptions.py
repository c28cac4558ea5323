"""
Exceptions raised by the boards app.

Malformed input is reported with Django's ``ValidationError`` (or one of the
tag path subclasses below) so that forms, serializers and the admin all
understand it. Missing rows are reported with the models' ``DoesNotExist``
exceptions, which ``api`` re-exports. Database failures are not wrapped.
"""
from __future__ import annotations

from django.core.exceptions import ValidationError


class LinkStacksError(Exception):
    """
    Base exception for errors that aren't validation or lookup failures.
    """

    def __init__(self, message: str = ""):
        super().__init__()
        self.message = message

    def __str__(self):
        return str(self.message)

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)})"


class ConcurrencyConflict(LinkStacksError):
    """
    A ledger write could not be applied because another writer changed the
    same tag path first. Nothing was written; the caller should reload and
    retry.
    """


class TagPathError(ValidationError):
    """
    Base exception for a tag path that can't be parsed.
    """
    code = "invalid_tag_path"

    def __init__(self, message: str):
        super().__init__(message, code=self.code)


class InvalidTagPathFormat(TagPathError):
    """
    The tag path contains characters outside ``[A-Za-z0-9 _-]`` or empty segments.
    """
    code = "invalid_format"


class TooFewSegments(TagPathError):
    """
    The tag path has no segments at all.
    """
    code = "too_few_segments"


class TagSegmentTooLong(TagPathError):
    """
    One of the segments is longer than the segment limit.
    """
    code = "segment_too_long"


class TagPathTooLong(TagPathError):
    """
    The whole tag path is longer than the path limit.
    """
    code = "path_too_long"
