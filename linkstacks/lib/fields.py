"""
Convenience functions to make consistent field conventions easier.

We follow the MySQL-friendly convention of a BigInt primary key plus a
separate UUID column for identifiers that leave the process.

Tag paths and board slugs are case-sensitive ("Tech/AI" and "tech/ai" are
different tags), so the helpers here pin a case-sensitive collation on every
database vendor we test against.
"""
from __future__ import annotations

import uuid

from django.db import models

from .validators import validate_utc_datetime


def case_sensitive_char_field(**kwargs) -> MultiCollationCharField:
    """
    Return a case-sensitive ``MultiCollationCharField``.

    Unique indexes on this field treat "abc" and "ABC" as distinct values, and
    sorting is a plain binary compare.

    You may override any argument that you would normally pass into
    ``MultiCollationCharField`` (which is itself a subclass of ``CharField``).
    """
    final_kwargs = {
        "null": False,
        "db_collations": {
            "sqlite": "BINARY",
            "mysql": "utf8mb4_bin",
        },
    }
    final_kwargs.update(kwargs)

    return MultiCollationCharField(**final_kwargs)


def case_insensitive_char_field(**kwargs) -> MultiCollationCharField:
    """
    Return a case-insensitive ``MultiCollationCharField``.

    Used for human-facing text like titles, where sorting should ignore case.
    """
    final_kwargs = {
        "null": False,
        "db_collations": {
            "sqlite": "NOCASE",
            "mysql": "utf8mb4_unicode_ci",
        },
    }
    final_kwargs.update(kwargs)

    return MultiCollationCharField(**final_kwargs)


def immutable_uuid_field() -> models.UUIDField:
    """
    Stable, randomly-generated UUIDs.

    Boards are shared by URL, so other services may want a stable handle that
    isn't the database primary key.
    """
    return models.UUIDField(
        default=uuid.uuid4,
        blank=False,
        null=False,
        editable=False,
        unique=True,
        verbose_name="UUID",  # Just makes the Django admin output properly capitalized
    )


def manual_date_time_field() -> models.DateTimeField:
    """
    DateTimeField that does not auto-generate values.

    The datetimes entered for this field *must be UTC* or it will raise a
    ValidationError.

    The API sets these explicitly so that a link and all of its tag
    memberships share one creation time, and so that "newest first" ordering
    is reproducible in tests.
    """
    return models.DateTimeField(
        auto_now=False,
        auto_now_add=False,
        null=False,
        validators=[
            validate_utc_datetime,
        ],
    )


class MultiCollationCharField(models.CharField):
    """
    CharField with a collation per database vendor, e.g.::

        MultiCollationCharField(max_length=200, db_collations={"mysql": "utf8mb4_bin", "sqlite": "BINARY"})

    Django's own ``db_collation`` is a single value, and the collation names
    differ between vendors. Vendors missing from ``db_collations`` use the
    column's default collation.
    """

    def __init__(self, *args, db_collations: dict[str, str] | None = None, **kwargs):
        if kwargs.get("db_collation"):
            raise TypeError("MultiCollationCharField takes db_collations (per vendor), not db_collation.")
        super().__init__(*args, **kwargs)
        self.db_collations = dict(db_collations or {})

    def collation_for(self, vendor: str) -> str | None:
        return self.db_collations.get(vendor)

    def db_parameters(self, connection):
        db_params = super().db_parameters(connection)
        collation = self.collation_for(connection.vendor)
        if collation:
            db_params["collation"] = collation
        return db_params

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        if self.db_collations:
            kwargs["db_collations"] = self.db_collations
        return name, path, args, kwargs
