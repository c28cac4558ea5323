"""
Boards API

Anyone using the boards app should use these APIs instead of creating or
modifying the models directly: every write that touches a tag path's ordering
has to keep that path's positions contiguous, and has to be serialized against
other writers on the same board.

How ordering works:

* Within one board and tag path, active memberships have positions 0..n-1.
* New memberships go to the end (``max + 1``, or 0).
* Removing a membership (directly, by re-tagging, or by soft-deleting the
  link) closes the gap straight away, in the same transaction.
* ``reorder_links`` overwrites every position of a tag path at once.

Every such write runs in a transaction that first locks the Board row, so
writers on the same board take turns. If two writers still manage to collide
(e.g. on a database without row locks) the unique position constraint turns
it into a ``ConcurrencyConflict`` and nothing is written.

No permissions are enforced here. Pass the caller's ``client_id`` so writes
can be attributed in the logs.

Please look at the models.py file for more information about the kinds of data
are stored in this app.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator, Union

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Exists, Max, OuterRef, Prefetch, Q, QuerySet, Subquery
from django.utils.translation import gettext as _
from typing_extensions import TypeAlias

from . import positions, tag_tree
from .conf import get_setting
from .data import PositionUpdate, TagPathCount
from .exceptions import ConcurrencyConflict
from .models import Board, Link, LinkTag
from .tag_paths import TagPath, to_tag_path
from .tag_tree import TagNode

log = logging.getLogger(__name__)

# Export these as part of the API
BoardDoesNotExist = Board.DoesNotExist
LinkDoesNotExist = Link.DoesNotExist
LinkTagDoesNotExist = LinkTag.DoesNotExist

TagPathLike: TypeAlias = Union[str, TagPath]


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# Boards ######################################################################


def create_board(slug_path: str, title: str | None = None, created: datetime | None = None) -> Board:
    """
    Creates, saves, and returns a new Board.

    The slug path is stored as given; it's up to the caller to normalize it.
    """
    board = Board(slug_path=slug_path, title=title or "", created=created or _now())
    board.full_clean()
    board.save()
    return board


def get_board(board_id: int) -> Board:
    """
    Returns the Board with the given ID, or raises BoardDoesNotExist.
    """
    return Board.objects.get(pk=board_id)


def get_board_by_slug(slug_path: str) -> Board | None:
    return Board.objects.filter(slug_path=slug_path).first()


def get_or_create_board(slug_path: str, title: str | None = None) -> Board:
    """
    Returns the Board for ``slug_path``, creating it on first use.

    If two callers create the same board at once, both get the same row.
    """
    board = get_board_by_slug(slug_path)
    if board:
        return board
    try:
        with transaction.atomic():
            return create_board(slug_path, title=title)
    except (IntegrityError, ValidationError):
        # Someone else created it in the meantime (full_clean() reports the
        # unique slug as a ValidationError if their row is already visible).
        board = get_board_by_slug(slug_path)
        if board is None:
            raise
        return board


def update_board_title(board_id: int, title: str) -> Board:
    board = get_board(board_id)
    board.title = title or ""
    board.full_clean()
    board.save(update_fields=["title"])
    return board


# Internal ledger helpers #####################################################


@contextmanager
def _ledger_transaction(board_id: int, operation: str) -> Iterator[Board]:
    """
    Run a ledger write atomically, serialized with other writes on the board.

    A duplicate position (or duplicate membership) means another writer got
    in first; that is reported as ConcurrencyConflict after the rollback.
    """
    try:
        with transaction.atomic():
            board = Board.objects.select_for_update().get(pk=board_id)
            yield board
    except IntegrityError as exc:
        log.warning(f"Conflicting write during {operation} on board {board_id}: {exc}")
        raise ConcurrencyConflict(
            _("Board {board_id} was changed by someone else during {operation}. Please reload and try again.").format(
                board_id=board_id, operation=operation,
            )
        ) from exc


def _active_memberships(board_id: int, tag_path: str) -> QuerySet[LinkTag]:
    return LinkTag.objects.filter(
        board_id=board_id,
        tag_path=tag_path,
        position__isnull=False,
        link__soft_deleted=False,
    ).order_by("position", "link_id")


def _next_position(board_id: int, tag_path: str) -> int:
    current_max = LinkTag.objects.filter(
        board_id=board_id,
        tag_path=tag_path,
    ).aggregate(Max("position"))["position__max"]
    return positions.get_next_position([current_max])


def _renumber(board_id: int, tag_path: str, ordered_link_ids: list[int]) -> None:
    """
    Set ``position = index`` for each link id, in a way that never has two
    rows on the same position, even halfway through.

    Every positioned row is first moved above the current maximum in one
    UPDATE, then each row is written to its final slot.
    """
    rows = list(
        LinkTag.objects.filter(board_id=board_id, tag_path=tag_path, position__isnull=False)
    )
    if not rows:
        return
    offset = max(max(row.position for row in rows), len(ordered_link_ids)) + 1
    by_link = {row.link_id: row for row in rows}
    for row in rows:
        row.position += offset
    LinkTag.objects.bulk_update(rows, ["position"])
    for index, link_id in enumerate(ordered_link_ids):
        by_link[link_id].position = index
    LinkTag.objects.bulk_update([by_link[link_id] for link_id in ordered_link_ids], ["position"])


def _close_gaps(board_id: int, tag_path: str) -> None:
    ordered_ids = list(_active_memberships(board_id, tag_path).values_list("link_id", flat=True))
    _renumber(board_id, tag_path, ordered_ids)


def _clean_tag_paths(tag_paths: Iterable[TagPathLike], object_id: str) -> list[str]:
    """
    Validate the tag paths, drop duplicates (keeping the first), and check the
    per-link limit.
    """
    if isinstance(tag_paths, (str, TagPath)):
        raise ValidationError(_("Tag paths must be a list, not {type}.").format(type=type(tag_paths).__name__))
    cleaned = list(dict.fromkeys(str(to_tag_path(path)) for path in tag_paths))
    if not cleaned:
        raise ValidationError(_("At least one tag path is required."))
    max_tags = get_setting("MAX_TAGS_PER_LINK")
    if len(cleaned) > max_tags:
        raise ValidationError(
            _("Cannot add more than {max_tags} tags to ({object_id}).").format(max_tags=max_tags, object_id=object_id)
        )
    return cleaned


# Links and the ordered membership ledger #####################################


def get_link(link_id: int) -> Link:
    """
    Returns the Link with the given ID (even if soft-deleted), or raises LinkDoesNotExist.
    """
    return Link.objects.get(pk=link_id)


def create_link(
    board_id: int,
    url: str,
    *,
    tag_paths: Iterable[TagPathLike],
    title: str | None = None,
    client_id: str | None = None,
) -> Link:
    """
    Creates a Link and files it under each of ``tag_paths``, all in one
    transaction.

    Each tag path gets its own next position (the end of that path's list),
    so adding a link under "Tech/AI" and "Tech/ML" puts it at the end of both.

    Raises ValidationError for a bad URL or tag path, or if no tag paths are
    given. Either the link and all of its memberships are saved, or nothing is.
    """
    cleaned_paths = _clean_tag_paths(tag_paths, url)
    with _ledger_transaction(board_id, "create_link"):
        link = Link(
            board_id=board_id,
            url=url,
            title=(title or "").strip(),
            client_id=client_id or "",
            created=_now(),
        )
        link.full_clean()
        link.save()
        LinkTag.objects.bulk_create([
            LinkTag(
                link=link,
                board_id=board_id,
                tag_path=path,
                position=_next_position(board_id, path),
            )
            for path in cleaned_paths
        ])
    log.info(f"Link {link.id} added to board {board_id} under {cleaned_paths} by {client_id!r}")
    return link


def append_link_tag(link_id: int, tag_path: TagPathLike, client_id: str | None = None) -> int | None:
    """
    Files an existing link under one more tag path, at the end of that path.

    Returns the new position (None if the link is soft-deleted; it gets a
    position when restored). Adding a tag path the link already has raises
    ValidationError.
    """
    path = str(to_tag_path(tag_path))
    link = get_link(link_id)
    with _ledger_transaction(link.board_id, "append_link_tag"):
        link.refresh_from_db(fields=["soft_deleted"])
        if LinkTag.objects.filter(link_id=link.id, tag_path=path).exists():
            raise ValidationError(_("Link {link_id} is already tagged with '{tag_path}'.").format(
                link_id=link.id, tag_path=path,
            ))
        _clean_tag_paths([*link.link_tags.values_list("tag_path", flat=True), path], str(link.id))
        position = None if link.soft_deleted else _next_position(link.board_id, path)
        LinkTag.objects.create(link=link, board_id=link.board_id, tag_path=path, position=position)
    log.info(f"Link {link.id} appended to '{path}' at {position} by {client_id!r}")
    return position


def reorder_links(
    board_id: int,
    tag_path: TagPathLike,
    ordered_link_ids: Iterable[int],
    client_id: str | None = None,
) -> list[PositionUpdate]:
    """
    Overwrites the order of every active link in ``tag_path``.

    ``ordered_link_ids`` must contain each active link in the tag path exactly
    once, in the new order (e.g. the list after the drag-and-drop handler has
    simulated the move). Positions become 0..n-1 in that order.

    Raises ValidationError if an id is repeated, and ConcurrencyConflict if
    the ids don't match what's currently in the tag path (someone else added
    or removed a link since the caller loaded the list). Either every position
    is updated or none are. Applying the same order twice is harmless.
    """
    path = str(to_tag_path(tag_path))
    link_ids = [int(link_id) for link_id in ordered_link_ids]
    if len(set(link_ids)) != len(link_ids):
        raise ValidationError(_("Each link may only appear once in the new order."))
    with _ledger_transaction(board_id, "reorder_links"):
        current_ids = set(_active_memberships(board_id, path).values_list("link_id", flat=True))
        if current_ids != set(link_ids):
            log.warning(
                f"Stale reorder of '{path}' on board {board_id}: "
                f"missing {sorted(current_ids - set(link_ids))}, unexpected {sorted(set(link_ids) - current_ids)}"
            )
            raise ConcurrencyConflict(
                _("The links in '{tag_path}' have changed. Please reload and try again.").format(tag_path=path)
            )
        _renumber(board_id, path, link_ids)
    log.info(f"Reordered {len(link_ids)} links in '{path}' on board {board_id} by {client_id!r}")
    return positions.normalize_positions(link_ids, path)


def move_link(
    board_id: int,
    tag_path: TagPathLike,
    from_index: int,
    to_index: int,
    client_id: str | None = None,
) -> list[PositionUpdate]:
    """
    Moves the link at ``from_index`` to ``to_index`` within ``tag_path``,
    shifting the links in between. Raises IndexError for an out-of-range index.
    """
    path = str(to_tag_path(tag_path))
    with _ledger_transaction(board_id, "move_link"):
        current_ids = list(_active_memberships(board_id, path).values_list("link_id", flat=True))
        updates = positions.calculate_new_positions(current_ids, from_index, to_index, path)
        _renumber(board_id, path, [update["link_id"] for update in updates])
    log.info(f"Moved link in '{path}' on board {board_id} from {from_index} to {to_index} by {client_id!r}")
    return updates


def remove_link_tag(link_id: int, tag_path: TagPathLike, client_id: str | None = None) -> None:
    """
    Removes ``link_id`` from ``tag_path`` and closes the gap it leaves.

    Raises LinkTagDoesNotExist if the link isn't in that tag path.
    """
    path = str(to_tag_path(tag_path))
    link = get_link(link_id)
    with _ledger_transaction(link.board_id, "remove_link_tag"):
        membership = LinkTag.objects.get(link_id=link.id, tag_path=path)
        membership.delete()
        _close_gaps(link.board_id, path)
    log.info(f"Link {link.id} removed from '{path}' by {client_id!r}")


def _replace_tag_paths(link: Link, cleaned_paths: list[str]) -> tuple[list[str], list[str]]:
    """
    Make ``cleaned_paths`` the link's tag paths. Must run inside ``_ledger_transaction``.

    Returns the (removed, added) paths.
    """
    current = {membership.tag_path: membership for membership in link.link_tags.all()}
    removed = [path for path in current if path not in cleaned_paths]
    added = [path for path in cleaned_paths if path not in current]
    for path in removed:
        current[path].delete()
        _close_gaps(link.board_id, path)
    for path in added:
        position = None if link.soft_deleted else _next_position(link.board_id, path)
        LinkTag.objects.create(link=link, board_id=link.board_id, tag_path=path, position=position)
    return removed, added


def update_link(
    link_id: int,
    *,
    title: str | None = None,
    tag_paths: Iterable[TagPathLike] | None = None,
    client_id: str | None = None,
) -> Link:
    """
    Changes the title and/or the tag paths of a link, in one transaction.

    Pass None to leave either one as it is. Every value is validated before
    anything is written, so a ValidationError leaves the link untouched.
    Tag paths the link keeps don't move. Dropped paths are closed up, and new
    paths put the link at the end.
    """
    link = get_link(link_id)
    cleaned_paths = None if tag_paths is None else _clean_tag_paths(tag_paths, str(link.id))
    with _ledger_transaction(link.board_id, "update_link"):
        link.refresh_from_db(fields=["soft_deleted"])
        if title is not None:
            link.title = title.strip()
            link.full_clean()
            link.save(update_fields=["title"])
        if cleaned_paths is not None:
            removed, added = _replace_tag_paths(link, cleaned_paths)
    if title is not None:
        log.info(f"Link {link.id} retitled by {client_id!r}")
    if cleaned_paths is not None and (removed or added):
        log.info(f"Link {link.id} re-tagged: removed {removed}, added {added} by {client_id!r}")
    return link


def set_link_tags(link_id: int, tag_paths: Iterable[TagPathLike], client_id: str | None = None) -> list[LinkTag]:
    """
    Replaces the tag paths of a link. Returns the link's memberships.
    """
    link = update_link(link_id, tag_paths=tag_paths, client_id=client_id)
    return list(link.link_tags.order_by("tag_path"))


def update_link_title(link_id: int, title: str | None, client_id: str | None = None) -> Link:
    return update_link(link_id, title=title or "", client_id=client_id)


def soft_delete_link(link_id: int, client_id: str | None = None) -> Link:
    """
    Hides a link from every list and search, and closes the gaps it leaves in
    each of its tag paths.

    The link and its memberships stay in the database (memberships without a
    position) so ``restore_link`` can bring them back. Deleting an already
    deleted link does nothing.
    """
    link = get_link(link_id)
    with _ledger_transaction(link.board_id, "soft_delete_link"):
        link.refresh_from_db(fields=["soft_deleted"])
        if link.soft_deleted:
            return link
        link.soft_deleted = True
        link.save(update_fields=["soft_deleted"])
        paths = list(link.link_tags.values_list("tag_path", flat=True))
        link.link_tags.update(position=None)
        for path in paths:
            _close_gaps(link.board_id, path)
    log.info(f"Link {link.id} deleted from board {link.board_id} by {client_id!r}")
    return link


def restore_link(link_id: int, client_id: str | None = None) -> Link:
    """
    Undo ``soft_delete_link``. The link goes to the end of each of its tag paths.
    """
    link = get_link(link_id)
    with _ledger_transaction(link.board_id, "restore_link"):
        link.refresh_from_db(fields=["soft_deleted"])
        if not link.soft_deleted:
            return link
        link.soft_deleted = False
        link.save(update_fields=["soft_deleted"])
        for membership in link.link_tags.order_by("tag_path"):
            if not membership.is_deleted:
                continue
            membership.position = _next_position(link.board_id, membership.tag_path)
            membership.save(update_fields=["position"])
    log.info(f"Link {link.id} restored on board {link.board_id} by {client_id!r}")
    return link


# Reading #####################################################################


def with_active_memberships(qs: QuerySet[Link]) -> QuerySet[Link]:
    """
    Preload each link's active memberships, sorted by tag path.
    """
    return qs.prefetch_related(
        Prefetch(
            "link_tags",
            queryset=LinkTag.objects.filter(position__isnull=False).order_by("tag_path"),
        )
    )


def get_memberships(board_id: int, tag_path: TagPathLike | None = None) -> QuerySet[LinkTag]:
    """
    Returns the active memberships on a board, optionally only those at
    exactly ``tag_path``, sorted by tag path and then position.
    """
    qs = LinkTag.objects.filter(board_id=board_id, position__isnull=False, link__soft_deleted=False)
    if tag_path is not None:
        qs = qs.filter(tag_path=str(to_tag_path(tag_path)))
    return qs.order_by("tag_path", "position", "link_id")


def get_next_position(board_id: int, tag_path: TagPathLike) -> int:
    """
    The position a link appended to ``tag_path`` right now would get.
    """
    return _next_position(board_id, str(to_tag_path(tag_path)))


def get_tag_path_counts(board_id: int) -> list[TagPathCount]:
    """
    Every tag path with at least one active link on the board, with how many
    links it has, in tree order.
    """
    rows = (
        get_memberships(board_id)
        .order_by()
        .values("tag_path")
        .annotate(link_count=Count("id"))
    )
    counts = [{"tag_path": row["tag_path"], "link_count": row["link_count"]} for row in rows]
    return sorted(counts, key=lambda row: TagPath.parse(row["tag_path"]))


def get_tag_paths(board_id: int) -> list[str]:
    """
    The distinct tag paths in use on a board, in tree order.
    """
    return [row["tag_path"] for row in get_tag_path_counts(board_id)]


def get_tag_tree(board_id: int) -> TagNode:
    """
    Builds the tag tree of a board, with ``link_count`` set on every node.
    """
    counts = {row["tag_path"]: row["link_count"] for row in get_tag_path_counts(board_id)}
    return tag_tree.build(counts.keys(), link_counts=counts)


def get_links_for_board(board_id: int) -> QuerySet[Link]:
    """
    Every active link on the board that is filed under at least one tag path,
    each exactly once, newest first.
    """
    has_membership = LinkTag.objects.filter(link_id=OuterRef("pk"), position__isnull=False)
    qs = (
        Link.objects.active()
        .filter(board_id=board_id)
        .filter(Exists(has_membership))
        .order_by("-created", "-id")
    )
    return with_active_memberships(qs)


def get_links_for_tag(board_id: int, tag_path: TagPathLike) -> QuerySet[Link]:
    """
    The active links filed under exactly ``tag_path`` (not its sub-tags), in
    their manual order. Each link is annotated with ``tag_position``.
    """
    path = str(to_tag_path(tag_path))
    position = LinkTag.objects.filter(link_id=OuterRef("pk"), tag_path=path).values("position")[:1]
    qs = (
        Link.objects.active()
        .filter(board_id=board_id)
        .annotate(tag_position=Subquery(position))
        .filter(tag_position__isnull=False)
        .order_by("tag_position", "id")
    )
    return with_active_memberships(qs)


def search_links(board_id: int, query: str) -> QuerySet[Link]:
    """
    Active links whose title or URL contains ``query`` (ignoring case),
    newest first.
    """
    query = (query or "").strip()
    if len(query) < get_setting("SEARCH_MIN_LENGTH"):
        return Link.objects.none()
    qs = (
        Link.objects.active()
        .filter(board_id=board_id)
        .filter(Q(title__icontains=query) | Q(url__icontains=query))
        .order_by("-created", "-id")
    )
    return with_active_memberships(qs)


def delete_tag_path(
    board_id: int,
    tag_path: TagPathLike,
    with_subtags: bool = False,
    client_id: str | None = None,
) -> int:
    """
    Removes every link from ``tag_path`` (the links themselves stay).

    If the tag has sub-tags, ``with_subtags`` must be True, and then links are
    removed from every sub-tag as well. Returns how many memberships were
    deleted, including tombstones of deleted links.

    Raises LinkTagDoesNotExist if the board has no such tag.
    """
    path = str(to_tag_path(tag_path))
    with _ledger_transaction(board_id, "delete_tag_path"):
        root = tag_tree.build(
            LinkTag.objects.filter(board_id=board_id).values_list("tag_path", flat=True).distinct()
        )
        if tag_tree.find(root, path) is None:
            raise LinkTagDoesNotExist(f"Board {board_id} has no tag '{path}'")
        descendants = tag_tree.all_child_paths(root, path)
        if descendants and not with_subtags:
            raise ValidationError(
                _("Tag '{tag_path}' has sub-tags; with_subtags must be True to delete it.").format(tag_path=path)
            )
        num_deleted, _by_model = LinkTag.objects.filter(
            board_id=board_id,
            tag_path__in=[path, *descendants],
        ).delete()
    log.info(f"Deleted tag '{path}' ({num_deleted} memberships) on board {board_id} by {client_id!r}")
    return num_deleted
