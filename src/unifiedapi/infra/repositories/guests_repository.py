"""Guest directory repository - wedding.guest_list.

Uses raw SQL with psycopg2 (no ORM). Every user-supplied value travels as a
query parameter; the only composed SQL fragments are fixed column names.

Cursor-level functions expect to run inside a transaction (with db.txn() as
cur:). GuestDirectoryStore owns the transaction boundaries and translates
driver failures into StoreError.

Group expansion
───────────────
A guest's party is every guest whose group_id is either the guest's own
group_id or one of the ids in its group_id_list. The guest itself is always
part of the result because it matches its own group_id.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator

import psycopg2
from psycopg2.extensions import cursor as PgCursor

from unifiedapi.domain.errors import NotFoundError, StoreError, ValidationError
from unifiedapi.domain.guests import Guest, GuestStatus, GuestUpdate
from unifiedapi.infra.db import Database, fetchall, fetchone
from unifiedapi.observability.logging import get_logger
from unifiedapi.observability.redaction import redact_name, safe_log_context

logger = get_logger(__name__)

GUEST_COLUMNS = """
    guest_list_id, group_id, group_id_list, first_name, second_name, last_name,
    classification, status, special_message, allergy_comment,
    song_recommendation, hotel, updated_by
"""

_PARTY_ORDER = "ORDER BY first_name, second_name, last_name, guest_list_id"


def row_to_guest(row: tuple) -> Guest:
    return Guest(
        id=row[0],
        group_id=row[1],
        group_id_list=tuple(row[2] or ()),
        first_name=row[3],
        second_name=row[4],
        last_name=row[5],
        classification=row[6],
        status=row[7],
        special_message=row[8],
        allergy_comment=row[9],
        song_recommendation=row[10],
        hotel=bool(row[11]),
        updated_by=row[12],
    )


# ── Cursor-level queries ──────────────────────────────────────────────────────


def find_guests_by_name(cur: PgCursor, first_name: str, last_name: str) -> list[tuple]:
    """Case-insensitive name match on first OR second name plus last name.

    Returns at most two rows, lowest id first, so callers can detect an
    ambiguous match without scanning the table.
    """
    return fetchall(
        cur,
        f"""
        SELECT {GUEST_COLUMNS}
        FROM wedding.guest_list
        WHERE LOWER(last_name) = LOWER(%s)
          AND (LOWER(first_name) = LOWER(%s) OR LOWER(second_name) = LOWER(%s))
        ORDER BY guest_list_id
        LIMIT 2
        """,  # noqa: S608
        (last_name, first_name, first_name),
    )


def get_group_refs(cur: PgCursor, guest_id: int) -> tuple[int, list[int]] | None:
    """Return (group_id, group_id_list) for a guest, or None if absent."""
    row = fetchone(
        cur,
        "SELECT group_id, group_id_list FROM wedding.guest_list WHERE guest_list_id = %s",
        (guest_id,),
    )
    if row is None:
        return None
    return row[0], list(row[1] or [])


def list_guests_in_groups(cur: PgCursor, group_ids: Iterable[int]) -> list[tuple]:
    return fetchall(
        cur,
        f"""
        SELECT {GUEST_COLUMNS}
        FROM wedding.guest_list
        WHERE group_id = ANY(%s)
        {_PARTY_ORDER}
        """,  # noqa: S608
        (sorted(set(group_ids)),),
    )


def list_all_guests(cur: PgCursor) -> list[tuple]:
    return fetchall(
        cur,
        f"""
        SELECT {GUEST_COLUMNS}
        FROM wedding.guest_list
        ORDER BY group_id, last_name, first_name, guest_list_id
        """,  # noqa: S608
    )


def update_guest_fields(cur: PgCursor, update: GuestUpdate) -> int:
    """Write status, the supplied free-text fields and attribution for one guest.

    Returns:
        Number of rows updated (0 when the guest does not exist).
    """
    updates: list[str] = ["status = %s", "updated_at = now()"]
    params: list[Any] = [update.status.value]

    optional = (
        ("special_message", update.special_message),
        ("song_recommendation", update.song_recommendation),
        ("allergy_comment", update.allergy_comment),
        ("hotel", update.hotel),
        ("updated_by", update.updated_by),
    )
    for column, value in optional:
        if value is not None:
            updates.append(f"{column} = %s")
            params.append(value)

    params.append(update.guest_id)
    cur.execute(
        f"""
        UPDATE wedding.guest_list
        SET {", ".join(updates)}
        WHERE guest_list_id = %s
        """,  # noqa: S608
        params,
    )
    return cur.rowcount


def update_status_batch(
    cur: PgCursor,
    status: GuestStatus,
    guest_ids: list[int],
    updated_by: str | None = None,
) -> int:
    """Set one status on many guests. Returns number of rows updated."""
    cur.execute(
        """
        UPDATE wedding.guest_list
        SET status     = %s,
            updated_by = COALESCE(%s, updated_by),
            updated_at = now()
        WHERE guest_list_id = ANY(%s)
        """,
        (status.value, updated_by, guest_ids),
    )
    return cur.rowcount


# ── Store ─────────────────────────────────────────────────────────────────────


class GuestDirectoryStore:
    """Guest directory backed by a pooled Database."""

    def __init__(self, db: Database) -> None:
        self._db = db

    @contextmanager
    def _translate(self, operation: str) -> Iterator[None]:
        try:
            yield
        except psycopg2.Error as exc:
            logger.error(
                "guest store failure",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "pgcode": getattr(exc, "pgcode", None),
                    }
                },
            )
            raise StoreError(operation, exc) from exc

    def find_by_name(self, first_name: str, last_name: str) -> Guest:
        """Resolve one guest by given name (first or second) and last name.

        Raises:
            NotFoundError: No guest matches.
            StoreError: Query failed.
        """
        with self._translate("find_by_name"), self._db.txn() as cur:
            rows = find_guests_by_name(cur, first_name, last_name)

        if not rows:
            raise NotFoundError("Guest not found")
        if len(rows) > 1:
            logger.warning(
                "ambiguous guest name, using lowest id",
                extra={
                    "extra_fields": {
                        "first_name": redact_name(first_name),
                        "last_name": redact_name(last_name),
                        "guest_ids": [r[0] for r in rows],
                    }
                },
            )
        return row_to_guest(rows[0])

    def list_by_group_expansion(self, guest_id: int) -> list[Guest]:
        """Return the guest's full party (see module docstring).

        Raises:
            NotFoundError: guest_id does not exist.
            StoreError: Query failed.
        """
        with self._translate("list_by_group_expansion"), self._db.txn() as cur:
            refs = get_group_refs(cur, guest_id)
            if refs is None:
                raise NotFoundError("Guest not found")
            group_id, group_id_list = refs
            rows = list_guests_in_groups(cur, [group_id, *group_id_list])
        return [row_to_guest(r) for r in rows]

    def list_by_group_ids(self, group_ids: Iterable[int]) -> list[Guest]:
        """Return every guest in any of the given groups.

        Raises:
            ValidationError: Empty id set or a non-integer id.
            StoreError: Query failed.
        """
        ids = set(group_ids)
        if not ids:
            raise ValidationError("At least one group id is required.")
        if any(isinstance(i, bool) or not isinstance(i, int) for i in ids):
            raise ValidationError("Group ids must be integers.")

        with self._translate("list_by_group_ids"), self._db.txn() as cur:
            rows = list_guests_in_groups(cur, ids)
        return [row_to_guest(r) for r in rows]

    def list_all(self) -> list[Guest]:
        """Full directory ordered by group, last name, first name."""
        with self._translate("list_all"), self._db.txn() as cur:
            rows = list_all_guests(cur)
        return [row_to_guest(r) for r in rows]

    def apply_update(self, update: GuestUpdate) -> None:
        """Apply the single-guest update and every status batch atomically.

        Raises:
            NotFoundError: The guest, or any guest in the batch, does not
                exist. Nothing is written.
            StoreError: A statement failed. Nothing is written.
        """
        partitions = update.status_partitions()

        with self._translate("apply_update"), self._db.txn() as cur:
            if update_guest_fields(cur, update) == 0:
                raise NotFoundError("Guest not found")

            for status, guest_ids in partitions.items():
                touched = update_status_batch(cur, status, guest_ids, update.updated_by)
                if touched != len(guest_ids):
                    raise NotFoundError("One or more guests in statusChanges were not found")

        logger.info(
            "guest updated",
            extra={
                "extra_fields": safe_log_context(
                    guest_id=update.guest_id,
                    status=update.status.value,
                    batch_size=sum(len(ids) for ids in partitions.values()),
                    batch_partitions=len(partitions),
                )
            },
        )
