"""Shared test helpers for unified-api tests.

Plain functions and fakes (not fixtures) importable by conftest.py and
individual test modules.
"""

from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from typing import Callable, Iterable

from unifiedapi.config import Settings
from unifiedapi.domain.errors import NotFoundError, StoreError, ValidationError
from unifiedapi.domain.guests import Guest, GuestUpdate

TEST_JWT_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    """Settings for tests: no static dir, known secrets."""
    base = {
        "app_env": "development",
        "jwt_secret": TEST_JWT_SECRET,
        "site_api_keys": {"wedding": "wedding-key"},
        "public_dir": "/nonexistent-public-dir",
    }
    base.update(overrides)
    return Settings(**base)


def make_guest(
    guest_id: int,
    group_id: int,
    first_name: str,
    last_name: str,
    *,
    second_name: str | None = None,
    group_id_list: Iterable[int] = (),
    status: str = "pending",
    classification: str | None = "family",
) -> Guest:
    return Guest(
        id=guest_id,
        group_id=group_id,
        group_id_list=tuple(group_id_list),
        first_name=first_name,
        second_name=second_name,
        last_name=last_name,
        classification=classification,
        status=status,
        special_message=None,
        allergy_comment=None,
        song_recommendation=None,
        hotel=False,
        updated_by=None,
    )


def guest_row(guest: Guest) -> tuple:
    """Row tuple in GUEST_COLUMNS order, as psycopg2 would return it."""
    return (
        guest.id,
        guest.group_id,
        list(guest.group_id_list) or None,
        guest.first_name,
        guest.second_name,
        guest.last_name,
        guest.classification,
        guest.status,
        guest.special_message,
        guest.allergy_comment,
        guest.song_recommendation,
        guest.hotel,
        guest.updated_by,
    )


# ── DB fakes ──────────────────────────────────────────────────────────────────


class MockCursor:
    """Records executed statements; results come from a handler.

    handler(query, params) -> (rows, rowcount)
    """

    def __init__(self, handler: Callable | None = None):
        self._handler = handler or (lambda query, params: ([], 0))
        self._rows: list[tuple] = []
        self.executed: list[tuple[str, object]] = []
        self.rowcount = -1

    def execute(self, query, params=None):
        normalized = " ".join(query.split())
        self.executed.append((normalized, params))
        rows, self.rowcount = self._handler(normalized, params)
        self._rows = list(rows)

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows


class FakeDatabase:
    """Stands in for unifiedapi.infra.db.Database around a MockCursor."""

    def __init__(self, cursor: MockCursor | None = None):
        self.cursor = cursor or MockCursor()
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.pings = 0

    @contextmanager
    def txn(self):
        try:
            yield self.cursor
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1

    def ping(self) -> str:
        self.pings += 1
        return "testdb"

    def close(self) -> None:
        self.closed = True


# ── In-memory guest directory ─────────────────────────────────────────────────


def _party_key(guest: Guest):
    # NULL second names sort last, as in PostgreSQL ascending order
    return (guest.first_name, guest.second_name is None, guest.second_name or "", guest.last_name, guest.id)


class InMemoryGuestDirectory:
    """Implements the GuestDirectoryStore contract over a dict."""

    def __init__(self, guests: Iterable[Guest] = ()):
        self.guests: dict[int, Guest] = {g.id: g for g in guests}
        self.calls: list[str] = []
        self.fail_with: StoreError | None = None

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail_with is not None:
            raise self.fail_with

    def find_by_name(self, first_name: str, last_name: str) -> Guest:
        self._enter("find_by_name")
        first, last = first_name.lower(), last_name.lower()
        matches = sorted(
            (
                g
                for g in self.guests.values()
                if g.last_name.lower() == last
                and (g.first_name.lower() == first or (g.second_name or "").lower() == first)
            ),
            key=lambda g: g.id,
        )
        if not matches:
            raise NotFoundError("Guest not found")
        return matches[0]

    def list_by_group_expansion(self, guest_id: int) -> list[Guest]:
        self._enter("list_by_group_expansion")
        guest = self.guests.get(guest_id)
        if guest is None:
            raise NotFoundError("Guest not found")
        groups = {guest.group_id, *guest.group_id_list}
        return sorted((g for g in self.guests.values() if g.group_id in groups), key=_party_key)

    def list_by_group_ids(self, group_ids) -> list[Guest]:
        self._enter("list_by_group_ids")
        ids = set(group_ids)
        if not ids:
            raise ValidationError("At least one group id is required.")
        return sorted((g for g in self.guests.values() if g.group_id in ids), key=_party_key)

    def list_all(self) -> list[Guest]:
        self._enter("list_all")
        return sorted(self.guests.values(), key=lambda g: (g.group_id, g.last_name, g.first_name, g.id))

    def apply_update(self, update: GuestUpdate) -> None:
        self._enter("apply_update")
        partitions = update.status_partitions()
        if update.guest_id not in self.guests:
            raise NotFoundError("Guest not found")
        if any(i not in self.guests for ids in partitions.values() for i in ids):
            raise NotFoundError("One or more guests in statusChanges were not found")

        changes = {"status": update.status.value}
        for field, value in (
            ("special_message", update.special_message),
            ("song_recommendation", update.song_recommendation),
            ("allergy_comment", update.allergy_comment),
            ("hotel", update.hotel),
            ("updated_by", update.updated_by),
        ):
            if value is not None:
                changes[field] = value
        self.guests[update.guest_id] = dataclasses.replace(self.guests[update.guest_id], **changes)

        for status, ids in partitions.items():
            for guest_id in ids:
                batch_changes = {"status": status.value}
                if update.updated_by is not None:
                    batch_changes["updated_by"] = update.updated_by
                self.guests[guest_id] = dataclasses.replace(self.guests[guest_id], **batch_changes)


def sample_directory() -> InMemoryGuestDirectory:
    """A small wedding list.

    Group 10: Ana Maria Lopez (second name Maria) + Luis Lopez
    Group 20: Carla Diaz, linked to group 30
    Group 30: Pedro Ruiz
    Group 40: Sofia Vega (alone)
    """
    return InMemoryGuestDirectory(
        [
            make_guest(1, 10, "Ana", "Lopez", second_name="Maria"),
            make_guest(2, 10, "Luis", "Lopez"),
            make_guest(3, 20, "Carla", "Diaz", group_id_list=[30]),
            make_guest(4, 30, "Pedro", "Ruiz"),
            make_guest(5, 40, "Sofia", "Vega", classification="work"),
            make_guest(7, 50, "Elena", "Mora"),
            make_guest(8, 50, "Jorge", "Mora"),
            make_guest(9, 50, "Nina", "Mora"),
        ]
    )
