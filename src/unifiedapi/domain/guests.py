"""Guest directory domain types and input parsing.

Parsing functions raise ValidationError with a caller-facing message; they
never touch the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from unifiedapi.domain.errors import ValidationError


class GuestStatus(str, Enum):
    """Tri-state RSVP status."""

    PENDING = "pending"
    CONFIRMED_GOING = "confirmed-going"
    CONFIRMED_NOT_GOING = "confirmed-not-going"


STATUS_VALUES = tuple(s.value for s in GuestStatus)

_HOTEL_TRUE = {"true", "yes", "si", "sí", "1"}
_HOTEL_FALSE = {"false", "no", "0"}

FREE_TEXT_FIELDS = ("specialMessage", "songRecommendation", "allergyComment")


@dataclass(frozen=True)
class Guest:
    id: int
    group_id: int
    group_id_list: tuple[int, ...]
    first_name: str
    second_name: str | None
    last_name: str
    classification: str | None
    status: str
    special_message: str | None
    allergy_comment: str | None
    song_recommendation: str | None
    hotel: bool
    updated_by: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "groupId": self.group_id,
            "groupIdList": list(self.group_id_list),
            "firstName": self.first_name,
            "secondName": self.second_name,
            "lastName": self.last_name,
            "classification": self.classification,
            "status": self.status,
            "specialMessage": self.special_message,
            "allergyComment": self.allergy_comment,
            "songRecommendation": self.song_recommendation,
            "hotel": self.hotel,
            "updatedBy": self.updated_by,
        }


@dataclass(frozen=True)
class StatusChange:
    guest_id: int
    status: GuestStatus


@dataclass(frozen=True)
class GuestUpdate:
    """Single-guest field update plus an optional party-wide status batch.

    Optional fields left as None are not written.
    """

    guest_id: int
    status: GuestStatus
    special_message: str | None = None
    song_recommendation: str | None = None
    allergy_comment: str | None = None
    hotel: bool | None = None
    updated_by: str | None = None
    status_changes: tuple[StatusChange, ...] = field(default_factory=tuple)

    def status_partitions(self) -> dict[GuestStatus, list[int]]:
        """Group status_changes by target status.

        When an id repeats, its last entry wins, so applying the partitions
        gives the same result as applying every pair in order.
        """
        latest: dict[int, GuestStatus] = {}
        for change in self.status_changes:
            latest.pop(change.guest_id, None)
            latest[change.guest_id] = change.status

        partitions: dict[GuestStatus, list[int]] = {}
        for guest_id, status in latest.items():
            partitions.setdefault(status, []).append(guest_id)
        return partitions


def clean_text(value: Any) -> str:
    """Coerce a request value to trimmed text; None becomes ""."""
    if value is None:
        return ""
    return str(value).strip()


def parse_guest_id(value: Any, *, label: str = "guestId") -> int:
    """Parse a positive integer id from an int or a digit-only string."""
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ValidationError(f"{label} must be a positive integer.")
    if parsed <= 0:
        raise ValidationError(f"{label} must be a positive integer.")
    return parsed


def parse_group_ids(values: Iterable[Any]) -> frozenset[int]:
    """Parse a non-empty set of group ids."""
    ids = frozenset(parse_guest_id(v, label="group id") for v in values)
    if not ids:
        raise ValidationError("At least one group id is required.")
    return ids


def parse_group_id_path(raw: str) -> frozenset[int]:
    """Parse the comma-separated id list of /groupList/:ids, e.g. "3,7,12"."""
    parts = [p.strip() for p in raw.split(",")]
    if any(p == "" for p in parts):
        raise ValidationError("Invalid group id list.")
    return parse_group_ids(parts)


def parse_status(value: Any) -> GuestStatus:
    text = clean_text(value)
    try:
        return GuestStatus(text)
    except ValueError:
        raise ValidationError(
            f"status must be one of: {', '.join(STATUS_VALUES)}."
        ) from None


def parse_hotel(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _HOTEL_TRUE:
            return True
        if text in _HOTEL_FALSE:
            return False
    raise ValidationError("hotel must be a boolean.")


def parse_status_changes(value: Any) -> tuple[StatusChange, ...]:
    """Parse the statusChanges batch; any bad entry rejects the whole batch."""
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValidationError("statusChanges must be a list.")

    changes = []
    for index, entry in enumerate(value):
        if not isinstance(entry, dict):
            raise ValidationError(f"statusChanges[{index}] must be an object.")
        if "guestId" not in entry or "status" not in entry:
            raise ValidationError(f"statusChanges[{index}] requires guestId and status.")
        changes.append(
            StatusChange(
                guest_id=parse_guest_id(entry["guestId"], label=f"statusChanges[{index}].guestId"),
                status=parse_status(entry["status"]),
            )
        )
    return tuple(changes)


def parse_guest_update(payload: Any) -> GuestUpdate:
    """Validate an /updateUser body into a GuestUpdate.

    Raises:
        ValidationError: On a missing guestId/status or any malformed field.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")

    if payload.get("guestId") in (None, "") or clean_text(payload.get("status")) == "":
        raise ValidationError("guestId and status are required.")

    text_fields: dict[str, str | None] = {}
    for key in FREE_TEXT_FIELDS:
        text_fields[key] = clean_text(payload[key]) if payload.get(key) is not None else None

    updated_by = clean_text(payload.get("updatedBy")) or None

    return GuestUpdate(
        guest_id=parse_guest_id(payload["guestId"]),
        status=parse_status(payload["status"]),
        special_message=text_fields["specialMessage"],
        song_recommendation=text_fields["songRecommendation"],
        allergy_comment=text_fields["allergyComment"],
        hotel=parse_hotel(payload["hotel"]) if payload.get("hotel") is not None else None,
        updated_by=updated_by,
        status_changes=parse_status_changes(payload.get("statusChanges")),
    )
