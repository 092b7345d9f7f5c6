"""RSVP gate service - guest-facing lookup/confirmation and admin export.

Operations:
- gate(): resolve a guest by given name + last name
- group_for_guest() / group_for_ids(): party expansion
- update_guest(): single-guest update plus party-wide status batch (atomic)
- export_guests() / export_guests_xlsx(): full directory snapshot

Store failures surface as InternalError; raw driver detail is attached only
when the service is built with expose_debug=True (non-production).
"""

from __future__ import annotations

from typing import Any

from unifiedapi.domain.errors import InternalError, NotFoundError, StoreError, ValidationError
from unifiedapi.domain.guests import (
    Guest,
    clean_text,
    parse_group_id_path,
    parse_group_ids,
    parse_guest_id,
    parse_guest_update,
)
from unifiedapi.infra.repositories.guests_repository import GuestDirectoryStore
from unifiedapi.observability.logging import get_logger
from unifiedapi.observability.redaction import redact_name
from unifiedapi.services import export_service

logger = get_logger(__name__)

NAME_NOT_FOUND_MESSAGE = "We couldn't find your name on the guest list. Please check the spelling."
INTERNAL_MESSAGE = "Internal error. Please try again later."


class RsvpGateService:
    def __init__(self, store: GuestDirectoryStore, *, expose_debug: bool = False) -> None:
        self._store = store
        self._expose_debug = expose_debug

    def _internal(self, exc: StoreError) -> InternalError:
        return InternalError(
            INTERNAL_MESSAGE,
            debug=exc.diagnostics() if self._expose_debug else None,
        )

    def gate(self, first_name: Any, last_name: Any) -> Guest:
        """Confirm a guest is on the list.

        Both names are trimmed; either one empty fails before the store is
        touched. A miss never says which of the two names did not match.
        """
        first = clean_text(first_name)
        last = clean_text(last_name)
        if not first or not last:
            raise ValidationError("firstName and lastName are required.")

        try:
            return self._store.find_by_name(first, last)
        except NotFoundError:
            logger.info(
                "gate miss",
                extra={"extra_fields": {"first_name": redact_name(first), "last_name": redact_name(last)}},
            )
            raise NotFoundError(NAME_NOT_FOUND_MESSAGE) from None
        except StoreError as exc:
            raise self._internal(exc) from exc

    def group_for_guest(self, guest_id: Any) -> list[Guest]:
        """Expand one guest to its whole party, sorted by name."""
        parsed = parse_guest_id(guest_id, label="guest id")
        try:
            return self._store.list_by_group_expansion(parsed)
        except StoreError as exc:
            raise self._internal(exc) from exc

    def group_for_ids(self, group_ids: Any) -> list[Guest]:
        """Union of explicit groups, sorted by name. Accepts "3,7" or an iterable."""
        if isinstance(group_ids, str):
            ids = parse_group_id_path(group_ids)
        else:
            ids = parse_group_ids(group_ids)
        try:
            return self._store.list_by_group_ids(ids)
        except StoreError as exc:
            raise self._internal(exc) from exc

    def update_guest(self, payload: Any) -> None:
        """Validate the whole request, then write it in one transaction."""
        update = parse_guest_update(payload)
        try:
            self._store.apply_update(update)
        except StoreError as exc:
            raise self._internal(exc) from exc

    def export_guests(self) -> list[Guest]:
        try:
            return self._store.list_all()
        except StoreError as exc:
            raise self._internal(exc) from exc

    def export_guests_xlsx(self) -> bytes:
        return export_service.guests_to_xlsx(self.export_guests())
