"""RSVP endpoints for the wedding site.

POST /api/rsvp/gate              → name lookup
GET  /api/rsvp/group/{id}        → party of one guest
GET  /api/rsvp/groupList/{ids}   → union of explicit groups ("3,7,12")
POST /api/rsvp/updateUser        → single + batch status update (atomic)
GET  /api/rsvp/guests            → full export, JSON (authenticated)
GET  /api/rsvp/guests.xlsx       → full export, spreadsheet (authenticated)
GET  /api/rsvp/ping              → liveness

The two export routes also need a bearer token: a missing or malformed
header answers 401 and a bad or expired token 403, both as {"error": ...}
like every other authenticated route.

Errors are rendered as {"ok": false, "message": ...} by the RsvpError
handler installed in create_app().
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from unifiedapi.api.auth import CurrentUser, CurrentUserDep
from unifiedapi.api.deps import get_gate_service
from unifiedapi.services.export_service import XLSX_MEDIA_TYPE
from unifiedapi.services.rsvp_gate import RsvpGateService

router = APIRouter(prefix="/api/rsvp", tags=["rsvp"])


@router.post("/gate")
def gate(
    payload: dict[str, Any] | None = Body(None),
    service: RsvpGateService = Depends(get_gate_service),
) -> dict:
    """Confirm a guest is on the list by first (or second) name and last name."""
    payload = payload or {}
    guest = service.gate(payload.get("firstName"), payload.get("lastName"))
    return {"ok": True, "guest": guest.to_dict()}


@router.get("/group/{guest_id}")
def group(guest_id: str, service: RsvpGateService = Depends(get_gate_service)) -> dict:
    """Everyone invited together with the given guest, sorted by name."""
    party = service.group_for_guest(guest_id)
    return {"ok": True, "group": [g.to_dict() for g in party]}


@router.get("/groupList/{group_ids}")
def group_list(group_ids: str, service: RsvpGateService = Depends(get_gate_service)) -> dict:
    party = service.group_for_ids(group_ids)
    return {"ok": True, "group": [g.to_dict() for g in party]}


@router.post("/updateUser")
def update_user(
    payload: dict[str, Any] | None = Body(None),
    service: RsvpGateService = Depends(get_gate_service),
) -> dict:
    """Record one guest's answer and, optionally, statuses for the whole party."""
    service.update_guest(payload or {})
    return {"ok": True}


@router.get("/guests")
def export_guests(
    _user: CurrentUser = CurrentUserDep,
    service: RsvpGateService = Depends(get_gate_service),
) -> dict:
    return {"ok": True, "guests": [g.to_dict() for g in service.export_guests()]}


@router.get("/guests.xlsx")
def export_guests_xlsx(
    _user: CurrentUser = CurrentUserDep,
    service: RsvpGateService = Depends(get_gate_service),
) -> Response:
    return Response(
        content=service.export_guests_xlsx(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=guests.xlsx"},
    )


@router.get("/ping")
def ping() -> dict:
    return {"ok": True, "message": "rsvp routes working"}
