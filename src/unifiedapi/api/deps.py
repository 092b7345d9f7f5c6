"""FastAPI dependencies resolving collaborators built by create_app()."""

from __future__ import annotations

from fastapi import Request

from unifiedapi.infra.db import Database
from unifiedapi.services.rsvp_gate import RsvpGateService
from unifiedapi.services.visitor_log import VisitorLogService


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_gate_service(request: Request) -> RsvpGateService:
    return request.app.state.gate_service


def get_visitor_log_service(request: Request) -> VisitorLogService:
    return request.app.state.visitor_log_service
