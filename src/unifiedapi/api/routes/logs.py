"""Visitor logging endpoint.

POST /api/logs/{site}   (header x-api-key) → stored log row
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict

from unifiedapi.api.apikey import require_site_key
from unifiedapi.api.deps import get_visitor_log_service
from unifiedapi.services.visitor_log import VisitorLogService

router = APIRouter(prefix="/api/logs", tags=["logs"])


class VisitRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str | None = None
    url: str | None = None


def client_ip(request: Request) -> str | None:
    """First X-Forwarded-For hop, else X-Real-IP, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else None


@router.post("/{site}")
def log_visit(
    request: Request,
    body: VisitRequest | None = None,
    site_id: str = Depends(require_site_key),
    service: VisitorLogService = Depends(get_visitor_log_service),
) -> dict:
    body = body or VisitRequest()
    return service.record_visit(
        site_id,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
        message=body.message,
        url=body.url,
    )
