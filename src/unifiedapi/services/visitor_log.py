"""Visitor logging - enrich a page visit and store it."""

from __future__ import annotations

from unifiedapi.domain.user_agent import parse_user_agent
from unifiedapi.infra.db import Database
from unifiedapi.infra.repositories.visitor_logs_repository import VisitEvent, insert_visit
from unifiedapi.services.geo import GeoLocator

DEFAULT_MESSAGE = "Visitor logged"


class VisitorLogService:
    def __init__(self, db: Database, geo: GeoLocator) -> None:
        self._db = db
        self._geo = geo

    def record_visit(
        self,
        site_id: str,
        *,
        ip: str | None,
        user_agent: str | None,
        referrer: str | None = None,
        message: str | None = None,
        url: str | None = None,
    ) -> dict:
        """Enrich with browser/OS/device and country, then insert.

        The geo lookup is best-effort and cannot fail the write.
        """
        ua_info = parse_user_agent(user_agent)
        event = VisitEvent(
            site_id=site_id,
            message=message or DEFAULT_MESSAGE,
            ip=ip,
            country=self._geo.lookup_country(ip),
            user_agent=user_agent,
            device_type=ua_info.device_type,
            browser=ua_info.browser,
            os=ua_info.os,
            url=url,
            referrer=referrer,
        )
        with self._db.txn() as cur:
            return insert_visit(cur, event)
