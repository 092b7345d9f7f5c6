"""Visitor log repository - appdata.visitor_logs.

Uses raw SQL with psycopg2 (no ORM).
"""

from __future__ import annotations

from dataclasses import dataclass

from psycopg2.extensions import cursor as PgCursor

from unifiedapi.infra.db import fetchone


@dataclass(frozen=True)
class VisitEvent:
    site_id: str
    message: str
    ip: str | None
    country: str
    user_agent: str | None
    device_type: str
    browser: str
    os: str
    url: str | None
    referrer: str | None


def _row_to_dict(row: tuple) -> dict:
    return {
        "id": row[0],
        "site_id": row[1],
        "message": row[2],
        "ip": row[3],
        "country": row[4],
        "user_agent": row[5],
        "device_type": row[6],
        "browser": row[7],
        "os": row[8],
        "url": row[9],
        "referrer": row[10],
        "created_at": row[11].isoformat() if hasattr(row[11], "isoformat") else str(row[11]),
    }


def insert_visit(cur: PgCursor, event: VisitEvent) -> dict:
    """Insert one visit and return the stored row."""
    row = fetchone(
        cur,
        """
        INSERT INTO appdata.visitor_logs
            (site_id, message, ip, country, user_agent,
             device_type, browser, os, url, referrer)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING id, site_id, message, ip, country, user_agent,
                  device_type, browser, os, url, referrer, created_at
        """,
        (
            event.site_id,
            event.message,
            event.ip,
            event.country,
            event.user_agent,
            event.device_type,
            event.browser,
            event.os,
            event.url,
            event.referrer,
        ),
    )
    return _row_to_dict(row)
