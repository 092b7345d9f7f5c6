"""Users repository - appdata.users (to-do / admin accounts).

Uses raw SQL with psycopg2 (no ORM).
"""

from __future__ import annotations

from dataclasses import dataclass

from psycopg2.extensions import cursor as PgCursor

from unifiedapi.infra.db import fetchone


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str


def get_user_by_username(cur: PgCursor, username: str) -> UserRecord | None:
    row = fetchone(
        cur,
        "SELECT id, username, password_hash FROM appdata.users WHERE username = %s",
        (username,),
    )
    if row is None:
        return None
    return UserRecord(id=row[0], username=row[1], password_hash=row[2])


def upsert_user(cur: PgCursor, username: str, password_hash: str) -> tuple[int, bool]:
    """Create a user or reset its password.

    Returns:
        Tuple of (user_id, created).
    """
    row = fetchone(
        cur,
        """
        INSERT INTO appdata.users (username, password_hash)
        VALUES (%s, %s)
        ON CONFLICT (username) DO UPDATE
            SET password_hash = EXCLUDED.password_hash,
                updated_at    = now()
        RETURNING id, (xmax = 0) AS created
        """,
        (username, password_hash),
    )
    return row[0], bool(row[1])
