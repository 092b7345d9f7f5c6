"""To-do repository - appdata.todo_items.

Deletion is soft: rows are hidden with show = false and never removed.
"""

from __future__ import annotations

from psycopg2.extensions import cursor as PgCursor

from unifiedapi.infra.db import fetchall


def list_names(cur: PgCursor) -> list[str]:
    rows = fetchall(
        cur,
        """
        SELECT DISTINCT list_name
        FROM appdata.todo_items
        WHERE show = true
        ORDER BY list_name
        """,
    )
    return [r[0] for r in rows]


def list_tasks(cur: PgCursor, list_name: str) -> list[dict]:
    rows = fetchall(
        cur,
        """
        SELECT id, message, done
        FROM appdata.todo_items
        WHERE list_name = %s AND show = true
        ORDER BY created_at, id
        """,
        (list_name,),
    )
    return [{"id": r[0], "text": r[1], "completed": r[2]} for r in rows]


def insert_task(cur: PgCursor, list_name: str, text: str) -> None:
    cur.execute(
        """
        INSERT INTO appdata.todo_items (list_name, message, done, show)
        VALUES (%s, %s, false, true)
        """,
        (list_name, text),
    )


def set_done(cur: PgCursor, task_id: int, done: bool) -> int:
    """Returns number of rows updated."""
    cur.execute(
        "UPDATE appdata.todo_items SET done = %s WHERE id = %s AND show = true",
        (done, task_id),
    )
    return cur.rowcount


def hide_task(cur: PgCursor, task_id: int) -> int:
    """Soft delete. Returns number of rows updated."""
    cur.execute(
        "UPDATE appdata.todo_items SET show = false WHERE id = %s AND show = true",
        (task_id,),
    )
    return cur.rowcount
