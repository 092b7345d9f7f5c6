"""Peripheral tables: visitor logs, users, to-do items.

Revision ID: 002_appdata
Revises: 001_guest_list
Create Date: 2026-10-19
"""

from __future__ import annotations

from pathlib import Path

from alembic import op

revision = "002_appdata"
down_revision = "001_guest_list"
branch_labels = None
depends_on = None


def upgrade() -> None:
    sql_path = Path(__file__).resolve().parents[1] / "sql" / "002_appdata.sql"
    conn = op.get_bind()
    conn.exec_driver_sql(sql_path.read_text(encoding="utf-8"))


def downgrade() -> None:
    conn = op.get_bind()
    conn.exec_driver_sql("DROP TABLE IF EXISTS appdata.todo_items;")
    conn.exec_driver_sql("DROP TABLE IF EXISTS appdata.users;")
    conn.exec_driver_sql("DROP TABLE IF EXISTS appdata.visitor_logs;")
