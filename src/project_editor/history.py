"""Transaction history querying for project-editor."""

from __future__ import annotations

import sqlite3

from project_editor import db as _db
from project_editor.models import ProjectTransaction


def query_transactions(
    conn: sqlite3.Connection,
    *,
    project_id: int | None = None,
    transaction_type: str | None = None,
    author_phid: str | None = None,
) -> list[ProjectTransaction]:
    """Query saved transactions with optional filters, oldest first."""
    clauses: list[str] = []
    params: list[str | int] = []

    if project_id is not None:
        clauses.append("project_id = ?")
        params.append(project_id)
    if transaction_type is not None:
        clauses.append("transaction_type = ?")
        params.append(transaction_type)
    if author_phid is not None:
        clauses.append("author_phid = ?")
        params.append(author_phid)

    where = " AND ".join(clauses) if clauses else "1=1"
    sql = f"SELECT * FROM project_transactions WHERE {where} ORDER BY id ASC"

    rows = conn.execute(sql, params).fetchall()
    return [_db.row_to_transaction(row) for row in rows]
