"""Database connection, DDL, and low-level CRUD for project-editor."""

from __future__ import annotations

import json
import sqlite3
import time
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from project_editor.exceptions import DatabaseError, DuplicateKeyError, StoreError
from project_editor.models import Project, ProjectTransaction
from project_editor.slug import normalize_slug

SCHEMA_VERSION = "1.0"

# ---------------------------------------------------------------------------
# DDL statements
# ---------------------------------------------------------------------------

_DDL = """
-- Meta table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT NOT NULL,
    value TEXT,
    UNIQUE (key)
);

-- Projects
CREATE TABLE IF NOT EXISTS projects (
    id INTEGER PRIMARY KEY,
    phid TEXT NOT NULL,
    name TEXT NOT NULL,
    slug TEXT NOT NULL,
    status TEXT NOT NULL,
    author_phid TEXT,
    date_created INTEGER NOT NULL,
    date_modified INTEGER NOT NULL,
    UNIQUE (phid),
    UNIQUE (name),
    UNIQUE (slug)
);

CREATE TABLE IF NOT EXISTS project_transactions (
    id INTEGER PRIMARY KEY,
    project_id INTEGER NOT NULL REFERENCES projects (id) ON DELETE CASCADE,
    author_phid TEXT NOT NULL,
    transaction_type TEXT NOT NULL,
    old_value TEXT,
    new_value TEXT,
    date_created INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS project_transaction_project_index
    ON project_transactions (project_id);

-- Edges
CREATE TABLE IF NOT EXISTS edges (
    src TEXT NOT NULL,
    type TEXT NOT NULL,
    dst TEXT NOT NULL,
    seq INTEGER NOT NULL,
    date_created INTEGER NOT NULL,
    UNIQUE (src, type, dst)
);
CREATE INDEX IF NOT EXISTS edge_src_index ON edges (src, type, seq);

-- Feed
CREATE TABLE IF NOT EXISTS feed_stories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chronological_key INTEGER NOT NULL,
    story_type TEXT NOT NULL,
    story_data TEXT NOT NULL,
    author_phid TEXT,
    epoch INTEGER NOT NULL,
    UNIQUE (chronological_key)
);

CREATE TABLE IF NOT EXISTS feed_story_references (
    object_phid TEXT NOT NULL,
    chronological_key INTEGER NOT NULL
        REFERENCES feed_stories (chronological_key) ON DELETE CASCADE,
    UNIQUE (object_phid, chronological_key)
);
CREATE INDEX IF NOT EXISTS feed_story_reference_key_index
    ON feed_story_references (chronological_key);
"""


def connect(
    db_path: str | Path = ":memory:",
    timeout: float = 5.0,
    wal: bool = True,
) -> sqlite3.Connection:
    """Open a database connection with editor PRAGMA settings."""
    db_path_str = str(db_path)
    conn = sqlite3.connect(db_path_str, timeout=timeout)
    conn.execute("PRAGMA foreign_keys = ON")
    if wal and db_path_str != ":memory:":
        conn.execute("PRAGMA journal_mode = WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize all tables if they don't exist. Set schema version."""
    conn.executescript(_DDL)
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) VALUES ('schema_version', ?)",
        (SCHEMA_VERSION,),
    )
    conn.execute(
        "INSERT OR IGNORE INTO meta (key, value) "
        "VALUES ('created_at', strftime('%Y-%m-%dT%H:%M:%f', 'now'))",
    )
    conn.commit()


def check_schema_version(conn: sqlite3.Connection) -> None:
    """Verify the database schema version is compatible."""
    try:
        row = conn.execute(
            "SELECT value FROM meta WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        # meta table doesn't exist - uninitialized DB
        return
    if row is None:
        return
    version = row[0]
    if version != SCHEMA_VERSION:
        raise DatabaseError(
            f"Incompatible schema version: {version} "
            f"(expected {SCHEMA_VERSION})"
        )


@contextmanager
def atomic(
    conn: sqlite3.Connection, immediate: bool = False
) -> Generator[None, None, None]:
    """Run the enclosed writes in a single transaction.

    Commits when the block exits normally and rolls back on any exception,
    which is re-raised unchanged. With ``immediate=True`` the write lock is
    taken up front, so reads inside the block see no competing writer.
    """
    try:
        conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    except sqlite3.Error as e:
        raise StoreError(f"Failed to open transaction: {e}") from e
    try:
        yield
    except BaseException:
        conn.rollback()
        raise
    else:
        try:
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise _store_error(e, "committing") from e


def generate_phid(kind: str) -> str:
    """Return a new opaque identifier such as ``PHID-PROJ-3f2a...``."""
    return f"PHID-{kind}-{uuid.uuid4().hex[:20]}"


def _store_error(e: sqlite3.Error, action: str) -> StoreError:
    if isinstance(e, sqlite3.IntegrityError) and "UNIQUE" in str(e):
        return DuplicateKeyError(f"Duplicate key while {action}: {e}")
    return StoreError(f"Store failure while {action}: {e}")


# ---------------------------------------------------------------------------
# Project CRUD helpers
# ---------------------------------------------------------------------------

def save_project(conn: sqlite3.Connection, project: Project) -> None:
    """Insert or update a project row.

    A new project gets its ``id``, ``phid`` and ``date_created`` assigned
    here. Does not commit.
    """
    now = int(time.time())
    if project.slug is None:
        project.slug = normalize_slug(project.name)
    try:
        if project.id is None:
            phid = project.phid or generate_phid("PROJ")
            cur = conn.execute(
                "INSERT INTO projects "
                "(phid, name, slug, status, author_phid, "
                "date_created, date_modified) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (phid, project.name, project.slug, project.status,
                 project.author_phid, now, now),
            )
            project.id = cur.lastrowid
            project.phid = phid
            project.date_created = now
        else:
            conn.execute(
                "UPDATE projects SET name = ?, slug = ?, status = ?, "
                "author_phid = ?, date_modified = ? WHERE id = ?",
                (project.name, project.slug, project.status,
                 project.author_phid, now, project.id),
            )
    except sqlite3.Error as e:
        raise _store_error(e, f"saving project {project.name!r}") from e
    project.date_modified = now


def row_to_project(row: sqlite3.Row) -> Project:
    return Project(
        id=row["id"],
        phid=row["phid"],
        name=row["name"],
        slug=row["slug"],
        status=row["status"],
        author_phid=row["author_phid"],
        date_created=row["date_created"],
        date_modified=row["date_modified"],
    )


def get_project_row(conn: sqlite3.Connection, project_id: int) -> sqlite3.Row | None:
    """Get a full project row by ID."""
    return conn.execute(
        "SELECT * FROM projects WHERE id = ?",
        (project_id,),
    ).fetchone()


def get_project_row_by_phid(conn: sqlite3.Connection, phid: str) -> sqlite3.Row | None:
    """Get a full project row by PHID."""
    return conn.execute(
        "SELECT * FROM projects WHERE phid = ?",
        (phid,),
    ).fetchone()


def find_by_name_or_slug(
    conn: sqlite3.Connection,
    name: str,
    slug: str,
    exclude_id: int | None = None,
) -> Project | None:
    """Find a project other than ``exclude_id`` using this name or slug.

    With ``exclude_id=None`` every stored project is a candidate.
    """
    if exclude_id is None:
        row = conn.execute(
            "SELECT * FROM projects WHERE (name = ? OR slug = ?) "
            "ORDER BY id LIMIT 1",
            (name, slug),
        ).fetchone()
    else:
        row = conn.execute(
            "SELECT * FROM projects WHERE (name = ? OR slug = ?) AND id != ? "
            "ORDER BY id LIMIT 1",
            (name, slug, exclude_id),
        ).fetchone()
    return row_to_project(row) if row else None


# ---------------------------------------------------------------------------
# Transaction CRUD helpers
# ---------------------------------------------------------------------------

def _encode(value: Any) -> str:
    return json.dumps(value)


def _decode(value: str | None) -> Any:
    return json.loads(value) if value is not None else None


def save_transaction(conn: sqlite3.Connection, xaction: ProjectTransaction) -> None:
    """Insert a transaction row and assign its ``id``. Does not commit."""
    now = int(time.time())
    try:
        cur = conn.execute(
            "INSERT INTO project_transactions "
            "(project_id, author_phid, transaction_type, old_value, "
            "new_value, date_created) VALUES (?, ?, ?, ?, ?, ?)",
            (xaction.project_id, xaction.author_phid,
             xaction.transaction_type,
             _encode(xaction.old_value), _encode(xaction.new_value), now),
        )
    except sqlite3.Error as e:
        raise _store_error(
            e, f"saving {xaction.transaction_type} transaction"
        ) from e
    xaction.id = cur.lastrowid
    xaction.date_created = now


def row_to_transaction(row: sqlite3.Row) -> ProjectTransaction:
    xaction = ProjectTransaction(
        transaction_type=row["transaction_type"],
        new_value=_decode(row["new_value"]),
        old_value=_decode(row["old_value"]),
        author_phid=row["author_phid"],
        project_id=row["project_id"],
        id=row["id"],
        date_created=row["date_created"],
    )
    xaction.finalize()
    return xaction
