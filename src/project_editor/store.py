"""ProjectStore: main entry point for the project-editor library."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from project_editor import db as _db
from project_editor import history as _hist
from project_editor.config import EditorConfig
from project_editor.edges import PROJECT_MEMBER, EdgeStore
from project_editor.editor import (
    ProjectEditor,
    apply_join_project,
    apply_leave_project,
)
from project_editor.exceptions import EntityNotFoundError
from project_editor.feed import FeedStoryPublisher, query_stories
from project_editor.models import (
    FeedStory,
    Project,
    ProjectTransaction,
    User,
)


class ProjectStore:
    """Owns a project database connection and the collaborators around it.

    Every editor built from a store shares its edge store and feed
    publisher, so subscribers registered on :attr:`publisher` see stories
    from all of them.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        timeout: float = 5.0,
        wal: bool = True,
    ) -> None:
        self._conn = _db.connect(db_path, timeout=timeout, wal=wal)
        _db.check_schema_version(self._conn)
        _db.init_db(self._conn)
        self.edges = EdgeStore(self._conn)
        self.publisher = FeedStoryPublisher(self._conn)

    @classmethod
    def from_config(cls, config: EditorConfig) -> ProjectStore:
        return cls(config.database, timeout=config.timeout, wal=config.wal)

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> ProjectStore:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_project(self, project_id: int) -> Project:
        row = _db.get_project_row(self._conn, project_id)
        if row is None:
            raise EntityNotFoundError(f"Project not found: {project_id!r}")
        return self._row_to_project(row)

    def load_project_by_phid(self, phid: str) -> Project:
        row = _db.get_project_row_by_phid(self._conn, phid)
        if row is None:
            raise EntityNotFoundError(f"Project not found: {phid!r}")
        return self._row_to_project(row)

    def list_projects(self) -> list[Project]:
        rows = self._conn.execute("SELECT * FROM projects ORDER BY id").fetchall()
        return [self._row_to_project(r) for r in rows]

    def _row_to_project(self, row: sqlite3.Row) -> Project:
        project = _db.row_to_project(row)
        project.attach_member_phids(
            self.edges.list_edges(project.phid, PROJECT_MEMBER)
        )
        return project

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def editor(self, project: Project, actor: User) -> ProjectEditor:
        return ProjectEditor(
            self._conn, project, edges=self.edges, publisher=self.publisher,
        ).set_actor(actor)

    def apply(
        self,
        project: Project,
        actor: User,
        xactions: Iterable[ProjectTransaction],
    ) -> Project:
        """Apply ``xactions`` to ``project`` as ``actor``."""
        return self.editor(project, actor).apply_transactions(xactions)

    def join(self, project: Project, user: User) -> Project:
        return apply_join_project(
            self._conn, project, user, edges=self.edges, publisher=self.publisher,
        )

    def leave(self, project: Project, user: User) -> Project:
        return apply_leave_project(
            self._conn, project, user, edges=self.edges, publisher=self.publisher,
        )

    # ------------------------------------------------------------------
    # History and feed
    # ------------------------------------------------------------------

    def get_transactions(
        self,
        project: Project,
        *,
        transaction_type: str | None = None,
    ) -> list[ProjectTransaction]:
        if project.id is None:
            return []
        return _hist.query_transactions(
            self._conn, project_id=project.id, transaction_type=transaction_type,
        )

    def get_feed(
        self,
        phid: str | None = None,
        *,
        limit: int | None = None,
    ) -> list[FeedStory]:
        return query_stories(self._conn, related_phid=phid, limit=limit)
