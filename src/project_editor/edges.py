"""Typed, directed edges between PHIDs for project-editor."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from project_editor.exceptions import StoreError
from project_editor.models import User

logger = logging.getLogger(__name__)

PROJECT_MEMBER = "project.member"
MEMBER_OF_PROJECT = "member.project"

# Edge types written in both directions. Writing or removing an edge of a
# type listed here writes or removes the inverse edge from the destination.
EDGE_INVERSES: dict[str, str] = {
    PROJECT_MEMBER: MEMBER_OF_PROJECT,
    MEMBER_OF_PROJECT: PROJECT_MEMBER,
}


@dataclass
class EdgeDiff:
    """Pending edge additions and removals for one edit."""

    add: set[str] = field(default_factory=set)
    remove: set[str] = field(default_factory=set)

    def add_edges(self, phids: Iterable[str]) -> None:
        for phid in phids:
            self.remove.discard(phid)
            self.add.add(phid)

    def remove_edges(self, phids: Iterable[str]) -> None:
        for phid in phids:
            self.add.discard(phid)
            self.remove.add(phid)

    def __bool__(self) -> bool:
        return bool(self.add or self.remove)


class EdgeStore:
    """Reads and writes edges on an open connection.

    Writes are not committed here; callers wrap them in
    :func:`project_editor.db.atomic` together with the rest of their edit.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def list_edges(self, src_phid: str | None, edge_type: str) -> list[str]:
        """Destination PHIDs of ``src_phid``'s edges, oldest first."""
        if src_phid is None:
            return []
        try:
            rows = self._conn.execute(
                "SELECT dst FROM edges WHERE src = ? AND type = ? "
                "ORDER BY seq, dst",
                (src_phid, edge_type),
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to load {edge_type} edges: {e}") from e
        return [row["dst"] for row in rows]

    def apply_edge_edits(
        self,
        src_phid: str,
        adds: Iterable[str],
        removes: Iterable[str],
        edge_type: str,
        actor: User,
    ) -> None:
        """Remove, then add, edges of one type from ``src_phid``."""
        adds = sorted(adds)
        removes = sorted(removes)
        if not adds and not removes:
            return
        inverse = EDGE_INVERSES.get(edge_type)
        logger.debug(
            "%s editing %s edges of %s: +%d -%d",
            actor.phid, edge_type, src_phid, len(adds), len(removes),
        )
        try:
            for dst in removes:
                self._remove_edge(src_phid, edge_type, dst)
                if inverse is not None:
                    self._remove_edge(dst, inverse, src_phid)
            now = int(time.time())
            for dst in adds:
                self._add_edge(src_phid, edge_type, dst, now)
                if inverse is not None:
                    self._add_edge(dst, inverse, src_phid, now)
        except sqlite3.Error as e:
            raise StoreError(
                f"Failed to apply {edge_type} edges for {src_phid}: {e}"
            ) from e

    def _add_edge(self, src: str, edge_type: str, dst: str, now: int) -> None:
        seq = self._conn.execute(
            "SELECT COALESCE(MAX(seq), 0) + 1 FROM edges "
            "WHERE src = ? AND type = ?",
            (src, edge_type),
        ).fetchone()[0]
        self._conn.execute(
            "INSERT OR IGNORE INTO edges (src, type, dst, seq, date_created) "
            "VALUES (?, ?, ?, ?, ?)",
            (src, edge_type, dst, seq, now),
        )

    def _remove_edge(self, src: str, edge_type: str, dst: str) -> None:
        self._conn.execute(
            "DELETE FROM edges WHERE src = ? AND type = ? AND dst = ?",
            (src, edge_type, dst),
        )
