"""ProjectEditor: applies transactions to a single project."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from project_editor import db as _db
from project_editor.edges import PROJECT_MEMBER, EdgeDiff, EdgeStore
from project_editor.exceptions import (
    DuplicateKeyError,
    StoreError,
    UnknownTransactionTypeError,
    UsageError,
)
from project_editor.feed import FeedStoryPublisher
from project_editor.models import (
    STORY_PROJECT,
    Project,
    ProjectTransaction,
    TransactionType,
    User,
)
from project_editor.transactions import TRANSACTION_HANDLERS, TransactionHandler
from project_editor.validator import validate_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Commit results
# ---------------------------------------------------------------------------

class CommitStatus(str, Enum):
    COMMITTED = "committed"
    DUPLICATE_KEY = "duplicate_key"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Outcome of the atomic write of one edit."""

    status: CommitStatus
    error: StoreError | None = None

    @classmethod
    def from_error(cls, error: StoreError) -> CommitResult:
        if isinstance(error, DuplicateKeyError):
            return cls(CommitStatus.DUPLICATE_KEY, error)
        return cls(CommitStatus.FAILED, error)


def resolve_commit(result: CommitResult, revalidate: Callable[[], None]) -> None:
    """Return if the commit succeeded, otherwise raise the right error.

    A duplicate key may mean another edit claimed the same name between
    our validation and our write. ``revalidate`` is called to check; it
    raises :class:`~project_editor.exceptions.ConflictError` if so. If it
    finds nothing, the original store error is raised unchanged.
    """
    if result.status is CommitStatus.COMMITTED:
        return
    if result.status is CommitStatus.DUPLICATE_KEY:
        logger.warning("Duplicate key on commit, re-checking name: %s", result.error)
        revalidate()
    raise result.error


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

class ProjectEditor:
    """Applies a batch of transactions to one project.

    The project passed in is edited in place and also returned from
    :meth:`apply_transactions`. Edits to the same project object must not
    run concurrently.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        project: Project,
        *,
        edges: EdgeStore | None = None,
        publisher: FeedStoryPublisher | None = None,
        handlers: dict[str, TransactionHandler] | None = None,
    ) -> None:
        self.conn = conn
        self.project = project
        self.edges = edges if edges is not None else EdgeStore(conn)
        self.publisher = publisher if publisher is not None else FeedStoryPublisher(conn)
        self.handlers = handlers if handlers is not None else TRANSACTION_HANDLERS
        self.edge_diff = EdgeDiff()
        self._actor: User | None = None

    def set_actor(self, actor: User) -> ProjectEditor:
        self._actor = actor
        return self

    def apply_transactions(self, xactions: Iterable[ProjectTransaction]) -> Project:
        if self._actor is None:
            raise UsageError("Call set_actor() before apply_transactions()!")
        actor = self._actor
        project = self.project
        xactions = list(xactions)

        for xaction in xactions:
            if xaction.is_finalized:
                raise UsageError(
                    f"Transaction {xaction.id} has already been applied"
                )

        is_new = project.is_new
        pending = [(xaction, self._get_handler(xaction)) for xaction in xactions]

        for xaction, handler in pending:
            xaction.old_value = handler.compute_old_value(self, project, xaction)

        effective = []
        for xaction, handler in pending:
            if handler.has_effect(xaction.old_value, xaction.new_value):
                effective.append((xaction, handler))
            else:
                logger.debug(
                    "Dropping %s transaction with no effect on %s",
                    xaction.transaction_type, project.phid or "new project",
                )

        if not effective:
            return project

        self.edge_diff = EdgeDiff()
        for xaction, handler in effective:
            handler.apply_effect(self, project, xaction)

        applied = [xaction for xaction, _ in effective]
        result = self._commit(project, applied, actor, is_new)
        resolve_commit(result, lambda: validate_name(self.conn, project))
        logger.info(
            "Applied %d transaction(s) to project %s", len(applied), project.phid
        )

        if self.edge_diff:
            members = set(project.get_member_phids())
            members -= self.edge_diff.remove
            members |= self.edge_diff.add
            project.attach_member_phids(sorted(members))

        for xaction in applied:
            xaction.finalize()
        for xaction in applied:
            self._publish_transaction_story(project, xaction)

        return project

    def _get_handler(self, xaction: ProjectTransaction) -> TransactionHandler:
        key = xaction.transaction_type
        if isinstance(key, Enum):
            key = key.value
        handler = self.handlers.get(key)
        if handler is None:
            raise UnknownTransactionTypeError(
                f"Unknown transaction type {xaction.transaction_type!r}!"
            )
        return handler

    def _commit(
        self,
        project: Project,
        xactions: list[ProjectTransaction],
        actor: User,
        is_new: bool,
    ) -> CommitResult:
        committed = False
        try:
            with _db.atomic(self.conn):
                if is_new:
                    project.author_phid = actor.phid
                _db.save_project(self.conn, project)

                self.edges.apply_edge_edits(
                    project.phid,
                    self.edge_diff.add,
                    self.edge_diff.remove,
                    PROJECT_MEMBER,
                    actor,
                )

                for xaction in xactions:
                    xaction.author_phid = actor.phid
                    xaction.project_id = project.id
                    _db.save_transaction(self.conn, xaction)
            committed = True
        except StoreError as e:
            return CommitResult.from_error(e)
        finally:
            # The insert was rolled back; the next attempt must insert again.
            if is_new and not committed:
                project.id = None
                project.phid = None
        return CommitResult(CommitStatus.COMMITTED)

    def _publish_transaction_story(
        self, project: Project, xaction: ProjectTransaction
    ) -> None:
        self.publisher.publish(
            STORY_PROJECT,
            {
                "project_phid": project.phid,
                "transaction_id": xaction.id,
                "type": xaction.transaction_type,
                "old": xaction.old_value,
                "new": xaction.new_value,
            },
            related_phids=[project.phid, xaction.author_phid],
            author_phid=xaction.author_phid,
            story_time=int(time.time()),
        )


# ---------------------------------------------------------------------------
# Single-transaction helpers
# ---------------------------------------------------------------------------

def _current_member_phids(
    conn: sqlite3.Connection, project: Project, edges: EdgeStore | None
) -> list[str]:
    # Always read from storage; the attached view may predate another
    # session's edit.
    edges = edges if edges is not None else EdgeStore(conn)
    return edges.list_edges(project.phid, PROJECT_MEMBER)


def apply_one_transaction(
    conn: sqlite3.Connection,
    project: Project,
    user: User,
    transaction_type: str,
    new_value: Any,
    **editor_kwargs: Any,
) -> Project:
    """Apply a single transaction to ``project`` as ``user``."""
    xaction = ProjectTransaction.make(transaction_type, new_value)
    editor = ProjectEditor(conn, project, **editor_kwargs)
    editor.set_actor(user)
    return editor.apply_transactions([xaction])


def apply_join_project(
    conn: sqlite3.Connection, project: Project, user: User, **editor_kwargs: Any
) -> Project:
    """Add ``user`` to the project's members."""
    members = _current_member_phids(conn, project, editor_kwargs.get("edges"))
    members.append(user.phid)
    return apply_one_transaction(
        conn, project, user, TransactionType.MEMBERS, members, **editor_kwargs
    )


def apply_leave_project(
    conn: sqlite3.Connection, project: Project, user: User, **editor_kwargs: Any
) -> Project:
    """Remove ``user`` from the project's members."""
    members = [
        phid
        for phid in _current_member_phids(conn, project, editor_kwargs.get("edges"))
        if phid != user.phid
    ]
    return apply_one_transaction(
        conn, project, user, TransactionType.MEMBERS, members, **editor_kwargs
    )
