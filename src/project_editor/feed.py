"""Feed story publishing and querying for project-editor."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from collections.abc import Callable, Iterable
from typing import Any

from project_editor import db as _db
from project_editor.exceptions import PublishError, StoreError
from project_editor.models import FeedStory

logger = logging.getLogger(__name__)

StoryListener = Callable[[FeedStory], None]


class FeedStoryPublisher:
    """Durably records feed stories and notifies subscribers.

    Each story is written in its own immediate transaction, so a story is
    visible to :func:`query_stories` as soon as :meth:`publish` returns.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._listeners: list[StoryListener] = []

    def subscribe(self, listener: StoryListener) -> None:
        """Call ``listener`` with every story published from now on."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: StoryListener) -> None:
        self._listeners.remove(listener)

    def publish(
        self,
        story_type: str,
        story_data: dict[str, Any],
        related_phids: Iterable[str | None],
        author_phid: str | None,
        story_time: int | None = None,
    ) -> FeedStory:
        epoch = int(time.time()) if story_time is None else story_time
        related = tuple(sorted({phid for phid in related_phids if phid}))
        try:
            # The key is read under the write lock so that publishers on
            # other connections can't allocate the same one.
            with _db.atomic(self._conn, immediate=True):
                key = self._next_chronological_key(epoch)
                cur = self._conn.execute(
                    "INSERT INTO feed_stories "
                    "(chronological_key, story_type, story_data, "
                    "author_phid, epoch) VALUES (?, ?, ?, ?, ?)",
                    (key, story_type, json.dumps(story_data), author_phid, epoch),
                )
                self._conn.executemany(
                    "INSERT OR IGNORE INTO feed_story_references "
                    "(object_phid, chronological_key) VALUES (?, ?)",
                    [(phid, key) for phid in related],
                )
        except (sqlite3.Error, StoreError) as e:
            raise PublishError(f"Failed to publish {story_type} story: {e}") from e

        story = FeedStory(
            id=cur.lastrowid,
            chronological_key=key,
            story_type=story_type,
            story_data=story_data,
            author_phid=author_phid,
            epoch=epoch,
            related_phids=related,
        )
        logger.info("Published %s story %d", story_type, story.id)
        for listener in list(self._listeners):
            listener(story)
        return story

    def _next_chronological_key(self, epoch: int) -> int:
        # Upper 32 bits are the epoch; the low bits order stories within
        # one second.
        base = epoch << 32
        last = self._conn.execute(
            "SELECT MAX(chronological_key) FROM feed_stories "
            "WHERE chronological_key >= ?",
            (base,),
        ).fetchone()[0]
        return base if last is None else last + 1


def query_stories(
    conn: sqlite3.Connection,
    *,
    related_phid: str | None = None,
    story_type: str | None = None,
    limit: int | None = None,
) -> list[FeedStory]:
    """Query published stories, oldest first."""
    clauses: list[str] = []
    params: list[Any] = []

    if related_phid is not None:
        clauses.append(
            "chronological_key IN (SELECT chronological_key "
            "FROM feed_story_references WHERE object_phid = ?)"
        )
        params.append(related_phid)
    if story_type is not None:
        clauses.append("story_type = ?")
        params.append(story_type)

    where = " AND ".join(clauses) if clauses else "1=1"
    sql = f"SELECT * FROM feed_stories WHERE {where} ORDER BY chronological_key ASC"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)

    stories = []
    for row in conn.execute(sql, params).fetchall():
        refs = conn.execute(
            "SELECT object_phid FROM feed_story_references "
            "WHERE chronological_key = ? ORDER BY object_phid",
            (row["chronological_key"],),
        ).fetchall()
        stories.append(FeedStory(
            id=row["id"],
            chronological_key=row["chronological_key"],
            story_type=row["story_type"],
            story_data=json.loads(row["story_data"]),
            author_phid=row["author_phid"],
            epoch=row["epoch"],
            related_phids=tuple(r["object_phid"] for r in refs),
        ))
    return stories
