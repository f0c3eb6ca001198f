"""Tests for the edge store."""

import pytest

from project_editor import (
    MEMBER_OF_PROJECT,
    PROJECT_MEMBER,
    EdgeDiff,
    EdgeStore,
    StoreError,
    User,
)
from project_editor import db

ACTOR = User("PHID-USER-admin", "admin")


@pytest.fixture
def edges():
    conn = db.connect(":memory:")
    db.init_db(conn)
    yield EdgeStore(conn)
    conn.close()


class TestEdgeStore:

    def test_empty(self, edges):
        assert edges.list_edges("PHID-PROJ-x", PROJECT_MEMBER) == []
        assert edges.list_edges(None, PROJECT_MEMBER) == []

    def test_insertion_order(self, edges):
        edges.apply_edge_edits("PHID-PROJ-x", ["PHID-USER-b"], [], PROJECT_MEMBER, ACTOR)
        edges.apply_edge_edits("PHID-PROJ-x", ["PHID-USER-a"], [], PROJECT_MEMBER, ACTOR)
        assert edges.list_edges("PHID-PROJ-x", PROJECT_MEMBER) == [
            "PHID-USER-b", "PHID-USER-a",
        ]

    def test_inverse_edges_written_and_removed(self, edges):
        edges.apply_edge_edits("PHID-PROJ-x", ["PHID-USER-a"], [], PROJECT_MEMBER, ACTOR)
        assert edges.list_edges("PHID-USER-a", MEMBER_OF_PROJECT) == ["PHID-PROJ-x"]

        edges.apply_edge_edits("PHID-PROJ-x", [], ["PHID-USER-a"], PROJECT_MEMBER, ACTOR)
        assert edges.list_edges("PHID-PROJ-x", PROJECT_MEMBER) == []
        assert edges.list_edges("PHID-USER-a", MEMBER_OF_PROJECT) == []

    def test_untyped_inverse_is_one_way(self, edges):
        edges.apply_edge_edits("PHID-A", ["PHID-B"], [], "task.depends", ACTOR)
        assert edges.list_edges("PHID-A", "task.depends") == ["PHID-B"]
        assert edges.list_edges("PHID-B", "task.depends") == []

    def test_duplicate_add_ignored(self, edges):
        for _ in range(2):
            edges.apply_edge_edits(
                "PHID-PROJ-x", ["PHID-USER-a"], [], PROJECT_MEMBER, ACTOR,
            )
        assert edges.list_edges("PHID-PROJ-x", PROJECT_MEMBER) == ["PHID-USER-a"]

    def test_removing_missing_edge_is_harmless(self, edges):
        edges.apply_edge_edits("PHID-PROJ-x", [], ["PHID-USER-a"], PROJECT_MEMBER, ACTOR)
        assert edges.list_edges("PHID-PROJ-x", PROJECT_MEMBER) == []

    def test_store_failure_wrapped(self):
        conn = db.connect(":memory:")
        edges = EdgeStore(conn)
        with pytest.raises(StoreError):
            edges.apply_edge_edits("PHID-A", ["PHID-B"], [], PROJECT_MEMBER, ACTOR)
        conn.close()


class TestEdgeDiff:

    def test_empty_is_falsy(self):
        assert not EdgeDiff()

    def test_add_cancels_pending_remove(self):
        diff = EdgeDiff()
        diff.remove_edges(["a", "b"])
        diff.add_edges(["a"])
        assert diff.add == {"a"}
        assert diff.remove == {"b"}

    def test_remove_cancels_pending_add(self):
        diff = EdgeDiff()
        diff.add_edges(["a"])
        diff.remove_edges(["a"])
        assert diff.add == set()
        assert diff.remove == {"a"}
