"""Tests for the ProjectStore facade."""

import sqlite3

import pytest

from project_editor import (
    EntityNotFoundError,
    Project,
    ProjectStore,
    ProjectTransaction,
    TransactionType,
)


def rename(value):
    return ProjectTransaction.make(TransactionType.NAME, value)


def test_reopen_file_database(tmp_path, alice, bob):
    path = tmp_path / "projects.db"
    with ProjectStore(path) as store:
        project = store.apply(Project(), alice, [rename("Alpha")])
        store.join(project, bob)

    with ProjectStore(path) as store:
        reloaded = store.load_project_by_phid(project.phid)
        assert reloaded.name == "Alpha"
        assert reloaded.get_member_phids() == [bob.phid]
        assert len(store.get_transactions(reloaded)) == 2


def test_close_on_exit():
    with ProjectStore() as store:
        conn = store.conn
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")


def test_missing_project(store):
    with pytest.raises(EntityNotFoundError):
        store.load_project(42)
    with pytest.raises(EntityNotFoundError):
        store.load_project_by_phid("PHID-PROJ-nope")


def test_loaded_projects_have_members_attached(store, project, alice):
    assert store.load_project(project.id).get_member_phids() == []
    store.join(project, alice)
    (listed,) = store.list_projects()
    assert listed.has_member_phids()
    assert listed.get_member_phids() == [alice.phid]


def test_list_projects_in_creation_order(store, alice):
    for n in ("Gamma", "Beta", "Alpha"):
        store.apply(Project(), alice, [rename(n)])
    assert [p.name for p in store.list_projects()] == ["Gamma", "Beta", "Alpha"]


def test_unsaved_project_has_no_history(store):
    assert store.get_transactions(Project()) == []
