"""Tests for low-level database helpers."""

import pytest

from project_editor import DatabaseError, DuplicateKeyError, Project
from project_editor import db


@pytest.fixture
def db_conn():
    """Create an in-memory database connection for testing."""
    conn = db.connect(":memory:")
    db.init_db(conn)
    yield conn
    conn.close()


def test_schema_version(db_conn):
    row = db_conn.execute(
        "SELECT value FROM meta WHERE key='schema_version'"
    ).fetchone()
    assert row[0] == db.SCHEMA_VERSION
    db.check_schema_version(db_conn)


def test_schema_version_mismatch(db_conn):
    db_conn.execute("UPDATE meta SET value = '0.1' WHERE key = 'schema_version'")
    db_conn.commit()
    with pytest.raises(DatabaseError, match="0.1"):
        db.check_schema_version(db_conn)


def test_save_project_assigns_identity(db_conn):
    project = Project(name="Alpha")
    db.save_project(db_conn, project)
    assert project.id is not None
    assert project.phid.startswith("PHID-PROJ-")
    assert project.slug == "alpha/"
    assert project.date_created == project.date_modified


def test_save_project_duplicate_name(db_conn):
    db.save_project(db_conn, Project(name="Alpha"))
    with pytest.raises(DuplicateKeyError):
        db.save_project(db_conn, Project(name="Alpha", slug="other/"))


def test_find_by_name_or_slug(db_conn):
    alpha = Project(name="Alpha")
    db.save_project(db_conn, alpha)

    found = db.find_by_name_or_slug(db_conn, "ALPHA", "alpha/")
    assert found.id == alpha.id
    assert db.find_by_name_or_slug(db_conn, "Alpha", "x/", exclude_id=alpha.id) is None
    assert db.find_by_name_or_slug(db_conn, "Beta", "beta/") is None


def test_atomic_rolls_back(db_conn):
    with pytest.raises(RuntimeError):
        with db.atomic(db_conn):
            db.save_project(db_conn, Project(name="Alpha"))
            raise RuntimeError("abort")
    assert db_conn.execute("SELECT COUNT(*) FROM projects").fetchone()[0] == 0


def test_atomic_commits(db_conn):
    with db.atomic(db_conn):
        db.save_project(db_conn, Project(name="Alpha"))
    db_conn.rollback()
    assert db_conn.execute("SELECT COUNT(*) FROM projects").fetchone()[0] == 1
