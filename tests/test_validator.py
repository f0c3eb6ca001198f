"""Tests for project name validation."""

import pytest

from project_editor import ConflictError, Project, ValidationError, validate_name


class TestValidateName:

    def test_unique_name_passes(self, store, project):
        validate_name(store.conn, Project(name="Beta", slug="beta/"))

    def test_unsaved_project_collides_with_any(self, store, project):
        with pytest.raises(ConflictError) as excinfo:
            validate_name(store.conn, Project(name="Alpha"))
        assert excinfo.value.other_id == project.id

    def test_saved_project_does_not_collide_with_itself(self, store, project):
        validate_name(store.conn, project)

    def test_slug_collision(self, store, project):
        with pytest.raises(ConflictError, match="too similar"):
            validate_name(store.conn, Project(name="alpha", slug="alpha/"))

    def test_root_slug_always_rejected(self, store):
        with pytest.raises(ValidationError):
            validate_name(store.conn, Project(name="...", slug="/"))

    def test_is_read_only(self, store, project):
        changes = store.conn.total_changes
        for _ in range(2):
            with pytest.raises(ConflictError):
                validate_name(store.conn, Project(name="Alpha"))
        assert store.conn.total_changes == changes
