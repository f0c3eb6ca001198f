"""Project name uniqueness validation for project-editor."""

from __future__ import annotations

import sqlite3

from project_editor import db as _db
from project_editor.exceptions import ConflictError, ValidationError
from project_editor.models import Project
from project_editor.slug import ROOT_SLUG, normalize_slug


def validate_name(conn: sqlite3.Connection, project: Project) -> None:
    """Reject a project name that is degenerate or already taken.

    Only reads from ``conn``, so it is safe to call again after a failed
    commit to find out whether the failure was a real name collision.

    Raises:
        ValidationError: The name normalizes to the root slug.
        ConflictError: Another project has the same name or slug.
    """
    name = project.name
    slug = project.slug or normalize_slug(name)

    if slug == ROOT_SLUG:
        raise ValidationError(
            "Project names must be unique and contain some letters or numbers."
        )

    collision = _db.find_by_name_or_slug(conn, name, slug, exclude_id=project.id)
    if collision is not None:
        raise ConflictError(
            f"Project names must be unique. The name {name!r} is too similar "
            f"to the name of another project, {collision.name!r} "
            f"(Project ID: {collision.id}). Choose a unique name.",
            other_id=collision.id,
            other_name=collision.name,
        )
