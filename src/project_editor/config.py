"""YAML configuration for project-editor."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Union

import yaml

from project_editor import db as _db
from project_editor.exceptions import ConfigError


@dataclass(frozen=True)
class EditorConfig:
    """Settings for opening a project database.

    ``timeout`` is how long, in seconds, a write waits for another
    connection's lock before failing.
    """

    database: str = ":memory:"
    timeout: float = 5.0
    wal: bool = True

    def connect(self) -> sqlite3.Connection:
        """Open, check and initialize the configured database."""
        conn = _db.connect(self.database, timeout=self.timeout, wal=self.wal)
        _db.check_schema_version(conn)
        _db.init_db(conn)
        return conn


_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "database": (str,),
    "timeout": (int, float),
    "wal": (bool,),
}


def load_config(source: Union[str, Path, dict[str, Any]]) -> EditorConfig:
    """Load an :class:`EditorConfig` from a YAML file, YAML string or mapping.

    Raises:
        ConfigError: If the YAML is malformed or a setting is invalid
        FileNotFoundError: If the file does not exist
    """
    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = _safe_load(f)
    else:
        data = _safe_load(source)

    return _parse_config(data)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s or ": " in s:
        return False
    return s.endswith((".yaml", ".yml"))


def _safe_load(stream: Any) -> dict[str, Any]:
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def _parse_config(data: dict[str, Any]) -> EditorConfig:
    known = {f.name for f in fields(EditorConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

    for key, value in data.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; don't accept it for numeric settings.
        if not isinstance(value, expected) or (
            isinstance(value, bool) and bool not in expected
        ):
            raise ConfigError(
                f"Field {key!r} must be of type "
                f"{' or '.join(t.__name__ for t in expected)}"
            )

    if data.get("timeout", 0) < 0:
        raise ConfigError("Field 'timeout' must not be negative")

    return EditorConfig(**data)
