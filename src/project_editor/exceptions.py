"""Custom exception hierarchy for project-editor."""


class ProjectEditorError(Exception):
    """Base exception for all project-editor errors."""


class UsageError(ProjectEditorError):
    """API misuse (no acting user, reusing an applied transaction)."""


class UnknownTransactionTypeError(ProjectEditorError):
    """A transaction type with no registered handler reached the editor."""


class ValidationError(ProjectEditorError):
    """Invalid data (degenerate project name, bad config value)."""


class ConflictError(ProjectEditorError):
    """Another project already uses this name or slug."""

    def __init__(
        self,
        message: str,
        other_id: int | None = None,
        other_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.other_id = other_id
        self.other_name = other_name


class EntityNotFoundError(ProjectEditorError):
    """Entity doesn't exist in the database."""


class StoreError(ProjectEditorError):
    """The backing store rejected a read or write."""


class DuplicateKeyError(StoreError):
    """A write hit a unique index."""


class PublishError(ProjectEditorError):
    """A feed story could not be published."""


class DatabaseError(ProjectEditorError):
    """Schema version mismatch, connection failure."""


class ConfigError(ProjectEditorError):
    """Malformed or invalid editor configuration."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)
