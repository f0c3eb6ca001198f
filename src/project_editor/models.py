"""Domain model dataclasses and enums for project-editor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from project_editor.exceptions import UsageError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ProjectStatus(str, Enum):
    """Lifecycle status of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class TransactionType(str, Enum):
    """Built-in project transaction types."""

    NAME = "name"
    STATUS = "status"
    MEMBERS = "members"


# Feed story type used for every project transaction.
STORY_PROJECT = "project"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class User:
    """The user on whose behalf an edit is made."""

    phid: str
    username: str


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@dataclass
class Project:
    """A project being created or edited.

    Instances are mutable and are edited in place by
    :class:`~project_editor.editor.ProjectEditor`; a caller holding a
    reference sees the new name, slug and status as soon as the editor
    applies them. Membership is not stored on the project row. It lives in
    the edge store and is only visible here once attached.
    """

    name: str = ""
    status: str = ProjectStatus.ACTIVE.value
    slug: str | None = None
    id: int | None = None
    phid: str | None = None
    author_phid: str | None = None
    date_created: int | None = None
    date_modified: int | None = None
    _member_phids: list[str] | None = field(
        default=None, init=False, repr=False, compare=False,
    )

    @property
    def is_new(self) -> bool:
        return self.id is None

    def attach_member_phids(self, phids: list[str]) -> None:
        self._member_phids = list(phids)

    def has_member_phids(self) -> bool:
        return self._member_phids is not None

    def get_member_phids(self) -> list[str]:
        if self._member_phids is None:
            raise UsageError(
                "Call attach_member_phids() before get_member_phids()!"
            )
        return list(self._member_phids)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

@dataclass
class ProjectTransaction:
    """One requested change to a project.

    The caller supplies ``transaction_type`` and ``new_value``; the editor
    fills in ``old_value`` (and may normalize ``new_value``) before deciding
    whether the change has any effect. Once the transaction is saved it is
    finalized and becomes read-only.
    """

    transaction_type: str
    new_value: Any = None
    old_value: Any = None
    author_phid: str | None = None
    project_id: int | None = None
    id: int | None = None
    date_created: int | None = None
    _finalized: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if self._finalized:
            raise UsageError(
                f"Transaction {self.id} has been saved and can not be modified"
            )
        object.__setattr__(self, name, value)

    @classmethod
    def make(cls, transaction_type: str, new_value: Any) -> ProjectTransaction:
        """Build a transaction of the given type with a requested new value."""
        return cls(transaction_type=transaction_type, new_value=new_value)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> None:
        object.__setattr__(self, "_finalized", True)


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FeedStory:
    """A published change event, as stored in the feed."""

    id: int
    chronological_key: int
    story_type: str
    story_data: dict[str, Any]
    author_phid: str | None
    epoch: int
    related_phids: tuple[str, ...]
