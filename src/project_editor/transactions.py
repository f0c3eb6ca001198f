"""Per-type transaction handlers for project-editor.

Each transaction type is handled by one :class:`TransactionHandler` that
knows how to read the current value from a project, decide whether a
requested value changes anything, and apply it. The editor looks handlers
up in :data:`TRANSACTION_HANDLERS`; new types are added with
:func:`register_transaction_handler`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from project_editor.edges import PROJECT_MEMBER
from project_editor.exceptions import ValidationError
from project_editor.models import Project, ProjectTransaction, TransactionType
from project_editor.slug import normalize_slug
from project_editor.validator import validate_name

if TYPE_CHECKING:
    from project_editor.editor import ProjectEditor


class TransactionHandler:
    """Base class for transaction type handlers."""

    transaction_type: str

    def compute_old_value(
        self, editor: ProjectEditor, project: Project, xaction: ProjectTransaction
    ) -> Any:
        raise NotImplementedError

    def has_effect(self, old_value: Any, new_value: Any) -> bool:
        return old_value != new_value

    def apply_effect(
        self, editor: ProjectEditor, project: Project, xaction: ProjectTransaction
    ) -> None:
        raise NotImplementedError


class NameHandler(TransactionHandler):
    transaction_type = TransactionType.NAME.value

    def compute_old_value(self, editor, project, xaction):
        return project.name

    def apply_effect(self, editor, project, xaction):
        if not isinstance(xaction.new_value, str):
            raise ValidationError(
                "Project name must be a string, not "
                f"{type(xaction.new_value).__name__}."
            )
        project.name = xaction.new_value
        project.slug = normalize_slug(xaction.new_value)
        validate_name(editor.conn, project)


class StatusHandler(TransactionHandler):
    transaction_type = TransactionType.STATUS.value

    def compute_old_value(self, editor, project, xaction):
        return project.status

    def apply_effect(self, editor, project, xaction):
        project.status = xaction.new_value


class MembersHandler(TransactionHandler):
    """Membership changes, stored as ``project.member`` edges.

    Both values are sorted lists of PHIDs so that comparing them ignores
    the order and duplication of the requested list.
    """

    transaction_type = TransactionType.MEMBERS.value

    def compute_old_value(self, editor, project, xaction):
        member_phids = editor.edges.list_edges(project.phid, PROJECT_MEMBER)
        project.attach_member_phids(member_phids)

        xaction.new_value = normalize_member_phids(xaction.new_value)
        return sorted(member_phids)

    def apply_effect(self, editor, project, xaction):
        old = set(xaction.old_value)
        new = set(xaction.new_value)
        editor.edge_diff.add_edges(new - old)
        editor.edge_diff.remove_edges(old - new)


def normalize_member_phids(phids: Any) -> list[str]:
    """Drop empty entries and duplicates, and sort."""
    return sorted({phid for phid in phids or () if phid})


TRANSACTION_HANDLERS: dict[str, TransactionHandler] = {}


def register_transaction_handler(handler: TransactionHandler) -> TransactionHandler:
    """Make ``handler`` the handler for its ``transaction_type``."""
    TRANSACTION_HANDLERS[handler.transaction_type] = handler
    return handler


for _handler in (NameHandler(), StatusHandler(), MembersHandler()):
    register_transaction_handler(_handler)
