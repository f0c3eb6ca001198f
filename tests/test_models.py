"""Tests for model behaviour."""

import pytest

from project_editor import (
    Project,
    ProjectStatus,
    ProjectTransaction,
    TransactionType,
    UsageError,
)


class TestProject:

    def test_defaults(self):
        p = Project()
        assert p.is_new
        assert p.status == ProjectStatus.ACTIVE
        assert p.slug is None

    def test_members_must_be_attached(self):
        p = Project(name="Alpha")
        assert not p.has_member_phids()
        with pytest.raises(UsageError):
            p.get_member_phids()

    def test_attached_members_are_copied(self):
        p = Project(name="Alpha")
        phids = ["PHID-USER-a"]
        p.attach_member_phids(phids)
        phids.append("PHID-USER-b")
        returned = p.get_member_phids()
        returned.append("PHID-USER-c")
        assert p.get_member_phids() == ["PHID-USER-a"]


class TestProjectTransaction:

    def test_make(self):
        xaction = ProjectTransaction.make(TransactionType.STATUS, "archived")
        assert xaction.transaction_type == "status"
        assert xaction.new_value == "archived"
        assert xaction.old_value is None
        assert not xaction.is_finalized

    def test_finalized_transaction_is_read_only(self):
        xaction = ProjectTransaction.make(TransactionType.NAME, "Alpha")
        xaction.old_value = ""
        xaction.finalize()
        assert xaction.is_finalized
        with pytest.raises(UsageError):
            xaction.new_value = "Beta"
        assert xaction.new_value == "Alpha"
