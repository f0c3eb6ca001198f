"""Shared test fixtures for project-editor."""

import pytest

from project_editor import (
    Project,
    ProjectStore,
    ProjectTransaction,
    TransactionType,
    User,
)


@pytest.fixture
def store():
    """Create an in-memory store for testing."""
    with ProjectStore(":memory:") as st:
        yield st


@pytest.fixture
def alice():
    return User("PHID-USER-alice", "alice")


@pytest.fixture
def bob():
    return User("PHID-USER-bob", "bob")


@pytest.fixture
def carol():
    return User("PHID-USER-carol", "carol")


@pytest.fixture
def project(store, alice):
    """A saved project named 'Alpha', created by alice."""
    p = Project()
    store.apply(p, alice, [ProjectTransaction.make(TransactionType.NAME, "Alpha")])
    return p
