"""Shared fixtures for flow tests."""

import pytest

from finwise.audit import AuditLogger
from finwise.services.storage import LocalStore
from finwise.session import SessionContext

from fakes import FakeIdentityProvider, InMemoryAuditStorage, InMemoryProfileStore


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def profile_store():
    return InMemoryProfileStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(tmp_path / "local_store.json")


@pytest.fixture
def session_context(local_store):
    return SessionContext(local_store)
