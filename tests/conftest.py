"""
Shared fixtures.

Everything runs against an in-memory store and an injected Environment
snapshot — no real process env, no files unless a test asks for tmp_path.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from toolgate.core.metrics import metrics
from toolgate.credentials.environment import Environment
from toolgate.credentials.errors import CredentialStoreError
from toolgate.credentials.resolver import CredentialResolver
from toolgate.credentials.store import InMemoryCredentialStore
from toolgate.tools.builtin import default_catalog
from toolgate.tools.loader import ToolLoader
from toolgate.tools.validator import ToolValidator

USER = "user-1"


class BrokenStore(InMemoryCredentialStore):
    """Store whose reads always fail, as if the database were down."""

    async def get(self, user_id: str, field: str) -> str | None:
        raise CredentialStoreError("database is locked")


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def env():
    """Empty environment tier. Tests that need values build their own."""
    return Environment({})


@pytest.fixture
def store():
    """In-memory store with ``get`` wrapped in a spy."""
    s = InMemoryCredentialStore()
    s.get = AsyncMock(wraps=s.get)
    return s


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def make_resolver(store):
    def _make(values: dict[str, str] | None = None) -> CredentialResolver:
        return CredentialResolver(Environment(values or {}), store)

    return _make


@pytest.fixture
def resolver(make_resolver):
    return make_resolver()


@pytest.fixture
def validator(catalog, resolver):
    return ToolValidator(catalog, resolver)


@pytest.fixture
def loader(catalog, resolver):
    return ToolLoader(catalog, resolver)
