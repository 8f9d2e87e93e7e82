"""Credentials — field groups, environment tier, store, resolver."""

from toolgate.credentials.environment import Environment
from toolgate.credentials.errors import CredentialStoreError, CredentialUnavailable
from toolgate.credentials.fields import AuthFieldGroup, AuthRequirement
from toolgate.credentials.resolver import CredentialResolver, ResolvedCredential
from toolgate.credentials.store import (
    CredentialStore,
    InMemoryCredentialStore,
    SQLiteCredentialStore,
)

__all__ = [
    "AuthFieldGroup",
    "AuthRequirement",
    "CredentialResolver",
    "CredentialStore",
    "CredentialStoreError",
    "CredentialUnavailable",
    "Environment",
    "InMemoryCredentialStore",
    "ResolvedCredential",
    "SQLiteCredentialStore",
]
