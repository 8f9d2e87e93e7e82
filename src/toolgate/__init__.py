"""Toolgate — per-user tool credentials and lazy tool loading."""

from toolgate.credentials import (
    AuthFieldGroup,
    AuthRequirement,
    CredentialResolver,
    CredentialStoreError,
    CredentialUnavailable,
    Environment,
)
from toolgate.toolkit import Toolkit, create_toolkit
from toolgate.tools import LoadOptions, ToolCatalog, ToolLoader, ToolValidator

__all__ = [
    "AuthFieldGroup",
    "AuthRequirement",
    "CredentialResolver",
    "CredentialStoreError",
    "CredentialUnavailable",
    "Environment",
    "LoadOptions",
    "ToolCatalog",
    "ToolLoader",
    "ToolValidator",
    "Toolkit",
    "create_toolkit",
]
