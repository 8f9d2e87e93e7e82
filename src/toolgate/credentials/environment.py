"""
Environment tier — process-wide credentials set by the operator.

A read-only snapshot of ``os.environ`` (after ``.env`` is loaded) taken once
and injected into the resolver. Lookups are plain dict reads and never
suspend. Tests build one from a dict instead of mutating ``os.environ``.
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Iterable, Mapping

from toolgate.credentials.fields import AuthFieldGroup


class Environment:
    """Immutable key/value view used as the first credential tier."""

    def __init__(self, values: Mapping[str, str] | None = None):
        self._values = MappingProxyType(dict(values or {}))

    @classmethod
    def from_os(cls, keys: Iterable[str] | None = None) -> Environment:
        """Snapshot the process environment, optionally limited to ``keys``."""
        if keys is None:
            return cls(os.environ)
        return cls({k: os.environ[k] for k in keys if k in os.environ})

    def get(self, name: str) -> str | None:
        value = self._values.get(name)
        return value if value else None

    def first(self, group: AuthFieldGroup) -> tuple[str, str] | None:
        """Return ``(alias, value)`` for the first alias set to a non-empty value."""
        for alias in group:
            value = self.get(alias)
            if value:
                return alias, value
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __repr__(self) -> str:
        return f"<Environment keys={len(self._values)}>"
