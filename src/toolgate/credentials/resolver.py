"""
Credential Resolver — env first, then the user's store.

For one field group:
  1. Environment tier: aliases in declared order, first non-empty wins.
     Pure dict read. A hit here means the store is never touched.
  2. Store tier: same alias order against ``CredentialStore.get``.
  3. Otherwise the credential is absent (``None``), a normal outcome.

Store errors propagate as ``CredentialStoreError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from toolgate.core.metrics import metrics
from toolgate.credentials.environment import Environment
from toolgate.credentials.errors import CredentialUnavailable
from toolgate.credentials.fields import AuthFieldGroup, AuthRequirement, FieldLike
from toolgate.credentials.store import CredentialStore

logger = logging.getLogger(__name__)

TIER_ENV = "env"
TIER_STORE = "store"


@dataclass(frozen=True)
class ResolvedCredential:
    """One resolved field group. Lives for a single call, never persisted."""

    group: AuthFieldGroup
    field: str  # alias that matched
    value: str
    tier: str

    def __repr__(self) -> str:
        # keep the value out of tracebacks and logs
        return (
            f"ResolvedCredential(group={self.group}, field={self.field!r}, "
            f"tier={self.tier!r})"
        )


class CredentialResolver:
    """Resolves auth field groups for a user."""

    def __init__(self, environment: Environment, store: CredentialStore):
        self.environment = environment
        self.store = store

    async def resolve(
        self, user_id: str, field: FieldLike
    ) -> ResolvedCredential | None:
        group = AuthFieldGroup.parse(field)

        hit = self.environment.first(group)
        if hit:
            alias, value = hit
            self._record(user_id, alias, TIER_ENV)
            return ResolvedCredential(group, alias, value, TIER_ENV)

        for alias in group:
            value = await self.store.get(user_id, alias)
            if value:
                self._record(user_id, alias, TIER_STORE)
                return ResolvedCredential(group, alias, value, TIER_STORE)

        metrics.inc("credentials.missing")
        logger.debug(
            "No credential for %s", group, extra={"user_id": user_id, "field": str(group)}
        )
        return None

    async def resolve_all(
        self,
        user_id: str,
        requirement: AuthRequirement,
        plugin_key: str = "",
    ) -> dict[str, str]:
        """Resolve every group, keyed by primary field name.

        Groups are resolved in order. Raises ``CredentialUnavailable`` naming
        every group that came back empty.
        """
        values: dict[str, str] = {}
        missing: list[AuthFieldGroup] = []
        for group in requirement:
            resolved = await self.resolve(user_id, group)
            if resolved is None:
                missing.append(group)
            else:
                values[group.primary] = resolved.value
        if missing:
            raise CredentialUnavailable(plugin_key, missing, user_id=user_id)
        return values

    async def is_satisfied(self, user_id: str, requirement: AuthRequirement) -> bool:
        """True when every group resolves. Stops at the first miss."""
        for group in requirement:
            if await self.resolve(user_id, group) is None:
                return False
        return True

    def _record(self, user_id: str, alias: str, tier: str) -> None:
        metrics.inc("credentials.resolved", labels={"tier": tier})
        logger.debug(
            "Resolved %s from %s",
            alias,
            tier,
            extra={"user_id": user_id, "field": alias, "tier": tier},
        )
