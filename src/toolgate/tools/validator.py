"""
Tool Validator — which of the requested tools can this user use right now?

A tool is valid when it is in the catalog and every field group in its auth
requirement resolves. Unknown keys and unconfigured tools are dropped, not
raised. Checks run concurrently; the result keeps the input order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

from toolgate.core.metrics import metrics
from toolgate.credentials.resolver import CredentialResolver
from toolgate.tools.catalog import ToolCatalog

logger = logging.getLogger(__name__)


class ToolValidator:
    def __init__(
        self,
        catalog: ToolCatalog,
        resolver: CredentialResolver,
        concurrency: int = 8,
    ):
        self.catalog = catalog
        self.resolver = resolver
        self.concurrency = max(1, concurrency)

    async def validate(self, user_id: str, requested: Sequence[str]) -> list[str]:
        """Return the usable subset of ``requested``, in input order.

        Duplicates in the input stay duplicated. ``CredentialStoreError``
        propagates; a broken store is not the same as a missing key.
        """
        if not requested:
            return []

        started = time.monotonic()
        semaphore = asyncio.Semaphore(self.concurrency)

        async def check(plugin_key: str) -> bool:
            async with semaphore:
                return await self.is_valid(user_id, plugin_key)

        tasks = [asyncio.ensure_future(check(key)) for key in requested]
        try:
            flags = await asyncio.gather(*tasks)
        except BaseException:
            # One failed check fails the call; stop the rest before re-raising.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        valid = [key for key, ok in zip(requested, flags) if ok]

        elapsed_ms = round((time.monotonic() - started) * 1000, 1)
        metrics.observe("tools.validate.duration_ms", elapsed_ms)
        metrics.inc("tools.validated", len(valid))
        metrics.inc("tools.rejected", len(requested) - len(valid))
        logger.info(
            f"Validated {len(valid)}/{len(requested)} tools in {elapsed_ms}ms",
            extra={"user_id": user_id, "duration_ms": elapsed_ms},
        )
        return valid

    async def is_valid(self, user_id: str, plugin_key: str) -> bool:
        record = self.catalog.get(plugin_key)
        if record is None:
            logger.debug(
                f"Unknown tool {plugin_key!r}",
                extra={"user_id": user_id, "plugin_key": plugin_key},
            )
            return False
        if not record.requires_auth:
            return True

        ok = await self.resolver.is_satisfied(user_id, record.auth)
        if not ok:
            logger.warning(
                f"Tool {plugin_key!r} excluded: credentials not configured",
                extra={"user_id": user_id, "plugin_key": plugin_key},
            )
        return ok
