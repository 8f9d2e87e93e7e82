"""
Toolkit — startup wiring.

Builds the credential store, catalog, resolver, validator and loader from
config and hands them out as one object:

    toolkit = await create_toolkit()
    valid = await toolkit.validator.validate(user_id, ["calculator", "wolfram"])
    initializers = toolkit.loader.load(user_id, valid)
    ...
    await toolkit.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import toolgate.core.config as config_module
from toolgate.core.config import ToolgateConfig
from toolgate.core.crypto import SecretCipher
from toolgate.credentials.environment import Environment
from toolgate.credentials.resolver import CredentialResolver
from toolgate.credentials.store import (
    CredentialStore,
    InMemoryCredentialStore,
    SQLiteCredentialStore,
)
from toolgate.tools.builtin import default_catalog
from toolgate.tools.catalog import ToolCatalog
from toolgate.tools.loader import ToolLoader
from toolgate.tools.validator import ToolValidator

logger = logging.getLogger(__name__)


@dataclass
class Toolkit:
    store: CredentialStore
    catalog: ToolCatalog
    resolver: CredentialResolver
    validator: ToolValidator
    loader: ToolLoader
    # Only stores built by create_toolkit are closed here.
    owns_store: bool = field(default=False, repr=False)

    async def close(self) -> None:
        if self.owns_store and isinstance(self.store, SQLiteCredentialStore):
            await self.store.close()


async def create_store(cfg: ToolgateConfig) -> CredentialStore:
    if cfg.store.backend == "memory":
        return InMemoryCredentialStore()
    if cfg.store.backend != "sqlite":
        raise ValueError(f"Unknown credential store backend: {cfg.store.backend!r}")
    store = SQLiteCredentialStore(
        cfg.store.db_path, SecretCipher.from_secret(cfg.store.secret)
    )
    await store.start()
    return store


def create_catalog(cfg: ToolgateConfig) -> ToolCatalog:
    if cfg.catalog.manifest_path:
        return ToolCatalog.from_manifest(cfg.catalog.manifest_path)
    return default_catalog()


async def create_toolkit(
    cfg: ToolgateConfig | None = None,
    *,
    environment: Environment | None = None,
    store: CredentialStore | None = None,
    catalog: ToolCatalog | None = None,
) -> Toolkit:
    """Wire everything together. Explicit arguments win over config."""
    cfg = cfg or config_module.config
    if catalog is None:
        catalog = create_catalog(cfg)
    owns_store = store is None
    if store is None:
        store = await create_store(cfg)
    if environment is None:
        environment = Environment.from_os()

    resolver = CredentialResolver(environment, store)
    toolkit = Toolkit(
        store=store,
        catalog=catalog,
        resolver=resolver,
        validator=ToolValidator(
            catalog, resolver, concurrency=cfg.loader.validate_concurrency
        ),
        loader=ToolLoader(catalog, resolver),
        owns_store=owns_store,
    )
    logger.info(f"Toolkit ready: {len(catalog)} tools, store={store!r}")
    return toolkit
