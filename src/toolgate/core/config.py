"""
Toolgate Configuration — single source of truth for all settings.

Reads from environment variables with sensible defaults.
No config files, no YAML. Just env vars (and an optional .env).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass(frozen=True)
class StoreConfig:
    """Credential store settings."""

    backend: str = "sqlite"  # sqlite | memory
    db_path: str = "toolgate_credentials.db"
    # Fernet key material. Empty means values are stored in plaintext.
    secret: str = ""

    @classmethod
    def from_env(cls) -> StoreConfig:
        return cls(
            backend=os.getenv("TOOLGATE_STORE", "sqlite").lower(),
            db_path=os.getenv("TOOLGATE_DB_PATH", "toolgate_credentials.db"),
            secret=os.getenv("TOOLGATE_CREDS_SECRET", ""),
        )


@dataclass(frozen=True)
class CatalogConfig:
    """Where tool records come from."""

    # Path to a manifest.json. Empty means the built-in catalog.
    manifest_path: str = ""

    @classmethod
    def from_env(cls) -> CatalogConfig:
        return cls(manifest_path=os.getenv("TOOLGATE_MANIFEST_PATH", ""))


@dataclass(frozen=True)
class LoaderConfig:
    """Validation / loading settings."""

    validate_concurrency: int = 8

    @classmethod
    def from_env(cls) -> LoaderConfig:
        return cls(
            validate_concurrency=max(
                1, _int_env("TOOLGATE_VALIDATE_CONCURRENCY", 8)
            ),
        )


@dataclass(frozen=True)
class ToolgateConfig:
    """Top-level config composed of all sub-configs."""

    store: StoreConfig = field(default_factory=StoreConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)

    @classmethod
    def from_env(cls) -> ToolgateConfig:
        return cls(
            store=StoreConfig.from_env(),
            catalog=CatalogConfig.from_env(),
            loader=LoaderConfig.from_env(),
        )


# Singleton — import this wherever you need config
config = ToolgateConfig.from_env()
