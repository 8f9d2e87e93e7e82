"""
Credential Store — per-user secrets keyed by (user_id, field).

Two backends:
  - ``InMemoryCredentialStore``: dict-backed, for tests and local runs.
  - ``SQLiteCredentialStore``: aiosqlite, values Fernet-encrypted at rest.

Writes take a field group (or a ``||``-joined string) and fan out to every
alias, so a later read by any alias succeeds. Reads are by single field.
Backend failures surface as ``CredentialStoreError``, never as a missing
value.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path

import aiosqlite

from toolgate.core.crypto import DecryptionError, SecretCipher
from toolgate.credentials.errors import CredentialStoreError
from toolgate.credentials.fields import AuthFieldGroup, FieldLike

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Interface the resolver and the credential-management flow rely on."""

    @abstractmethod
    async def get(self, user_id: str, field: str) -> str | None:
        """Return the decrypted value for one field, or None."""
        ...

    async def set(
        self, user_id: str, field: FieldLike, plugin_key: str, value: str
    ) -> None:
        """Store ``value`` under every alias of ``field`` for ``user_id``."""
        if not value:
            raise ValueError("Refusing to store an empty credential")
        group = AuthFieldGroup.parse(field)
        await self._put(user_id, group.aliases, plugin_key, value)
        logger.info(
            "Stored credential %s for plugin %s",
            group,
            plugin_key,
            extra={"user_id": user_id, "plugin_key": plugin_key},
        )

    async def delete(self, user_id: str, field: FieldLike) -> None:
        """Remove every alias of ``field`` for ``user_id``."""
        group = AuthFieldGroup.parse(field)
        await self._remove(user_id, group.aliases)

    @abstractmethod
    async def delete_plugin(self, user_id: str, plugin_key: str) -> int:
        """Remove all fields written for one plugin. Returns rows removed."""
        ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> int:
        """Remove everything stored for a user (account deletion)."""
        ...

    @abstractmethod
    async def list_fields(self, user_id: str) -> list[str]:
        """Field names the user has a value for, sorted."""
        ...

    @abstractmethod
    async def _put(
        self, user_id: str, fields: tuple[str, ...], plugin_key: str, value: str
    ) -> None: ...

    @abstractmethod
    async def _remove(self, user_id: str, fields: tuple[str, ...]) -> None: ...


class InMemoryCredentialStore(CredentialStore):
    """In-memory store: (user_id, field) -> (plugin_key, value)."""

    def __init__(self):
        self._values: dict[tuple[str, str], tuple[str, str]] = {}

    async def get(self, user_id: str, field: str) -> str | None:
        entry = self._values.get((user_id, field))
        return entry[1] if entry else None

    async def _put(
        self, user_id: str, fields: tuple[str, ...], plugin_key: str, value: str
    ) -> None:
        for name in fields:
            self._values[(user_id, name)] = (plugin_key, value)

    async def _remove(self, user_id: str, fields: tuple[str, ...]) -> None:
        for name in fields:
            self._values.pop((user_id, name), None)

    async def delete_plugin(self, user_id: str, plugin_key: str) -> int:
        doomed = [
            key
            for key, (owner, _) in self._values.items()
            if key[0] == user_id and owner == plugin_key
        ]
        for key in doomed:
            del self._values[key]
        return len(doomed)

    async def delete_user(self, user_id: str) -> int:
        doomed = [key for key in self._values if key[0] == user_id]
        for key in doomed:
            del self._values[key]
        return len(doomed)

    async def list_fields(self, user_id: str) -> list[str]:
        return sorted(name for uid, name in self._values if uid == user_id)

    def __repr__(self) -> str:
        return f"<InMemoryCredentialStore entries={len(self._values)}>"


class SQLiteCredentialStore(CredentialStore):
    """Encrypted credential rows in a local SQLite file."""

    def __init__(self, db_path: str | Path, cipher: SecretCipher | None = None):
        self.db_path = Path(db_path)
        self.cipher = cipher or SecretCipher()
        self._db: aiosqlite.Connection | None = None

    async def start(self) -> None:
        """Open the database and create the table."""
        try:
            self._db = await aiosqlite.connect(str(self.db_path))
            await self._db.execute("""
                CREATE TABLE IF NOT EXISTS plugin_auth (
                    user_id TEXT NOT NULL,
                    field TEXT NOT NULL,
                    plugin_key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL,
                    PRIMARY KEY (user_id, field)
                )
            """)
            await self._db.execute(
                "CREATE INDEX IF NOT EXISTS idx_plugin_auth_plugin "
                "ON plugin_auth (user_id, plugin_key)"
            )
            await self._db.commit()
        except aiosqlite.Error as e:
            raise CredentialStoreError(
                f"Cannot open credential store at {self.db_path}"
            ) from e
        logger.info(
            "Credential store ready: %s (encrypted=%s)",
            self.db_path,
            self.cipher.enabled,
        )

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise CredentialStoreError("Credential store is not started")
        return self._db

    async def get(self, user_id: str, field: str) -> str | None:
        db = self._conn()
        try:
            async with db.execute(
                "SELECT value FROM plugin_auth WHERE user_id = ? AND field = ?",
                (user_id, field),
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise CredentialStoreError(f"Failed to read credential {field}") from e

        if not row:
            return None
        try:
            return self.cipher.decrypt(row[0])
        except DecryptionError as e:
            raise CredentialStoreError(
                f"Stored credential {field} could not be decrypted"
            ) from e

    async def _put(
        self, user_id: str, fields: tuple[str, ...], plugin_key: str, value: str
    ) -> None:
        db = self._conn()
        now = time.time()
        rows = [
            (user_id, name, plugin_key, self.cipher.encrypt(value), now)
            for name in fields
        ]
        try:
            await db.executemany(
                """
                INSERT INTO plugin_auth (user_id, field, plugin_key, value, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id, field) DO UPDATE SET
                    plugin_key = excluded.plugin_key,
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            raise CredentialStoreError("Failed to write credential") from e

    async def _remove(self, user_id: str, fields: tuple[str, ...]) -> None:
        db = self._conn()
        try:
            await db.executemany(
                "DELETE FROM plugin_auth WHERE user_id = ? AND field = ?",
                [(user_id, name) for name in fields],
            )
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            raise CredentialStoreError("Failed to delete credential") from e

    async def delete_plugin(self, user_id: str, plugin_key: str) -> int:
        return await self._delete_where(
            "user_id = ? AND plugin_key = ?", (user_id, plugin_key)
        )

    async def delete_user(self, user_id: str) -> int:
        return await self._delete_where("user_id = ?", (user_id,))

    async def _delete_where(self, clause: str, params: tuple) -> int:
        db = self._conn()
        try:
            cursor = await db.execute(f"DELETE FROM plugin_auth WHERE {clause}", params)
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            raise CredentialStoreError("Failed to delete credentials") from e
        return cursor.rowcount

    async def list_fields(self, user_id: str) -> list[str]:
        db = self._conn()
        try:
            async with db.execute(
                "SELECT field FROM plugin_auth WHERE user_id = ? ORDER BY field",
                (user_id,),
            ) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise CredentialStoreError("Failed to list credentials") from e
        return [row[0] for row in rows]
