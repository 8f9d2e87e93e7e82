"""Tests for the credential stores — in-memory and SQLite."""

from __future__ import annotations

import aiosqlite
import pytest
import pytest_asyncio

from toolgate.core.crypto import SecretCipher
from toolgate.credentials.errors import CredentialStoreError
from toolgate.credentials.fields import AuthFieldGroup
from toolgate.credentials.store import InMemoryCredentialStore, SQLiteCredentialStore

USER = "user-1"


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def any_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryCredentialStore()
        return
    s = SQLiteCredentialStore(tmp_path / "creds.db", SecretCipher.from_secret("test-secret"))
    await s.start()
    yield s
    await s.close()


class TestStoreContract:
    @pytest.mark.asyncio
    async def test_get_missing(self, any_store):
        assert await any_store.get(USER, "KEY") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, any_store):
        await any_store.set(USER, "WOLFRAM_APP_ID", "wolfram", "abc")
        assert await any_store.get(USER, "WOLFRAM_APP_ID") == "abc"

    @pytest.mark.asyncio
    async def test_overwrite(self, any_store):
        await any_store.set(USER, "KEY", "p", "old")
        await any_store.set(USER, "KEY", "p", "new")
        assert await any_store.get(USER, "KEY") == "new"

    @pytest.mark.asyncio
    async def test_fan_out_to_aliases(self, any_store):
        await any_store.set(USER, "A||B||C", "p", "v")
        for alias in "ABC":
            assert await any_store.get(USER, alias) == "v"
        assert await any_store.list_fields(USER) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_fan_out_accepts_group(self, any_store):
        await any_store.set(USER, AuthFieldGroup(("X", "Y")), "p", "v")
        assert await any_store.get(USER, "Y") == "v"

    @pytest.mark.asyncio
    async def test_empty_value_rejected(self, any_store):
        with pytest.raises(ValueError):
            await any_store.set(USER, "KEY", "p", "")

    @pytest.mark.asyncio
    async def test_delete_removes_every_alias(self, any_store):
        await any_store.set(USER, "A||B", "p", "v")
        await any_store.delete(USER, "A||B")
        assert await any_store.get(USER, "A") is None
        assert await any_store.get(USER, "B") is None

    @pytest.mark.asyncio
    async def test_users_isolated(self, any_store):
        await any_store.set(USER, "KEY", "p", "mine")
        await any_store.set("user-2", "KEY", "p", "theirs")
        assert await any_store.get(USER, "KEY") == "mine"
        assert await any_store.get("user-2", "KEY") == "theirs"

    @pytest.mark.asyncio
    async def test_delete_plugin(self, any_store):
        await any_store.set(USER, "GOOGLE_CSE_ID", "google", "cse")
        await any_store.set(USER, "GOOGLE_API_KEY||GOOGLE_SEARCH_API_KEY", "google", "k")
        await any_store.set(USER, "WOLFRAM_APP_ID", "wolfram", "w")

        removed = await any_store.delete_plugin(USER, "google")

        assert removed == 3
        assert await any_store.list_fields(USER) == ["WOLFRAM_APP_ID"]

    @pytest.mark.asyncio
    async def test_delete_user(self, any_store):
        await any_store.set(USER, "A||B", "p", "v")
        await any_store.set("user-2", "A", "p", "v")

        assert await any_store.delete_user(USER) == 2
        assert await any_store.list_fields(USER) == []
        assert await any_store.list_fields("user-2") == ["A"]


class TestSQLiteStore:
    @pytest.mark.asyncio
    async def test_values_encrypted_at_rest(self, tmp_path):
        db_path = tmp_path / "creds.db"
        store = SQLiteCredentialStore(db_path, SecretCipher.from_secret("s3cret"))
        await store.start()
        try:
            await store.set(USER, "KEY", "p", "sk-plaintext")
        finally:
            await store.close()

        async with aiosqlite.connect(db_path) as db:
            async with db.execute("SELECT value FROM plugin_auth") as cursor:
                (raw,) = await cursor.fetchone()
        assert raw != "sk-plaintext"
        assert raw.startswith("gAAAAA")

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path):
        db_path = tmp_path / "creds.db"
        cipher = SecretCipher.from_secret("s3cret")

        first = SQLiteCredentialStore(db_path, cipher)
        await first.start()
        await first.set(USER, "KEY", "p", "v")
        await first.close()

        second = SQLiteCredentialStore(db_path, cipher)
        await second.start()
        try:
            assert await second.get(USER, "KEY") == "v"
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_wrong_key_is_a_store_error(self, tmp_path):
        db_path = tmp_path / "creds.db"

        writer = SQLiteCredentialStore(db_path, SecretCipher.from_secret("one"))
        await writer.start()
        await writer.set(USER, "KEY", "p", "v")
        await writer.close()

        reader = SQLiteCredentialStore(db_path, SecretCipher.from_secret("two"))
        await reader.start()
        try:
            with pytest.raises(CredentialStoreError):
                await reader.get(USER, "KEY")
        finally:
            await reader.close()

    @pytest.mark.asyncio
    async def test_not_started(self, tmp_path):
        store = SQLiteCredentialStore(tmp_path / "creds.db")
        with pytest.raises(CredentialStoreError):
            await store.get(USER, "KEY")


class TestInMemoryStore:
    def test_repr(self):
        assert "entries=0" in repr(InMemoryCredentialStore())
