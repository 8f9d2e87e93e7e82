"""End-to-end tests through create_toolkit()."""

from __future__ import annotations

import json
import logging

import pytest

from toolgate.core.config import CatalogConfig, StoreConfig, ToolgateConfig
from toolgate.core.logging import StructuredFormatter, setup_logging
from toolgate.core.metrics import metrics
from toolgate.credentials.environment import Environment
from toolgate.credentials.errors import CredentialUnavailable
from toolgate.credentials.store import InMemoryCredentialStore, SQLiteCredentialStore
from toolgate.toolkit import create_toolkit
from toolgate.tools.builtin.wolfram import WolframAlphaTool
from toolgate.tools.loader import LoadOptions

USER = "user-1"


class TestToolkit:
    @pytest.mark.asyncio
    async def test_sqlite_round_trip(self, tmp_path):
        cfg = ToolgateConfig(
            store=StoreConfig(db_path=str(tmp_path / "creds.db"), secret="test-secret")
        )
        toolkit = await create_toolkit(cfg, environment=Environment({}))
        try:
            assert isinstance(toolkit.store, SQLiteCredentialStore)
            assert await toolkit.validator.validate(USER, ["calculator", "wolfram"]) == [
                "calculator"
            ]

            await toolkit.store.set(USER, "WOLFRAM_APP_ID", "wolfram", "abc")

            valid = await toolkit.validator.validate(USER, ["calculator", "wolfram"])
            assert valid == ["calculator", "wolfram"]

            initializers = toolkit.loader.load(USER, valid, LoadOptions(use_specs=True))
            wolfram = await initializers["wolfram"]()
            assert isinstance(wolfram, WolframAlphaTool)
            assert wolfram.app_id == "abc"
        finally:
            await toolkit.close()
        assert toolkit.store._db is None

    @pytest.mark.asyncio
    async def test_close_leaves_caller_store_open(self, tmp_path):
        store = SQLiteCredentialStore(tmp_path / "shared.db")
        await store.start()
        try:
            toolkit = await create_toolkit(
                ToolgateConfig(), environment=Environment({}), store=store
            )
            await toolkit.close()

            await store.set(USER, "WOLFRAM_APP_ID", "wolfram", "still-open")
            assert await store.get(USER, "WOLFRAM_APP_ID") == "still-open"
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_memory_backend(self):
        cfg = ToolgateConfig(store=StoreConfig(backend="memory"))
        toolkit = await create_toolkit(cfg, environment=Environment({}))
        assert isinstance(toolkit.store, InMemoryCredentialStore)
        with pytest.raises(CredentialUnavailable):
            await toolkit.loader.load(USER, ["brave"])["brave"]()
        await toolkit.close()

    @pytest.mark.asyncio
    async def test_unknown_backend(self):
        with pytest.raises(ValueError):
            await create_toolkit(ToolgateConfig(store=StoreConfig(backend="redis")))

    @pytest.mark.asyncio
    async def test_manifest_from_config(self, tmp_path):
        manifest = tmp_path / "tools.json"
        manifest.write_text(
            json.dumps(
                [{"pluginKey": "calc", "class": "toolgate.tools.builtin.calculator:CalculatorTool"}]
            )
        )
        cfg = ToolgateConfig(catalog=CatalogConfig(manifest_path=str(manifest)))
        toolkit = await create_toolkit(
            cfg, environment=Environment({}), store=InMemoryCredentialStore()
        )
        assert toolkit.catalog.keys() == ["calc"]

    @pytest.mark.asyncio
    async def test_metrics_recorded(self):
        toolkit = await create_toolkit(
            ToolgateConfig(store=StoreConfig(backend="memory")),
            environment=Environment({"WOLFRAM_APP_ID": "env"}),
        )
        await toolkit.validator.validate(USER, ["wolfram", "google"])
        assert metrics.counter("credentials.resolved", {"tier": "env"}) == 1
        assert metrics.counter("tools.validated") == 1
        assert metrics.counter("tools.rejected") == 1
        assert "tools.validate.duration_ms" in metrics.snapshot()["histograms"]


class TestLogging:
    def test_structured_formatter_forwards_fields(self):
        record = logging.LogRecord("toolgate", logging.INFO, __file__, 1, "hello", None, None)
        record.plugin_key = "wolfram"
        record.tier = "env"
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["msg"] == "hello"
        assert entry["plugin_key"] == "wolfram"
        assert entry["tier"] == "env"

    def test_setup_logging_json(self, monkeypatch):
        monkeypatch.setenv("TOOLGATE_LOG_FORMAT", "json")
        monkeypatch.setenv("TOOLGATE_LOG_LEVEL", "DEBUG")
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging()
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
