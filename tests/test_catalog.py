"""Tests for ToolCatalog and manifest loading."""

import json

import pytest

from toolgate.credentials.fields import AuthRequirement
from toolgate.tools.builtin.calculator import CalculatorTool
from toolgate.tools.builtin.wolfram import WolframAlphaTool, wolfram_function
from toolgate.tools.catalog import ToolCatalog, ToolRecord, import_constructor


class TestCatalog:
    def test_builtin_catalog(self, catalog):
        assert catalog.keys() == ["calculator", "wolfram", "google", "brave"]
        assert not catalog.get("calculator").requires_auth
        assert catalog.get("wolfram").constructor is WolframAlphaTool
        assert catalog.get("wolfram").function_constructor is wolfram_function
        assert catalog.get("calculator").function_constructor is None
        google = catalog.get("google")
        assert [str(g) for g in google.auth] == [
            "GOOGLE_CSE_ID",
            "GOOGLE_API_KEY||GOOGLE_SEARCH_API_KEY",
        ]

    def test_lookup(self, catalog):
        assert "wolfram" in catalog
        assert "nope" not in catalog
        assert catalog.get("nope") is None
        assert len(catalog) == 4
        assert [r.plugin_key for r in catalog] == catalog.keys()

    def test_duplicate_key_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            ToolCatalog([ToolRecord("a", CalculatorTool), ToolRecord("a", CalculatorTool)])

    def test_blank_key_rejected(self):
        with pytest.raises(ValueError):
            ToolCatalog([ToolRecord("", CalculatorTool)])

    def test_records_read_only(self, catalog):
        with pytest.raises(Exception):
            catalog.get("calculator").plugin_key = "other"  # type: ignore


class TestManifest:
    def _write(self, tmp_path, entries):
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps(entries))
        return path

    def test_load(self, tmp_path):
        path = self._write(
            tmp_path,
            [
                {
                    "pluginKey": "calc",
                    "class": "toolgate.tools.builtin.calculator:CalculatorTool",
                    "authConfig": [{"authField": "A||B"}],
                    "config": {"precision": 2},
                    "parameters": [{"name": "expression", "description": "Expr"}],
                }
            ],
        )
        catalog = ToolCatalog.from_manifest(path)
        record = catalog.get("calc")
        assert record.constructor is CalculatorTool
        assert record.auth == AuthRequirement.of("A||B")
        assert record.config == {"precision": 2}
        assert record.name == "calc"
        assert record.spec.parameters[0].type == "string"

    def test_broken_entries_skipped(self, tmp_path, caplog):
        path = self._write(
            tmp_path,
            [
                {"pluginKey": "ghost", "class": "toolgate.does_not_exist:Nope"},
                {"pluginKey": "noclass"},
                {"pluginKey": "calc", "class": "toolgate.tools.builtin.calculator:CalculatorTool"},
            ],
        )
        catalog = ToolCatalog.from_manifest(path)
        assert catalog.keys() == ["calc"]
        assert "ghost" in caplog.text

    def test_malformed_entries_skipped(self, tmp_path, caplog):
        path = self._write(
            tmp_path,
            [
                "calculator",
                None,
                {
                    "pluginKey": "badauth",
                    "class": "toolgate.tools.builtin.calculator:CalculatorTool",
                    "authConfig": "KEY",
                },
                {"pluginKey": "calc", "class": "toolgate.tools.builtin.calculator:CalculatorTool"},
            ],
        )
        catalog = ToolCatalog.from_manifest(path)
        assert catalog.keys() == ["calc"]
        assert "badauth" in caplog.text

    def test_function_class(self, tmp_path):
        path = self._write(
            tmp_path,
            [
                {
                    "pluginKey": "wolfram",
                    "class": "toolgate.tools.builtin.wolfram:WolframAlphaTool",
                    "functionClass": "toolgate.tools.builtin.wolfram:wolfram_function",
                }
            ],
        )
        record = ToolCatalog.from_manifest(path).get("wolfram")
        assert record.constructor_for(functions=False) is WolframAlphaTool
        assert record.constructor_for(functions=True) is wolfram_function

    def test_constructor_for_falls_back(self):
        record = ToolRecord("calc", CalculatorTool)
        assert record.constructor_for(functions=True) is CalculatorTool

    def test_manifest_must_be_list(self, tmp_path):
        path = self._write(tmp_path, {"pluginKey": "calc"})
        with pytest.raises(ValueError):
            ToolCatalog.from_manifest(path)

    def test_import_constructor_format(self):
        with pytest.raises(ValueError):
            import_constructor("toolgate.tools.builtin.calculator.CalculatorTool")
        with pytest.raises(ValueError):
            import_constructor("toolgate.tools.builtin.calculator:_CONSTANTS")
