"""
Tool Catalog — the immutable list of tools a user can ask for.

Built once at startup, either in code (``ToolCatalog([...])``) or from a
``manifest.json``:

    [
      {
        "pluginKey": "wolfram",
        "name": "Wolfram",
        "description": "Computational answers",
        "class": "toolgate.tools.builtin.wolfram:WolframAlphaTool",
        "functionClass": "toolgate.tools.builtin.wolfram:wolfram_function",
        "authConfig": [{"authField": "WOLFRAM_APP_ID", "label": "App ID"}],
        "config": {}
      }
    ]

Records never change after construction; components hold the catalog by
reference.
"""

from __future__ import annotations

import importlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

from toolgate.credentials.fields import AuthRequirement
from toolgate.tools.base import ToolParam, ToolSpec

log = logging.getLogger("toolgate.catalog")

ToolConstructor = Callable[..., Any]


@dataclass(frozen=True)
class ToolRecord:
    """One catalog entry."""

    plugin_key: str
    constructor: ToolConstructor
    auth: AuthRequirement = field(default_factory=AuthRequirement)
    name: str = ""
    description: str = ""
    # Static constructor input merged under the resolved credentials.
    config: Mapping[str, Any] = field(default_factory=dict)
    spec: ToolSpec | None = None
    # Function-calling variant, used when a load asks for functions.
    function_constructor: ToolConstructor | None = None

    @property
    def requires_auth(self) -> bool:
        return self.auth.required

    def constructor_for(self, functions: bool = False) -> ToolConstructor:
        if functions and self.function_constructor is not None:
            return self.function_constructor
        return self.constructor


class ToolCatalog:
    """Read-only plugin_key -> ToolRecord map."""

    def __init__(self, records: Iterable[ToolRecord] = ()):
        by_key: dict[str, ToolRecord] = {}
        for record in records:
            if not record.plugin_key:
                raise ValueError(f"Tool record must have a plugin key: {record}")
            if record.plugin_key in by_key:
                raise ValueError(f"Duplicate plugin key: {record.plugin_key}")
            by_key[record.plugin_key] = record
        self._records = MappingProxyType(by_key)

    def get(self, plugin_key: str) -> ToolRecord | None:
        return self._records.get(plugin_key)

    def keys(self) -> list[str]:
        return list(self._records.keys())

    def records(self) -> list[ToolRecord]:
        return list(self._records.values())

    def __contains__(self, plugin_key: object) -> bool:
        return plugin_key in self._records

    def __iter__(self) -> Iterator[ToolRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"<ToolCatalog tools={self.keys()}>"

    @classmethod
    def from_manifest(cls, path: str | Path) -> ToolCatalog:
        """Load records from a manifest.json.

        Entries whose class cannot be imported are skipped with a warning,
        so one broken plugin does not take the catalog down.
        """
        manifest_path = Path(path)
        entries = json.loads(manifest_path.read_text(encoding="utf-8"))
        if not isinstance(entries, list):
            raise ValueError(f"{manifest_path}: manifest must be a JSON list")

        records = []
        for entry in entries:
            if not isinstance(entry, dict):
                log.warning(f"Skipping non-object entry {entry!r} in {manifest_path}")
                continue
            try:
                records.append(record_from_manifest(entry))
            except (ImportError, AttributeError, KeyError, TypeError, ValueError) as e:
                log.warning(
                    f"Skipping tool {entry.get('pluginKey', '?')!r} "
                    f"from {manifest_path}: {e}"
                )

        log.info(f"Catalog: {[r.plugin_key for r in records]}")
        return cls(records)


def record_from_manifest(entry: dict) -> ToolRecord:
    """Build a ToolRecord from one manifest entry."""
    plugin_key = entry["pluginKey"]
    constructor = import_constructor(entry["class"])
    function_constructor = None
    if entry.get("functionClass"):
        function_constructor = import_constructor(entry["functionClass"])

    spec = None
    if "parameters" in entry:
        spec = ToolSpec(
            name=plugin_key,
            description=entry.get("description", ""),
            parameters=tuple(
                ToolParam(
                    name=p["name"],
                    type=p.get("type", "string"),
                    description=p.get("description", ""),
                    required=p.get("required", True),
                    default=p.get("default"),
                    enum=p.get("enum"),
                )
                for p in entry["parameters"]
            ),
        )

    return ToolRecord(
        plugin_key=plugin_key,
        constructor=constructor,
        auth=AuthRequirement.from_auth_config(entry.get("authConfig", [])),
        name=entry.get("name", plugin_key),
        description=entry.get("description", ""),
        config=dict(entry.get("config", {})),
        spec=spec,
        function_constructor=function_constructor,
    )


def import_constructor(target: str) -> ToolConstructor:
    """Resolve ``"package.module:Attr"`` to the callable it names."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Constructor must look like 'module:Attr', got {target!r}")
    module = importlib.import_module(module_name)
    constructor = getattr(module, attr)
    if not callable(constructor):
        raise ValueError(f"{target} is not callable")
    return constructor
