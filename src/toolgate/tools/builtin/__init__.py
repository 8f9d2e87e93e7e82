"""Tools shipped with toolgate, described by ``manifest.json``."""

from pathlib import Path

from toolgate.tools.catalog import ToolCatalog

MANIFEST_PATH = Path(__file__).parent / "manifest.json"


def default_catalog() -> ToolCatalog:
    """Catalog of the built-in tools."""
    return ToolCatalog.from_manifest(MANIFEST_PATH)
