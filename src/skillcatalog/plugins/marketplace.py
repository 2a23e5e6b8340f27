"""Claude Code-compatible marketplace index.

Handles marketplace.json parsing, resolution of relative plugin sources
inside the catalog root, and reconciliation of the index against a loaded
catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from skillcatalog.core.errors import CatalogError, EntryError
from skillcatalog.core.utils import read_structured

if TYPE_CHECKING:
    from skillcatalog.plugins.models import Catalog


# ── Data models ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class PluginEntry:
    """A plugin listing inside a marketplace.json."""

    name: str
    source: str | dict = ""  # relative path, owner/repo, or git URL
    description: str = ""
    version: str = ""
    author: str = ""
    keywords: tuple[str, ...] = ()
    category: str = ""

    @property
    def is_local(self) -> bool:
        return isinstance(self.source, str) and self.source.startswith("./")


@dataclass(frozen=True)
class Marketplace:
    """A parsed marketplace.json."""

    name: str
    owner: str = ""
    plugins: tuple[PluginEntry, ...] = field(default_factory=tuple)
    description: str = ""
    path: Path | None = None

    def get(self, name: str) -> PluginEntry | None:
        for entry in self.plugins:
            if entry.name == name:
                return entry
        return None

    def local_sources(self, root: Path) -> list[Path]:
        """Directories of relative-path sources that stay inside *root*."""
        base = root.resolve()
        result = []
        for entry in self.plugins:
            if not entry.is_local:
                continue
            d = root / entry.source.removeprefix("./")
            resolved = d.resolve()
            if resolved != base and base in resolved.parents and d.is_dir():
                result.append(d)
        return result


# ── Parse marketplace.json ──────────────────────────────────────────


def _person(val) -> str:
    if isinstance(val, dict):
        return str(val.get("name", ""))
    return val if isinstance(val, str) else ""


def _text(val) -> str:
    return val if isinstance(val, str) else ""


def _version(val) -> str:
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return str(val)
    return _text(val)


def parse_marketplace_json(path: Path) -> Marketplace:
    """Parse a marketplace.json file. Raises CatalogError when unusable."""
    try:
        data = read_structured(path)
    except EntryError as e:
        raise CatalogError(f"{path}: {e}") from e

    name = data.get("name", "")
    if not isinstance(name, str) or not name:
        raise CatalogError(f"{path}: missing required field 'name'")

    entries = data.get("plugins") or []
    if not isinstance(entries, list):
        raise CatalogError(f"{path}: 'plugins' must be a list")

    plugins = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        pname = entry.get("name")
        if not isinstance(pname, str) or not pname:
            continue
        source = entry.get("source", "")
        keywords = entry.get("keywords", [])
        plugins.append(
            PluginEntry(
                name=pname,
                source=source if isinstance(source, (str, dict)) else "",
                description=_text(entry.get("description")),
                version=_version(entry.get("version")),
                author=_person(entry.get("author")),
                keywords=tuple(k for k in keywords if isinstance(k, str)) if isinstance(keywords, list) else (),
                category=_text(entry.get("category")),
            )
        )

    desc = ""
    metadata = data.get("metadata", {})
    if isinstance(metadata, dict):
        desc = _text(metadata.get("description"))

    return Marketplace(
        name=name,
        owner=_person(data.get("owner")),
        plugins=tuple(plugins),
        description=desc,
        path=path,
    )


def find_marketplace_json(root: Path) -> Path | None:
    """Find marketplace.json in standard locations."""
    # .claude-plugin/marketplace.json (Claude Code standard)
    p = root / ".claude-plugin" / "marketplace.json"
    if p.is_file():
        return p
    p = root / "marketplace.json"
    if p.is_file():
        return p
    return None


def load_marketplace(root: Path) -> Marketplace | None:
    """Load the marketplace index of a catalog root, or None if it has none."""
    mj = find_marketplace_json(root)
    if mj is None:
        return None
    return parse_marketplace_json(mj)


# ── Reconciliation ──────────────────────────────────────────────────


def reconcile(marketplace: Marketplace, catalog: Catalog) -> list[str]:
    """Differences between what the index lists and what was actually loaded."""
    problems: list[str] = []
    for entry in marketplace.plugins:
        plugin = catalog.get(entry.name)
        if plugin is None:
            problems.append(f"listed in {marketplace.name} but not loaded: {entry.name}")
        elif entry.version and entry.version != plugin.version:
            problems.append(
                f"version mismatch for {entry.name}: "
                f"index says {entry.version}, manifest says {plugin.version}"
            )
    listed = {entry.name for entry in marketplace.plugins}
    for name in catalog.plugin_names:
        if name not in listed:
            problems.append(f"loaded but not listed in {marketplace.name}: {name}")
    return problems
