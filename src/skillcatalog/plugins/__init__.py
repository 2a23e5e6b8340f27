"""Plugins: manifest parsing, catalog loading, marketplace index."""

from skillcatalog.core.errors import CatalogError, Rejection, RejectionKind

from .loader import find_manifest, load_catalog, load_plugin, validate_plugin
from .marketplace import Marketplace, PluginEntry, load_marketplace, reconcile
from .models import Catalog, LoadResult, Plugin, Skill, SkillMetadata

__all__ = [
    "Catalog",
    "CatalogError",
    "LoadResult",
    "Marketplace",
    "Plugin",
    "PluginEntry",
    "Rejection",
    "RejectionKind",
    "Skill",
    "SkillMetadata",
    "find_manifest",
    "load_catalog",
    "load_marketplace",
    "load_plugin",
    "reconcile",
    "validate_plugin",
]
