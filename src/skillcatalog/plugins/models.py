"""Catalog data models: SkillMetadata, Skill, Plugin, Catalog, LoadResult."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from skillcatalog.core.errors import Rejection


@dataclass(frozen=True)
class SkillMetadata:
    """The ``metadata:`` block of a SKILL.md header."""

    author: str
    version: str
    tags: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Skill:
    """Parsed from <plugin>/skills/<skill>/SKILL.md."""

    name: str
    description: str
    license: str
    metadata: SkillMetadata
    body: str = ""
    path: Path | None = None
    references: tuple[Path, ...] = ()

    @property
    def tags(self) -> frozenset[str]:
        return self.metadata.tags


@dataclass(frozen=True)
class Plugin:
    """A loaded plugin with its validated skills, in discovery order."""

    name: str
    version: str
    author: str
    skills: tuple[Skill, ...] = ()
    description: str = ""
    root: Path | None = None
    manifest_path: Path | None = None

    @property
    def skill_names(self) -> list[str]:
        return [s.name for s in self.skills]

    def get_skill(self, name: str) -> Skill | None:
        for skill in self.skills:
            if skill.name == name:
                return skill
        return None


@dataclass(frozen=True, eq=False)
class Catalog:
    """Read-only index of plugin name -> Plugin, in discovery order."""

    plugins: Mapping[str, Plugin] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_plugins(cls, plugins: list[Plugin]) -> Catalog:
        index: dict[str, Plugin] = {}
        for plugin in plugins:
            if plugin.name in index:
                raise ValueError(f"duplicate plugin name: {plugin.name}")
            index[plugin.name] = plugin
        return cls(plugins=MappingProxyType(index))

    @property
    def plugin_names(self) -> list[str]:
        return list(self.plugins)

    def get(self, name: str) -> Plugin | None:
        return self.plugins.get(name)

    def find_skill(self, plugin_name: str, skill_name: str) -> Skill | None:
        plugin = self.plugins.get(plugin_name)
        return plugin.get_skill(skill_name) if plugin else None

    def iter_skills(self) -> Iterator[tuple[Plugin, Skill]]:
        for plugin in self.plugins.values():
            for skill in plugin.skills:
                yield plugin, skill

    def __contains__(self, name: object) -> bool:
        return name in self.plugins

    def __iter__(self) -> Iterator[Plugin]:
        return iter(self.plugins.values())

    def __len__(self) -> int:
        return len(self.plugins)

    def __eq__(self, other: object) -> bool:
        # order-sensitive, unlike plain mapping equality
        if not isinstance(other, Catalog):
            return NotImplemented
        return list(self.plugins.items()) == list(other.plugins.items())

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-serialisable form of the catalog."""
        return {
            "plugins": [
                {
                    "name": p.name,
                    "version": p.version,
                    "author": p.author,
                    "description": p.description,
                    "root": str(p.root) if p.root else None,
                    "skills": [
                        {
                            "name": s.name,
                            "description": s.description,
                            "license": s.license,
                            "metadata": {
                                "author": s.metadata.author,
                                "version": s.metadata.version,
                                "tags": sorted(s.metadata.tags),
                            },
                            "path": str(s.path) if s.path else None,
                            "references": [str(r) for r in s.references],
                            "body": s.body,
                        }
                        for s in p.skills
                    ],
                }
                for p in self.plugins.values()
            ]
        }


@dataclass(frozen=True)
class LoadResult:
    """A catalog plus every entry that was rejected while building it."""

    catalog: Catalog
    rejections: tuple[Rejection, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.rejections
