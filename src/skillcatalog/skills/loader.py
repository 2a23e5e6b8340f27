"""Skill parsing: read SKILL.md files into Skill values, and render skill context strings."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from skillcatalog.core.errors import EntryError, RejectionKind, missing_field
from skillcatalog.core.utils import parse_frontmatter_and_body, required_str
from skillcatalog.plugins.models import Skill, SkillMetadata

if TYPE_CHECKING:
    from skillcatalog.plugins.models import Catalog


def _parse_tags(val: Any) -> frozenset[str]:
    if val is None:
        return frozenset()
    if isinstance(val, str):
        items = val.strip("[]").split(",")
    elif isinstance(val, list):
        items = [str(v) for v in val if v is not None]
    else:
        raise EntryError(RejectionKind.UNREADABLE_PATH, "metadata.tags must be a list of strings")
    return frozenset(t.strip().strip("'\"") for t in items if t.strip())


def _find_references(skill_path: Path) -> tuple[Path, ...]:
    refs_dir = skill_path / "references"
    try:
        if not refs_dir.is_dir():
            return ()
        return tuple(sorted(f for f in refs_dir.iterdir() if f.is_file() and f.suffix == ".md"))
    except OSError as e:
        raise EntryError(RejectionKind.UNREADABLE_PATH, f"cannot read references: {e}") from e


def parse_skill(skill_file: Path) -> Skill:
    """Parse one SKILL.md. Raises EntryError when the file is unusable."""
    meta, body = parse_frontmatter_and_body(skill_file)
    where = skill_file.name

    name = required_str(meta, "name", where)
    description = required_str(meta, "description", where)
    license_id = required_str(meta, "license", where)

    block = meta.get("metadata")
    if block is None:
        raise missing_field("metadata", where)
    if not isinstance(block, dict):
        raise EntryError(RejectionKind.UNREADABLE_PATH, f"{where}: 'metadata' must be a mapping")
    metadata = SkillMetadata(
        author=required_str(block, "author", f"{where} metadata"),
        version=required_str(block, "version", f"{where} metadata"),
        tags=_parse_tags(block.get("tags")),
    )

    return Skill(
        name=name,
        description=description,
        license=license_id,
        metadata=metadata,
        body=body,
        path=skill_file,
        references=_find_references(skill_file.parent),
    )


def iter_skill_files(skill_dir: Path, skill_file: str = "SKILL.md") -> list[Path]:
    """Skill files one level under *skill_dir*, in lexicographic order.

    A directory that itself holds a skill file is a single skill. OSError
    from an unreadable directory propagates to the caller.
    """
    if not skill_dir.is_dir():
        return []
    if (skill_dir / skill_file).is_file():
        return [skill_dir / skill_file]
    files = []
    for skill_path in sorted(skill_dir.iterdir()):
        if not skill_path.is_dir():
            continue
        candidate = skill_path / skill_file
        if candidate.is_file():
            files.append(candidate)
    return files


def skill_context(catalog: Catalog) -> list[str]:
    """Return one context entry per skill, for an agent's system prompt."""
    parts: list[str] = []
    for plugin, skill in catalog.iter_skills():
        entry = f"### Skill: {plugin.name}:{skill.name}\n{skill.description}"
        if skill.path:
            entry += f"\n(Use `Read` on {skill.path} for full instructions)"
        if skill.references:
            ref_lines = ", ".join(f"`{f.name}`" for f in skill.references)
            entry += f"\nReferences: {ref_lines} (in {skill.references[0].parent})"
        parts.append(entry)
    return parts
