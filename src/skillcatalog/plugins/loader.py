"""Plugin loader: load_catalog, load_plugin, validate_plugin."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from skillcatalog.core.config import Config
from skillcatalog.core.errors import CatalogError, EntryError, Rejection, RejectionKind
from skillcatalog.core.utils import read_structured, required_str

from .models import Catalog, LoadResult, Plugin

console = Console(stderr=True)


def find_manifest(plugin_root: Path, config: Config) -> Path | None:
    for rel in config.manifest_paths:
        p = plugin_root / rel
        if p.is_file():
            return p
    return None


def _author_name(val) -> str:
    # plugin.json allows "author": {"name": ..., "email": ...}
    if isinstance(val, dict):
        return val.get("name", "")
    return val


def _to_list(val) -> list[str]:
    if isinstance(val, str):
        return [val] if val else []
    return [v for v in val if isinstance(v, str) and v] if isinstance(val, list) else []


def _parse_manifest(path: Path) -> dict:
    data = read_structured(path)
    where = path.name
    description = data.get("description", "")
    return {
        "name": required_str(data, "name", where),
        "version": required_str(data, "version", where),
        "author": required_str({"author": _author_name(data.get("author"))}, "author", where),
        "description": description if isinstance(description, str) else "",
        "skills": _to_list(data.get("skills", "")),
    }


def _unreadable(path: Path, e: OSError) -> Rejection:
    return Rejection(path=path, kind=RejectionKind.UNREADABLE_PATH, reason=f"cannot read directory: {e}")


def _is_within(path: Path, root: Path) -> bool:
    path, root = path.resolve(), root.resolve()
    return path == root or root in path.parents


def _skill_dirs(plugin_root: Path, extra: list[str]) -> list[Path]:
    dirs = [plugin_root / "skills"]
    seen = {dirs[0].resolve()}
    for custom in extra:
        p = plugin_root / custom.removeprefix("./")
        if not p.is_dir() or not _is_within(p, plugin_root) or p.resolve() in seen:
            continue
        seen.add(p.resolve())
        dirs.append(p)
    return dirs


def load_plugin(plugin_root: Path, config: Config | None = None) -> tuple[Plugin | None, list[Rejection]]:
    """Load one plugin directory.

    Returns (plugin, rejections). The plugin is None when the directory has no
    manifest or the manifest itself is rejected; rejected skills do not reject
    the plugin.
    """
    from skillcatalog.skills.loader import iter_skill_files, parse_skill

    config = config or Config()
    try:
        manifest_path = find_manifest(plugin_root, config)
    except OSError as e:
        return None, [_unreadable(plugin_root, e)]
    if manifest_path is None:
        return None, []

    try:
        manifest = _parse_manifest(manifest_path)
    except EntryError as e:
        return None, [e.to_rejection(manifest_path)]

    rejections: list[Rejection] = []
    skills = []
    seen: set[str] = set()
    try:
        skill_dirs = _skill_dirs(plugin_root, manifest["skills"])
    except OSError as e:
        skill_dirs = []
        rejections.append(_unreadable(plugin_root, e))
    for skill_dir in skill_dirs:
        try:
            skill_files = iter_skill_files(skill_dir, config.skill_file)
        except OSError as e:
            rejections.append(_unreadable(skill_dir, e))
            continue
        for skill_file in skill_files:
            try:
                skill = parse_skill(skill_file)
            except EntryError as e:
                rejections.append(e.to_rejection(skill_file))
                continue
            if skill.name in seen:
                rejections.append(
                    Rejection(
                        path=skill_file,
                        kind=RejectionKind.DUPLICATE_NAME,
                        reason=f"skill '{skill.name}' already defined in plugin '{manifest['name']}'",
                    )
                )
                continue
            seen.add(skill.name)
            skills.append(skill)

    plugin = Plugin(
        name=manifest["name"],
        version=manifest["version"],
        author=manifest["author"],
        skills=tuple(skills),
        description=manifest["description"],
        root=plugin_root,
        manifest_path=manifest_path,
    )
    return plugin, rejections


def _candidate_dirs(root: Path, extra: list[Path]) -> list[Path]:
    candidates: dict[Path, Path] = {}
    for d in root.iterdir():
        if d.is_dir() and not d.name.startswith("."):
            candidates.setdefault(d.resolve(), d)
    for d in extra:
        candidates.setdefault(d.resolve(), d)
    return sorted(candidates.values(), key=lambda p: p.as_posix())


def _marketplace_sources(root: Path) -> tuple[list[Path], list[Rejection]]:
    from .marketplace import find_marketplace_json, parse_marketplace_json

    try:
        mj = find_marketplace_json(root)
    except OSError as e:
        return [], [_unreadable(root / ".claude-plugin", e)]
    if mj is None:
        return [], []
    try:
        marketplace = parse_marketplace_json(mj)
        sources = marketplace.local_sources(root)
    except CatalogError as e:
        return [], [Rejection(path=mj, kind=RejectionKind.UNREADABLE_PATH, reason=str(e))]
    except OSError as e:
        return [], [Rejection(path=mj, kind=RejectionKind.UNREADABLE_PATH, reason=f"cannot resolve sources: {e}")]
    return sources, []


def load_catalog(
    root: Path | str, config: Config | None = None, verbose: bool = False
) -> LoadResult:
    """Build a Catalog from every plugin under *root*.

    Bad plugins and skills are excluded and reported in the result; only an
    inaccessible root raises CatalogError. Entries are visited in
    lexicographic path order and the first plugin or skill to claim a name
    keeps it.
    """
    root = Path(root)
    config = config or Config(root=root)
    try:
        is_dir = root.is_dir()
    except OSError as e:
        raise CatalogError(f"cannot access catalog root {root}: {e}") from e
    if not is_dir:
        raise CatalogError(f"catalog root is not a directory: {root}")

    plugins: list[Plugin] = []
    rejections: list[Rejection] = []
    names: set[str] = set()

    def _reject(r: Rejection) -> None:
        rejections.append(r)
        if verbose or config.verbose:
            console.print(f"  [yellow]warning: {escape(str(r))}[/yellow]")

    extra: list[Path] = []
    if config.use_marketplace:
        extra, index_rejections = _marketplace_sources(root)
        for r in index_rejections:
            _reject(r)

    try:
        candidates = _candidate_dirs(root, extra)
    except OSError as e:
        raise CatalogError(f"cannot read catalog root {root}: {e}") from e

    for d in candidates:
        plugin, plugin_rejections = load_plugin(d, config)
        for r in plugin_rejections:
            _reject(r)
        if plugin is None:
            continue
        if plugin.name in names:
            _reject(
                Rejection(
                    path=plugin.manifest_path or d,
                    kind=RejectionKind.DUPLICATE_NAME,
                    reason=f"plugin '{plugin.name}' already defined",
                )
            )
            continue
        names.add(plugin.name)
        plugins.append(plugin)

    return LoadResult(catalog=Catalog.from_plugins(plugins), rejections=tuple(rejections))


def validate_plugin(path: Path, config: Config | None = None) -> list[str]:
    """Return human-readable problems with the plugin at *path* (empty if valid)."""
    config = config or Config()
    errors: list[str] = []
    try:
        if not path.is_dir():
            errors.append(f"not a directory: {path}")
            return errors
        manifest_path = find_manifest(path, config)
    except OSError as e:
        errors.append(f"cannot read {path}: {e}")
        return errors
    if manifest_path is None:
        errors.append(f"no manifest found (looked for {', '.join(config.manifest_paths)})")
        return errors
    cp_dir = path / ".claude-plugin"
    if cp_dir.is_dir():
        for bad_dir in ("skills", "commands", "agents", "hooks"):
            if (cp_dir / bad_dir).exists():
                errors.append(f"'{bad_dir}/' found inside .claude-plugin/; move it to plugin root")
    plugin, rejections = load_plugin(path, config)
    for r in rejections:
        rel = r.path.relative_to(path) if r.path.is_relative_to(path) else r.path
        errors.append(f"{r.kind.value}: {r.reason} ({rel})")
    if plugin is not None and not plugin.skills:
        errors.append(f"plugin '{plugin.name}' has no valid skills")
    return errors
