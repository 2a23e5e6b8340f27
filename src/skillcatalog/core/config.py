"""Configuration: env, settings files, catalog root, discovery conventions."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from skillcatalog.core.errors import CatalogError

PROJECT_DIR_NAME = ".skillcatalog"

# Checked in order; the first one present identifies a plugin directory.
DEFAULT_MANIFEST_PATHS = (
    ".claude-plugin/plugin.json",
    "plugin.json",
    "plugin.yaml",
    "plugin.yml",
)

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Config:
    root: Path = field(default_factory=Path.cwd)
    global_dir: Path = field(default_factory=lambda: Path.home() / PROJECT_DIR_NAME)
    project_dir: Path | None = None  # explicit override; None = auto-detect from cwd
    skill_file: str = "SKILL.md"
    manifest_paths: tuple[str, ...] = DEFAULT_MANIFEST_PATHS
    use_marketplace: bool = True
    strict: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.manifest_paths, list):
            self.manifest_paths = tuple(self.manifest_paths)

    @property
    def project_dirs(self) -> list[Path]:
        if self.project_dir is not None:
            return [self.project_dir] if self.project_dir.is_dir() else []
        d = Path.cwd() / PROJECT_DIR_NAME
        return [d] if d.is_dir() else []


def _apply_settings(config: Config, path: Path) -> None:
    """Apply a single settings.json file to config."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, NotADirectoryError):
        return
    except json.JSONDecodeError as e:
        raise CatalogError(f"invalid JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"{path}: settings must be a JSON object")

    if "root" in data:
        if not isinstance(data["root"], str) or not data["root"]:
            raise CatalogError(f"{path}: 'root' must be a non-empty string")
        root = Path(data["root"]).expanduser()
        config.root = root if root.is_absolute() else (path.parent.parent / root)
    if isinstance(data.get("skillFile"), str) and data["skillFile"]:
        config.skill_file = data["skillFile"]
    if isinstance(data.get("manifestPaths"), list):
        config.manifest_paths = tuple(str(p) for p in data["manifestPaths"] if p)
    if "useMarketplace" in data:
        config.use_marketplace = bool(data["useMarketplace"])
    if "strict" in data:
        config.strict = bool(data["strict"])


def load_config(
    root: str | Path | None = None,
    strict: bool | None = None,
    verbose: bool = False,
) -> Config:
    """Load config with priority: CLI args > env > .env > settings.json > defaults."""
    load_dotenv(find_dotenv(usecwd=True))

    config = Config()
    config.verbose = verbose

    _apply_settings(config, config.global_dir / "settings.json")

    for pdir in config.project_dirs:
        _apply_settings(config, pdir / "settings.json")

    for pdir in config.project_dirs:
        _apply_settings(config, pdir / "settings.local.json")

    if env_root := os.getenv("SKILLCATALOG_ROOT"):
        config.root = Path(env_root).expanduser()
    if env_strict := os.getenv("SKILLCATALOG_STRICT"):
        config.strict = env_strict.strip().lower() in _TRUTHY

    if root is not None:
        config.root = Path(root)
    if strict is not None:
        config.strict = strict

    config.root = config.root.resolve()
    return config
