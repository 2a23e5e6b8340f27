"""Frontmatter parsing, structured-file reading, output truncation, path display."""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from skillcatalog.core.errors import EntryError, RejectionKind, missing_field


def required_str(data: dict, key: str, where: str) -> str:
    """Return ``data[key]`` as a stripped non-empty string or raise MissingField."""
    val = data.get(key)
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        # YAML reads `version: 1.0` as a float
        val = str(val)
    if not isinstance(val, str) or not val.strip():
        raise missing_field(key, where)
    return val.strip()


def parse_frontmatter(raw: str) -> dict:
    """Parse a YAML frontmatter block. Raises EntryError unless it is a mapping."""
    try:
        meta = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise EntryError(RejectionKind.UNREADABLE_PATH, f"invalid YAML frontmatter: {e}") from e
    if meta is None:
        return {}
    if not isinstance(meta, dict):
        raise EntryError(RejectionKind.UNREADABLE_PATH, "frontmatter is not a mapping")
    return meta


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split ``---``-fenced frontmatter from the body. Returns (None, content) if absent."""
    if not content.startswith("---"):
        return None, content
    end = content.find("\n---", 3)
    if end == -1:
        return None, content
    frontmatter = content[3:end].strip("\n")
    body = content[end + 4 :]
    # drop the rest of the closing fence line
    newline = body.find("\n")
    body = "" if newline == -1 else body[newline + 1 :]
    return frontmatter, body


def parse_frontmatter_and_body(path: Path) -> tuple[dict, str]:
    """Read *path* and return (frontmatter, body). Raises EntryError if unreadable."""
    content = read_text(path)
    frontmatter, body = split_frontmatter(content)
    if frontmatter is None:
        raise EntryError(RejectionKind.UNREADABLE_PATH, "missing or unterminated frontmatter")
    return parse_frontmatter(frontmatter), body


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise EntryError(RejectionKind.UNREADABLE_PATH, f"not UTF-8 text: {e}") from e
    except OSError as e:
        raise EntryError(RejectionKind.UNREADABLE_PATH, f"cannot read file: {e}") from e


def read_structured(path: Path) -> dict:
    """Read a JSON or YAML mapping, chosen by file suffix."""
    content = read_text(path)
    if path.suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise EntryError(RejectionKind.UNREADABLE_PATH, f"invalid YAML in {path.name}: {e}") from e
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise EntryError(RejectionKind.UNREADABLE_PATH, f"invalid JSON in {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise EntryError(RejectionKind.UNREADABLE_PATH, f"{path.name} is not a mapping")
    return data


MAX_PREVIEW_BYTES = 2 * 1024


def truncate(text: str, max_bytes: int = MAX_PREVIEW_BYTES) -> str:
    """Truncate text to max_bytes."""
    encoded = text.encode("utf-8", errors="replace")
    if len(encoded) <= max_bytes:
        return text
    truncated = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return truncated + f"\n\n... [truncated, {len(encoded)} bytes total]"


def short_path(p: Path) -> str:
    """Return path relative to home directory, using ~ prefix."""
    try:
        rel = p.relative_to(Path.home())
        return f"~/{rel}" if str(rel) != "." else "~"
    except ValueError:
        return str(p)
