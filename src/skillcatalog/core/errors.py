"""Error kinds and rejection records produced while loading a catalog."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class RejectionKind(str, Enum):
    MISSING_FIELD = "MissingField"
    DUPLICATE_NAME = "DuplicateName"
    UNREADABLE_PATH = "UnreadablePath"


@dataclass(frozen=True)
class Rejection:
    """A plugin or skill that was excluded from the catalog, and why."""

    path: Path
    kind: RejectionKind
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.kind.value}: {self.reason}"


class CatalogError(Exception):
    """The catalog as a whole could not be loaded (e.g. the root is inaccessible)."""


class EntryError(Exception):
    """A single plugin or skill is invalid. The loader records it and moves on."""

    def __init__(self, kind: RejectionKind, message: str):
        super().__init__(message)
        self.kind = kind

    def to_rejection(self, path: Path) -> Rejection:
        return Rejection(path=path, kind=self.kind, reason=str(self))


def missing_field(field_name: str, where: str) -> EntryError:
    return EntryError(
        RejectionKind.MISSING_FIELD,
        f"{where}: missing required field '{field_name}'",
    )
