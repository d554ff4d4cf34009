"""Value types shared by the file-external source pipeline.

``SearchRequest`` is the opaque input handed over by the caller.
``ResolvedEntry`` is one classified filesystem object; batches are tuples of them.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path

ENQUEUE_SIZE_FIRST = 1_000
DEFAULT_UPDATE_ITEMS = 100_000


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class ResolvedEntry:
    """One classified path produced by the stat classifier."""

    word: str  # relative to the working directory, "/"-suffixed for directories
    path: str
    kind: EntryKind
    size: int
    mtime_ms: int | None
    is_directory: bool = False
    is_link: bool = False

    def to_item(self) -> dict[str, object]:
        """Project into the item shape a file-kind consumer expects."""
        return {
            "word": self.word,
            "action": {
                "path": self.path,
                "isDirectory": self.is_directory,
                "isLink": self.is_link,
            },
            "status": {
                "size": self.size,
                "time": self.mtime_ms,
            },
            "isTree": self.is_directory,
            "treePath": self.path,
        }


Batch = tuple[ResolvedEntry, ...]


def resolve_working_directory(path: str | os.PathLike[str] | None) -> str:
    """Return an absolute working directory, falling back to the cwd when unset."""
    raw = os.fspath(path) if path is not None else ""
    if not raw:
        return os.getcwd()
    return os.path.abspath(os.path.expanduser(raw))


@dataclass(frozen=True)
class SearchRequest:
    working_directory: str
    command: tuple[str, ...] = ()
    first_batch_size: int = ENQUEUE_SIZE_FIRST
    steady_batch_size: int = DEFAULT_UPDATE_ITEMS

    def __post_init__(self) -> None:
        if self.first_batch_size <= 0:
            raise ValueError("first_batch_size must be >= 1")
        if self.steady_batch_size <= 0:
            raise ValueError("steady_batch_size must be >= 1")

    @classmethod
    def build(
        cls,
        path: str | Path | None,
        cmd: list[str] | tuple[str, ...],
        update_items: int = DEFAULT_UPDATE_ITEMS,
    ) -> SearchRequest:
        """Build a request from caller-facing parameters."""
        return cls(
            working_directory=resolve_working_directory(path),
            command=tuple(str(token) for token in cmd),
            steady_batch_size=update_items,
        )


__all__ = [
    "Batch",
    "DEFAULT_UPDATE_ITEMS",
    "ENQUEUE_SIZE_FIRST",
    "EntryKind",
    "ResolvedEntry",
    "SearchRequest",
    "resolve_working_directory",
]
