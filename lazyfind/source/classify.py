"""Path resolution and stat classification for command output lines."""

from __future__ import annotations

import os
import stat

from .types import EntryKind, ResolvedEntry


def resolve_line(root: str, line: str) -> str:
    """Join ``line`` onto ``root`` and normalize without following links."""
    return os.path.normpath(os.path.join(root, line))


def classify_path(path: str, root: str) -> ResolvedEntry | None:
    """Classify ``path`` as file, directory or symlink.

    Returns ``None`` when metadata cannot be read (the entry vanished, is
    unreadable, or is a dangling link) or when the entry, or a link target,
    is some other type such as a fifo, socket or device. Directory-ness
    is checked through links first, so a link to a directory still gets
    the ``/`` suffix while ``is_link`` stays set.
    """
    try:
        link_stat = os.lstat(path)
    except (OSError, ValueError):
        return None

    is_link = stat.S_ISLNK(link_stat.st_mode)
    target_stat = link_stat
    if is_link:
        try:
            target_stat = os.stat(path)
        except (OSError, ValueError):
            # dangling link
            return None

    mode = target_stat.st_mode
    is_directory = stat.S_ISDIR(mode)
    if is_directory:
        kind = EntryKind.DIRECTORY
    elif not stat.S_ISREG(mode):
        return None
    elif is_link:
        kind = EntryKind.SYMLINK
    else:
        kind = EntryKind.FILE

    try:
        word = os.path.relpath(path, root)
    except ValueError:
        word = path
    if is_directory:
        word += os.sep

    mtime_ns = getattr(target_stat, "st_mtime_ns", None)
    return ResolvedEntry(
        word=word,
        path=path,
        kind=kind,
        size=max(0, int(target_stat.st_size)),
        mtime_ms=int(mtime_ns) // 1_000_000 if mtime_ns is not None else None,
        is_directory=is_directory,
        is_link=is_link,
    )


__all__ = ["classify_path", "resolve_line"]
