"""One-shot find source.

Runs ``cmd + [root]`` to completion and returns its output as display names
relative to the root, chunked into fixed-size batches. No stat calls.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from .channel import BatchChannel
from .types import EntryKind, ResolvedEntry, resolve_working_directory

logger = logging.getLogger(__name__)

FIND_MAX_ITEMS = 20_000


def _run_find(command: list[str]) -> list[str]:
    try:
        proc = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except (OSError, ValueError, subprocess.SubprocessError) as exc:
        logger.error("failed to run %s: %s", command[0], exc)
        return []
    if proc.returncode != 0:
        logger.error("%s", proc.stderr.strip() or f"{command[0]} failed with exit code {proc.returncode}")
        return []
    return proc.stdout.split("\n")


def collect_find_batches(
    cmd: list[str] | tuple[str, ...],
    path: str | Path | None,
    max_items: int = FIND_MAX_ITEMS,
) -> list[tuple[str, ...]]:
    """Return relative display names of ``cmd``'s output in chunks of ``max_items``."""
    if not cmd:
        return []
    root = resolve_working_directory(path)
    batches: list[tuple[str, ...]] = []
    words: list[str] = []
    for line in _run_find([*cmd, root]):
        if not line:
            continue
        try:
            words.append(os.path.relpath(os.path.join(root, line), root))
        except ValueError:
            words.append(line)
        if len(words) >= max_items:
            batches.append(tuple(words))
            words = []
    if words:
        batches.append(tuple(words))
    return batches


class FindSource:
    kind = "file"

    def gather(self, cmd: list[str] | tuple[str, ...], path: str | Path | None = None) -> BatchChannel:
        """Collect everything up front, then deliver it through a closed channel."""
        channel = BatchChannel()
        root = resolve_working_directory(path)
        for words in collect_find_batches(cmd, root):
            channel.put(
                tuple(
                    ResolvedEntry(
                        word=word,
                        path=os.path.normpath(os.path.join(root, word)),
                        kind=EntryKind.FILE,
                        size=0,
                        mtime_ms=None,
                    )
                    for word in words
                )
            )
        channel.close()
        return channel


__all__ = ["FIND_MAX_ITEMS", "FindSource", "collect_find_batches"]
