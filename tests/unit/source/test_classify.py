"""Tests for path resolution and stat classification.

Covers files, directories and symlinks.
Vanished paths, dangling links and exotic file types are skipped with ``None``.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from lazyfind.source.classify import classify_path, resolve_line
from lazyfind.source.types import EntryKind


class ResolveLineTests(unittest.TestCase):
    def test_relative_line_is_joined_and_normalized(self) -> None:
        self.assertEqual(resolve_line("/tmp/root", "./a/../b.txt"), os.path.normpath("/tmp/root/b.txt"))

    def test_absolute_line_is_kept(self) -> None:
        self.assertEqual(resolve_line("/tmp/root", "/etc/hosts"), os.path.normpath("/etc/hosts"))


class ClassifyPathTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = os.path.realpath(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_regular_file(self) -> None:
        target = Path(self.root) / "a.txt"
        target.write_text("hello", encoding="utf-8")

        entry = classify_path(str(target), self.root)

        self.assertIsNotNone(entry)
        self.assertEqual(entry.word, "a.txt")
        self.assertEqual(entry.kind, EntryKind.FILE)
        self.assertEqual(entry.size, 5)
        self.assertEqual(entry.path, str(target))
        self.assertFalse(entry.is_directory)
        self.assertFalse(entry.is_link)
        self.assertEqual(entry.mtime_ms, os.stat(target).st_mtime_ns // 1_000_000)

    def test_directory_gets_separator_suffix(self) -> None:
        target = Path(self.root) / "sub" / "inner"
        target.mkdir(parents=True)

        entry = classify_path(str(target), self.root)

        self.assertEqual(entry.kind, EntryKind.DIRECTORY)
        self.assertEqual(entry.word, os.path.join("sub", "inner") + os.sep)
        self.assertTrue(entry.is_directory)

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_symlink_to_file_is_symlink(self) -> None:
        target = Path(self.root) / "real.txt"
        target.write_text("x", encoding="utf-8")
        link = Path(self.root) / "link.txt"
        os.symlink(target, link)

        entry = classify_path(str(link), self.root)

        self.assertEqual(entry.kind, EntryKind.SYMLINK)
        self.assertTrue(entry.is_link)
        self.assertEqual(entry.word, "link.txt")
        self.assertEqual(entry.size, 1)

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_symlink_to_directory_reports_directory_and_link(self) -> None:
        target = Path(self.root) / "real"
        target.mkdir()
        link = Path(self.root) / "alias"
        os.symlink(target, link)

        entry = classify_path(str(link), self.root)

        self.assertEqual(entry.kind, EntryKind.DIRECTORY)
        self.assertTrue(entry.is_directory)
        self.assertTrue(entry.is_link)
        self.assertEqual(entry.word, "alias" + os.sep)

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_dangling_symlink_is_skipped(self) -> None:
        link = Path(self.root) / "dangling"
        os.symlink(Path(self.root) / "missing", link)

        self.assertIsNone(classify_path(str(link), self.root))

    def test_missing_path_is_skipped(self) -> None:
        self.assertIsNone(classify_path(os.path.join(self.root, "gone.txt"), self.root))

    def test_removed_path_is_skipped(self) -> None:
        target = Path(self.root) / "short-lived.txt"
        target.write_text("x", encoding="utf-8")
        target.unlink()

        self.assertIsNone(classify_path(str(target), self.root))

    @unittest.skipUnless(hasattr(os, "mkfifo"), "fifos unavailable")
    def test_fifo_is_skipped(self) -> None:
        fifo = os.path.join(self.root, "pipe")
        os.mkfifo(fifo)

        self.assertIsNone(classify_path(fifo, self.root))

    @unittest.skipUnless(hasattr(os, "mkfifo") and hasattr(os, "symlink"), "fifos or symlinks unavailable")
    def test_symlink_to_fifo_is_skipped(self) -> None:
        fifo = os.path.join(self.root, "pipe")
        os.mkfifo(fifo)
        link = os.path.join(self.root, "pipe-link")
        os.symlink(fifo, link)

        self.assertIsNone(classify_path(link, self.root))

    def test_root_itself_is_a_directory_entry(self) -> None:
        entry = classify_path(self.root, self.root)

        self.assertEqual(entry.kind, EntryKind.DIRECTORY)
        self.assertEqual(entry.word, "." + os.sep)

    def test_to_item_projects_consumer_fields(self) -> None:
        target = Path(self.root) / "d"
        target.mkdir()

        item = classify_path(str(target), self.root).to_item()

        self.assertEqual(item["word"], "d" + os.sep)
        self.assertEqual(item["action"], {"path": str(target), "isDirectory": True, "isLink": False})
        self.assertTrue(item["isTree"])
        self.assertEqual(item["treePath"], str(target))
        self.assertIn("time", item["status"])


if __name__ == "__main__":
    unittest.main()
