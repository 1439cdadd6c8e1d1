"""
Tests for FileSet and the local transport.

Tests:
  - FileSet.build root validation (missing, file, ok)
  - walk order and completeness, symlinks not followed
  - transfer_file preserves content, mtime and permission bits
  - a read-only destination copy can still be replaced
"""
import os
import stat
import sys
import tempfile
import unittest
from pathlib import Path

from syncit.core.errors import InvalidRoot, TransferError, WalkError
from syncit.core.fileset import EntryInfo, FileSet
from syncit.transport import LocalTransport, transfer_file


def make_tree(root: Path, files: dict):
    """files: relative path → (content, mtime seconds)"""
    for rel, (content, mtime) in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        os.utime(p, (mtime, mtime))


# ── Tests: FileSet ────────────────────────────────────────────────────────────

class TestFileSet(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.fs = LocalTransport()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_root(self):
        with self.assertRaises(InvalidRoot) as cm:
            FileSet.build(self.fs, str(self.root / "nope"))
        self.assertIn("does not exist", str(cm.exception))

    def test_root_is_file(self):
        (self.root / "f").write_text("x", encoding="utf-8")
        with self.assertRaises(InvalidRoot) as cm:
            FileSet.build(self.fs, str(self.root / "f"))
        self.assertIn("is a file", str(cm.exception))

    def test_build_is_empty_until_populated(self):
        make_tree(self.root, {"a.txt": ("a", 1_000), "d/b.txt": ("b", 1_000)})
        fset = FileSet.build(self.fs, str(self.root))
        self.assertEqual(len(fset), 0)
        fset.populate()
        self.assertEqual(sorted(fset), ["a.txt", "d", "d/b.txt"])
        self.assertNotIn("", fset)

    def test_populate_records_metadata(self):
        make_tree(self.root, {"a.txt": ("hello", 1_234)})
        fset = FileSet.build(self.fs, str(self.root)).populate()
        info = fset.get("a.txt")
        self.assertEqual(info.size, 5)
        self.assertEqual(info.mtime_ns, 1_234 * 1_000_000_000)
        self.assertTrue(info.is_regular)
        self.assertFalse(info.is_dir)
        self.assertTrue(fset.get("a.txt") is fset.paths["a.txt"])
        self.assertIsNone(fset.get("b.txt"))


# ── Tests: LocalTransport ─────────────────────────────────────────────────────

class TestLocalTransport(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.fs = LocalTransport()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_walk_is_depth_first_and_sorted(self):
        make_tree(self.root, {
            "b.txt": ("b", 1_000),
            "a/z.txt": ("z", 1_000),
            "a/c/y.txt": ("y", 1_000),
        })
        rels = [rel for rel, _ in self.fs.walk(str(self.root))]
        self.assertEqual(rels, ["a", "a/c", "a/c/y.txt", "a/z.txt", "b.txt"])

    def test_join_uses_posix_relative_paths(self):
        joined = self.fs.join(str(self.root), "a/b/c.txt")
        self.assertEqual(Path(joined), self.root / "a" / "b" / "c.txt")
        self.assertEqual(self.fs.join(str(self.root), ""), str(self.root))

    @unittest.skipIf(sys.platform == "win32", "symlinks need privileges on Windows")
    def test_symlink_is_not_followed(self):
        (self.root / "target").mkdir()
        (self.root / "target" / "f.txt").write_text("x", encoding="utf-8")
        os.symlink(self.root / "target", self.root / "link")
        entries = dict(self.fs.walk(str(self.root)))
        self.assertIn("link", entries)
        self.assertFalse(entries["link"].is_dir)
        self.assertFalse(entries["link"].is_regular)
        self.assertNotIn("link/f.txt", entries)

    def test_mkdir_all_is_idempotent(self):
        deep = str(self.root / "x" / "y" / "z")
        self.fs.mkdir_all(deep)
        self.fs.mkdir_all(deep)
        self.assertTrue(self.fs.stat(deep).is_dir)

    def test_exists(self):
        self.assertTrue(self.fs.exists(str(self.root)))
        self.assertFalse(self.fs.exists(str(self.root / "missing")))

    def test_walk_of_a_file_raises_walk_error(self):
        (self.root / "f").write_text("x", encoding="utf-8")
        with self.assertRaises(WalkError):
            list(self.fs.walk(str(self.root / "f")))

    def test_remove_directory_is_recursive(self):
        make_tree(self.root, {"d/e/f.txt": ("f", 1_000)})
        self.fs.remove_directory(str(self.root / "d"))
        self.assertFalse((self.root / "d").exists())


# ── Tests: transfer_file ──────────────────────────────────────────────────────

class TestTransferFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.fs = LocalTransport()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_copies_content_and_mtime(self):
        src = self.root / "src.bin"
        src.write_bytes(b"0123456789" * 1_000)
        os.utime(src, ns=(1_136_073_600_123_456_000, 1_136_073_600_123_456_000))
        dst = self.root / "dst.bin"

        info = self.fs.stat(str(src))
        written = transfer_file(self.fs, str(src), self.fs, str(dst), info)

        self.assertEqual(written, 10_000)
        self.assertEqual(dst.read_bytes(), src.read_bytes())
        self.assertEqual(os.stat(dst).st_mtime_ns, info.mtime_ns)

    def test_truncates_longer_destination(self):
        src = self.root / "src.txt"
        src.write_text("short", encoding="utf-8")
        dst = self.root / "dst.txt"
        dst.write_text("a much longer destination", encoding="utf-8")
        transfer_file(self.fs, str(src), self.fs, str(dst), self.fs.stat(str(src)))
        self.assertEqual(dst.read_text(encoding="utf-8"), "short")

    @unittest.skipIf(sys.platform == "win32", "POSIX permission bits")
    def test_keeps_permission_bits(self):
        src = self.root / "run.sh"
        src.write_text("#!/bin/sh\n", encoding="utf-8")
        os.chmod(src, 0o750)
        dst = self.root / "copy.sh"
        transfer_file(self.fs, str(src), self.fs, str(dst), self.fs.stat(str(src)))
        self.assertEqual(stat.S_IMODE(os.stat(dst).st_mode), 0o750)

    def test_rejects_non_regular_entries(self):
        info = EntryInfo(size=0, mtime_ns=0, is_dir=True, is_regular=False)
        with self.assertRaises(TransferError):
            transfer_file(self.fs, str(self.root), self.fs, str(self.root / "x"), info)

    def test_missing_source_raises_transfer_error(self):
        info = EntryInfo(size=1, mtime_ns=0, is_dir=False, is_regular=True)
        with self.assertRaises(TransferError):
            transfer_file(self.fs, str(self.root / "gone"), self.fs, str(self.root / "x"), info)

    @unittest.skipIf(sys.platform == "win32", "POSIX permission bits")
    def test_read_only_destination_is_updated(self):
        """A read-only copy is replaced on the next transfer and stays read-only."""
        fs = _PermissionCheckingLocal()
        src = self.root / "src.txt"
        dst = self.root / "dst.txt"
        src.write_text("v1", encoding="utf-8")
        os.chmod(src, 0o444)
        transfer_file(fs, str(src), fs, str(dst), fs.stat(str(src)))
        self.assertEqual(stat.S_IMODE(os.stat(dst).st_mode), 0o444)

        os.chmod(src, 0o644)
        src.write_text("version2", encoding="utf-8")
        os.chmod(src, 0o444)
        transfer_file(fs, str(src), fs, str(dst), fs.stat(str(src)))

        self.assertEqual(dst.read_text(encoding="utf-8"), "version2")
        self.assertEqual(stat.S_IMODE(os.stat(dst).st_mode), 0o444)


class _PermissionCheckingLocal(LocalTransport):
    """Refuses to truncate files without an owner write bit, even for root."""

    def create_or_truncate(self, path):
        if os.path.exists(path) and not os.stat(path).st_mode & stat.S_IWUSR:
            raise PermissionError(13, "Permission denied", path)
        return super().create_or_truncate(path)


if __name__ == "__main__":
    unittest.main()
