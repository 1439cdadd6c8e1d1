"""
Tests for the SFTP transport and remote mirror / sync.

A FakeSFTPClient stands in for paramiko.SFTPClient. It serves a local
directory and, like a real SFTPv3 server, reports whole-second mtimes.

Tests:
  - walk / stat / mkdir_all / remove_directory through SFTP calls
  - local → remote mirror is idempotent despite second-granularity mtimes
  - remote → local (reverse) mirror and two-way remote sync
  - read-only remote copies are still replaced when the source changes
"""
import os
import stat
import sys
import tempfile
import unittest
from pathlib import Path

import paramiko

from syncit.config import Credentials
from syncit.core import WalkError, sync_engine
from syncit.transport import SftpTransport


class _FakeSFTPFile:
    def __init__(self, f):
        self._f = f

    def prefetch(self):
        pass

    def set_pipelined(self, pipelined=True):
        pass

    def read(self, size=-1):
        return self._f.read(size)

    def write(self, data):
        return self._f.write(data)

    def close(self):
        self._f.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeSFTPClient:
    """Implements the SFTPClient calls SftpTransport makes, on local paths."""

    def __init__(self, cwd):
        self.cwd = str(cwd)

    @staticmethod
    def _attrs(path, filename=None):
        attr = paramiko.SFTPAttributes.from_stat(os.lstat(path), filename)
        attr.st_mtime = int(attr.st_mtime)
        attr.st_atime = int(attr.st_atime)
        return attr

    def normalize(self, path):
        return self.cwd

    def lstat(self, path):
        return self._attrs(path)

    def stat(self, path):
        return paramiko.SFTPAttributes.from_stat(os.stat(path))

    def listdir_attr(self, path="."):
        return [self._attrs(os.path.join(path, name), name) for name in os.listdir(path)]

    def open(self, path, mode="r"):
        # servers refuse to truncate a file without the owner write bit, even for root
        if "w" in mode and os.path.exists(path) and not os.stat(path).st_mode & stat.S_IWUSR:
            raise PermissionError(13, "Permission denied", path)
        return _FakeSFTPFile(open(path, mode))

    def mkdir(self, path, mode=0o777):
        os.mkdir(path, mode)

    def remove(self, path):
        os.remove(path)

    def rmdir(self, path):
        os.rmdir(path)

    def utime(self, path, times):
        os.utime(path, times)

    def chmod(self, path, mode):
        os.chmod(path, mode)


class FakeManager:
    """Stands in for a connected SSHManager."""

    def __init__(self, sftp):
        self.sftp = sftp

    def transport(self):
        return SftpTransport(self.sftp)


def write(path: Path, content: str, mtime: float):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.utime(path, (mtime, mtime))


# Fractional seconds, as a local editor would leave them
T1 = 1_136_073_600.25
T2 = 1_138_752_000.75


class _RemoteCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        base = Path(self.tmpdir.name).resolve()
        self.local = base / "local"
        self.remote = base / "remote"
        self.local.mkdir()
        self.remote.mkdir()
        self.sftp = FakeSFTPClient(base)
        self.fs = SftpTransport(self.sftp)
        self.manager = FakeManager(self.sftp)
        self.creds = Credentials(host="example.com")

    def tearDown(self):
        self.tmpdir.cleanup()


# ── Tests: transport primitives ───────────────────────────────────────────────

class TestSftpTransport(_RemoteCase):

    def test_resolve_relative_to_remote_cwd(self):
        self.assertEqual(self.fs.resolve("remote/../remote"), str(self.remote))

    def test_stat_reports_whole_seconds(self):
        write(self.remote / "f", "x", T1)
        info = self.fs.stat(str(self.remote / "f"))
        self.assertEqual(info.mtime_ns, int(T1) * 1_000_000_000)
        self.assertTrue(info.is_regular)

    def test_walk_order(self):
        write(self.remote / "b.txt", "b", T1)
        write(self.remote / "a" / "c.txt", "c", T1)
        rels = [rel for rel, _ in self.fs.walk(str(self.remote))]
        self.assertEqual(rels, ["a", "a/c.txt", "b.txt"])

    def test_mkdir_all_creates_parents(self):
        target = self.remote / "x" / "y" / "z"
        self.fs.mkdir_all(str(target))
        self.fs.mkdir_all(str(target))
        self.assertTrue(target.is_dir())

    def test_remove_directory(self):
        write(self.remote / "d" / "e" / "f.txt", "f", T1)
        write(self.remote / "d" / "g.txt", "g", T1)
        self.fs.remove_directory(str(self.remote / "d"))
        self.assertFalse((self.remote / "d").exists())

    def test_walk_of_missing_directory_raises_walk_error(self):
        with self.assertRaises(WalkError):
            list(self.fs.walk(str(self.remote / "missing")))

    def test_set_mtime_truncates_to_seconds(self):
        write(self.remote / "f", "x", T1)
        self.fs.set_mtime(str(self.remote / "f"), int(T2 * 1e9))
        self.assertEqual(os.stat(self.remote / "f").st_mtime, int(T2))


# ── Tests: remote mirror / sync ───────────────────────────────────────────────

class TestRemoteMirror(_RemoteCase):

    def test_push_then_second_run_is_idle(self):
        write(self.local / "a.txt", "alpha", T1)
        write(self.local / "d" / "b.txt", "beta", T2)

        first = sync_engine.mirror_remote(str(self.local), str(self.remote), self.creds,
                                          manager=self.manager)
        second = sync_engine.mirror_remote(str(self.local), str(self.remote), self.creds,
                                           manager=self.manager)

        self.assertEqual(first.copied, 2)
        self.assertEqual((self.remote / "d" / "b.txt").read_text(encoding="utf-8"), "beta")
        self.assertEqual(second.changes, 0)

    def test_push_prunes_remote(self):
        write(self.local / "a.txt", "alpha", T1)
        write(self.remote / "old" / "x.txt", "x", T1)

        sync_engine.mirror_remote(str(self.local), str(self.remote), self.creds,
                                  manager=self.manager)

        self.assertFalse((self.remote / "old").exists())

    def test_reverse_mirror_pulls(self):
        write(self.remote / "r.txt", "from remote", T2)
        write(self.local / "r.txt", "stale", T1)
        write(self.local / "local_only.txt", "l", T1)

        summary = sync_engine.mirror_remote(str(self.local), str(self.remote), self.creds,
                                            reverse=True, manager=self.manager)

        self.assertEqual((self.local / "r.txt").read_text(encoding="utf-8"), "from remote")
        self.assertFalse((self.local / "local_only.txt").exists())
        self.assertEqual(summary.overwritten, 1)

    @unittest.skipIf(sys.platform == "win32", "POSIX permission bits")
    def test_read_only_file_is_pushed_again_after_a_change(self):
        src = self.local / "ro.txt"
        write(src, "v1", T1)
        os.chmod(src, 0o444)
        sync_engine.mirror_remote(str(self.local), str(self.remote), self.creds,
                                  manager=self.manager)

        os.chmod(src, 0o644)
        write(src, "version2", T2)
        os.chmod(src, 0o444)
        summary = sync_engine.mirror_remote(str(self.local), str(self.remote), self.creds,
                                            manager=self.manager)

        self.assertEqual(summary.overwritten, 1)
        self.assertEqual((self.remote / "ro.txt").read_text(encoding="utf-8"), "version2")
        self.assertEqual(stat.S_IMODE(os.stat(self.remote / "ro.txt").st_mode), 0o444)

    def test_remote_sync_both_ways(self):
        write(self.local / "l.txt", "l", T1)
        write(self.remote / "r.txt", "r", T1)

        sync_engine.sync_remote(str(self.local), str(self.remote), self.creds,
                                manager=self.manager)
        again = sync_engine.sync_remote(str(self.local), str(self.remote), self.creds,
                                        manager=self.manager)

        self.assertTrue((self.remote / "l.txt").exists())
        self.assertTrue((self.local / "r.txt").exists())
        self.assertEqual(again.changes, 0)


if __name__ == "__main__":
    unittest.main()
