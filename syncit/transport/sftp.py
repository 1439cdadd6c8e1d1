"""
SFTP transport over an already-authenticated paramiko session
"""
import posixpath
import stat
from typing import BinaryIO, Iterator

import paramiko

from ..config import DEFAULT_MODE_DIR
from ..core.errors import WalkError
from ..core.fileset import EntryInfo
from .base import Transport


class SftpTransport(Transport):
    """
    Maps the transport primitives onto paramiko.SFTPClient calls.
    Never connects or authenticates; see core.ssh_manager for that.
    """

    name = "sftp"
    # SFTPv3 attributes carry whole-second mtimes
    time_resolution_ns = 1_000_000_000

    def __init__(self, sftp: paramiko.SFTPClient):
        self._sftp = sftp

    def resolve(self, path: str) -> str:
        if not posixpath.isabs(path):
            path = posixpath.join(self._sftp.normalize("."), path)
        return posixpath.normpath(path)

    def join(self, root: str, rel: str) -> str:
        if not rel:
            return root
        return posixpath.join(root, rel)

    def stat(self, path: str) -> EntryInfo:
        return EntryInfo.from_stat(self._sftp.lstat(path))

    def walk(self, root: str) -> Iterator[tuple[str, EntryInfo]]:
        yield from self._walk(root, "")

    def _walk(self, path: str, prefix: str) -> Iterator[tuple[str, EntryInfo]]:
        try:
            attrs = sorted(self._sftp.listdir_attr(path), key=lambda a: a.filename)
        except (IOError, paramiko.SSHException) as exc:
            raise WalkError(f"cannot list remote '{path}': {exc}") from exc

        for attr in attrs:
            rel = f"{prefix}{attr.filename}"
            info = EntryInfo.from_stat(attr)
            yield rel, info
            if stat.S_ISDIR(attr.st_mode or 0):
                yield from self._walk(posixpath.join(path, attr.filename), rel + "/")

    def open_for_read(self, path: str) -> BinaryIO:
        f = self._sftp.open(path, "rb")
        f.prefetch()
        return f

    def mkdir_all(self, path: str):
        if self._is_dir(path):
            return
        parent = posixpath.dirname(path.rstrip("/"))
        if parent and parent != path:
            self.mkdir_all(parent)
        try:
            self._sftp.mkdir(path, mode=DEFAULT_MODE_DIR)
        except IOError:
            if not self._is_dir(path):
                raise

    def _is_dir(self, path: str) -> bool:
        try:
            return stat.S_ISDIR(self._sftp.stat(path).st_mode or 0)
        except FileNotFoundError:
            return False

    def create_or_truncate(self, path: str) -> BinaryIO:
        f = self._sftp.open(path, "wb")
        f.set_pipelined(True)
        return f

    def remove(self, path: str):
        self._sftp.remove(path)

    def remove_directory(self, path: str):
        # children first, deepest last in reverse walk order
        entries = list(self.walk(path))
        for rel, info in reversed(entries):
            full = posixpath.join(path, rel)
            if info.is_dir:
                self._sftp.rmdir(full)
            else:
                self._sftp.remove(full)
        self._sftp.rmdir(path)

    def set_mtime(self, path: str, mtime_ns: int):
        secs = mtime_ns // 1_000_000_000
        self._sftp.utime(path, (secs, secs))

    def chmod(self, path: str, mode: int):
        self._sftp.chmod(path, mode)
