"""
Transport: the primitive operations a reconciliation needs from a tree
"""
import shutil
from abc import ABC, abstractmethod
from stat import S_IWUSR
from typing import BinaryIO, Iterator

from ..config import BUFFER_SIZE
from ..core.errors import TransferError
from ..core.fileset import EntryInfo


class Transport(ABC):
    """
    A walkable, mutable file tree. Implemented once per backend and
    consumed uniformly by the Reconciler.
    """

    name = "transport"

    # Finest modification-time step the backend preserves, in ns
    time_resolution_ns = 1_000

    # ── paths ───────────────────────────────────────────────────────────────

    @abstractmethod
    def resolve(self, path: str) -> str:
        """Normalise *path* into the absolute form used as a root."""

    @abstractmethod
    def join(self, root: str, rel: str) -> str:
        """Join a root and a POSIX relative path."""

    # ── reading ─────────────────────────────────────────────────────────────

    @abstractmethod
    def stat(self, path: str) -> EntryInfo:
        """Metadata of *path*; symlinks are not followed."""

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
            return True
        except FileNotFoundError:
            return False

    @abstractmethod
    def walk(self, root: str) -> Iterator[tuple[str, EntryInfo]]:
        """
        Lazily yield (relative_path, info) for every descendant of *root*,
        depth-first with siblings in lexical order. The root itself is not
        yielded. Raises WalkError when a directory cannot be listed.
        """

    @abstractmethod
    def open_for_read(self, path: str) -> BinaryIO:
        ...

    # ── writing ─────────────────────────────────────────────────────────────

    @abstractmethod
    def mkdir_all(self, path: str):
        """Create *path* and any missing parents; an existing dir is fine."""

    @abstractmethod
    def create_or_truncate(self, path: str) -> BinaryIO:
        ...

    @abstractmethod
    def remove(self, path: str):
        """Remove a single file."""

    @abstractmethod
    def remove_directory(self, path: str):
        """Remove a directory and everything beneath it."""

    @abstractmethod
    def set_mtime(self, path: str, mtime_ns: int):
        ...

    @abstractmethod
    def chmod(self, path: str, mode: int):
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


def transfer_file(src: Transport, src_path: str,
                  dst: Transport, dst_path: str,
                  info: EntryInfo, keep_permissions: bool = True) -> int:
    """
    Stream one regular file from *src* to *dst*, then stamp the source
    mtime (and permission bits) onto the copy. Returns bytes written.
    Any failure is raised as TransferError.
    """
    if not info.is_regular:
        raise TransferError(f"'{src_path}' is not a regular file")
    try:
        _make_writable(dst, dst_path)
        with src.open_for_read(src_path) as fsrc, dst.create_or_truncate(dst_path) as fdst:
            shutil.copyfileobj(fsrc, fdst, BUFFER_SIZE)
        dst.set_mtime(dst_path, info.mtime_ns)
        if keep_permissions:
            dst.chmod(dst_path, info.mode)
    except TransferError:
        raise
    except (OSError, EOFError) as exc:
        raise TransferError(f"copy '{src_path}' → '{dst_path}' failed: {exc}") from exc
    return info.size


def _make_writable(fs: Transport, path: str):
    """Give an existing read-only file its owner write bit back."""
    try:
        current = fs.stat(path)
    except FileNotFoundError:
        return
    if current.is_regular and not current.mode & S_IWUSR:
        fs.chmod(path, current.mode | S_IWUSR)
