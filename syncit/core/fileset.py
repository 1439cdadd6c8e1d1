"""
FileSet: relative-path → metadata snapshot of one directory tree
"""
import stat
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional

from ..config import DEFAULT_MODE_FILE
from .errors import InvalidRoot

if TYPE_CHECKING:
    from ..transport.base import Transport


@dataclass(frozen=True)
class EntryInfo:
    """Metadata of one tree entry, independent of the backend it came from."""

    size: int
    mtime_ns: int
    is_dir: bool
    is_regular: bool
    mode: int = DEFAULT_MODE_FILE

    @classmethod
    def from_stat(cls, st) -> "EntryInfo":
        """Build from an ``os.stat_result`` or a paramiko ``SFTPAttributes``."""
        st_mode = st.st_mode or 0
        mtime_ns = getattr(st, "st_mtime_ns", None)
        if mtime_ns is None:
            # SFTP attributes only carry whole seconds
            mtime_ns = int(st.st_mtime or 0) * 1_000_000_000
        return cls(
            size=st.st_size or 0,
            mtime_ns=mtime_ns,
            is_dir=stat.S_ISDIR(st_mode),
            is_regular=stat.S_ISREG(st_mode),
            mode=stat.S_IMODE(st_mode),
        )


class FileSet:
    """
    Snapshot of a tree rooted at *basepath*.

    Keys are root-relative POSIX paths; the root itself is never a key.
    Directories and files share the same map.
    """

    def __init__(self, transport: "Transport", basepath: str):
        self.transport = transport
        self.basepath = basepath
        self.paths: dict[str, EntryInfo] = {}

    @classmethod
    def build(cls, transport: "Transport", root: str) -> "FileSet":
        """Create an empty set for *root*; the root must be an existing directory."""
        root = transport.resolve(root)
        try:
            info = transport.stat(root)
        except FileNotFoundError:
            raise InvalidRoot(f"specified directory '{root}' does not exist")
        except OSError as exc:
            raise InvalidRoot(f"cannot stat '{root}': {exc}") from exc
        if not info.is_dir:
            raise InvalidRoot(f"specified directory '{root}' is a file")
        return cls(transport, root)

    def populate(self) -> "FileSet":
        """Walk the whole tree and record every descendant."""
        for rel, info in self.transport.walk(self.basepath):
            self.paths[rel] = info
        return self

    def add(self, rel: str, info: EntryInfo):
        self.paths[rel] = info

    def get(self, rel: str) -> Optional[EntryInfo]:
        return self.paths.get(rel)

    def contains(self, rel: str) -> bool:
        return rel in self.paths

    def __contains__(self, rel: str) -> bool:
        return rel in self.paths

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __repr__(self) -> str:
        return f"FileSet({self.basepath!r}, {len(self.paths)} entries)"
