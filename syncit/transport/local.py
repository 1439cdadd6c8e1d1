"""
Local filesystem transport
"""
import os
import shutil
import sys
from pathlib import Path
from typing import BinaryIO, Iterator

from ..config import DEFAULT_MODE_DIR
from ..core.errors import WalkError
from ..core.fileset import EntryInfo
from .base import Transport


class LocalTransport(Transport):
    """Maps the transport primitives straight onto os / shutil calls."""

    name = "local"
    time_resolution_ns = 1_000

    def resolve(self, path: str) -> str:
        return str(Path(path).expanduser().resolve())

    def join(self, root: str, rel: str) -> str:
        if not rel:
            return root
        return os.path.join(root, *rel.split("/"))

    def stat(self, path: str) -> EntryInfo:
        return EntryInfo.from_stat(os.lstat(path))

    def walk(self, root: str) -> Iterator[tuple[str, EntryInfo]]:
        yield from self._walk(root, "")

    def _walk(self, path: str, prefix: str) -> Iterator[tuple[str, EntryInfo]]:
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise WalkError(f"cannot list '{path}': {exc}") from exc

        for entry in entries:
            rel = f"{prefix}{entry.name}"
            try:
                info = EntryInfo.from_stat(entry.stat(follow_symlinks=False))
            except FileNotFoundError:
                # vanished between listing and stat
                continue
            except OSError as exc:
                raise WalkError(f"cannot stat '{entry.path}': {exc}") from exc
            yield rel, info
            if info.is_dir:
                yield from self._walk(entry.path, rel + "/")

    def open_for_read(self, path: str) -> BinaryIO:
        return open(path, "rb")

    def mkdir_all(self, path: str):
        os.makedirs(path, mode=DEFAULT_MODE_DIR, exist_ok=True)

    def create_or_truncate(self, path: str) -> BinaryIO:
        return open(path, "wb")

    def remove(self, path: str):
        os.remove(path)

    def remove_directory(self, path: str):
        shutil.rmtree(path)

    def set_mtime(self, path: str, mtime_ns: int):
        os.utime(path, ns=(mtime_ns, mtime_ns))

    def chmod(self, path: str, mode: int):
        if sys.platform == "win32":
            return
        os.chmod(path, mode)
