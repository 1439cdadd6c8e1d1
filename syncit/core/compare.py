"""
Comparison rules deciding whether a source entry supersedes its destination
"""
from typing import TYPE_CHECKING, Optional

from ..config import BUFFER_SIZE, TIME_GRANULARITY_NS
from .fileset import EntryInfo

if TYPE_CHECKING:
    from ..transport.base import Transport


def _truncate(mtime_ns: int, granularity_ns: int) -> int:
    return mtime_ns - mtime_ns % granularity_ns


def unequal(src: EntryInfo, dst: EntryInfo,
            granularity_ns: int = TIME_GRANULARITY_NS) -> bool:
    """True if *src* is newer than *dst* or the sizes differ."""
    src_t = _truncate(src.mtime_ns, granularity_ns)
    dst_t = _truncate(dst.mtime_ns, granularity_ns)
    return src_t > dst_t or src.size != dst.size


def younger(src: EntryInfo, dst: EntryInfo,
            granularity_ns: int = TIME_GRANULARITY_NS) -> bool:
    """
    True only if *src* is newer than *dst*; size is ignored.
    Sync uses supersedes instead, which adds a same-timestamp size tie-break.
    """
    return _truncate(src.mtime_ns, granularity_ns) > _truncate(dst.mtime_ns, granularity_ns)


def supersedes(src: EntryInfo, dst: EntryInfo,
               granularity_ns: int = TIME_GRANULARITY_NS) -> bool:
    """
    Two-way tie-break: *src* wins if it is younger, or if both carry the
    same timestamp but differ in size. An older *src* never wins.
    """
    src_t = _truncate(src.mtime_ns, granularity_ns)
    dst_t = _truncate(dst.mtime_ns, granularity_ns)
    return src_t > dst_t or (src_t == dst_t and src.size != dst.size)


def granularity_for(*transports: "Transport") -> int:
    """The coarsest timestamp resolution among *transports*, in ns."""
    return max([TIME_GRANULARITY_NS] + [t.time_resolution_ns for t in transports])


def deep_equal(path_a: str, path_b: str,
               fs_a: Optional["Transport"] = None,
               fs_b: Optional["Transport"] = None) -> bool:
    """
    Byte-level comparison; modification times are ignored.
    Sizes are compared first so mismatching files are never read.
    """
    if fs_a is None or fs_b is None:
        from ..transport.local import LocalTransport
        fs_a = fs_a or LocalTransport()
        fs_b = fs_b or LocalTransport()

    if fs_a.stat(path_a).size != fs_b.stat(path_b).size:
        return False

    with fs_a.open_for_read(path_a) as fa, fs_b.open_for_read(path_b) as fb:
        while True:
            chunk_a = fa.read(BUFFER_SIZE)
            chunk_b = fb.read(BUFFER_SIZE)
            if chunk_a != chunk_b:
                return False
            if not chunk_a:
                return True
