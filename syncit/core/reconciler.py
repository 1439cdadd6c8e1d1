"""
Reconciler: copy, mirror and two-way sync between two transports
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from .compare import deep_equal, granularity_for, supersedes, unequal
from .decisions import Action, Decision, Summary
from .errors import InvalidRoot, PruneError, TransferError, WalkError
from .fileset import EntryInfo, FileSet
from .report import Reporter
from ..utils.file_utils import is_hidden

if TYPE_CHECKING:
    from ..transport.base import Transport

Rule = Callable[[EntryInfo, EntryInfo, int], bool]


@dataclass(frozen=True)
class ReconcileOptions:
    """Per-call switches; never mutated during a run."""

    dry_run: bool = False
    clean_destination: bool = False
    skip_hidden: bool = False
    deep_compare: bool = False
    force_write: bool = False
    keep_permissions: bool = True


class Reconciler:
    """
    Drives copy / mirror / sync from *src_fs* to *dst_fs*.

    The algorithm exists once; local-to-local, local-to-remote and
    remote-to-local runs differ only in the transports handed in.
    Each public call gets a fresh Reporter, kept as ``last_report``.
    """

    def __init__(self, src_fs: "Transport", dst_fs: "Transport",
                 options: Optional[ReconcileOptions] = None,
                 verbose: bool = False):
        self.src_fs = src_fs
        self.dst_fs = dst_fs
        self.options = options or ReconcileOptions()
        self.verbose = verbose
        self.granularity_ns = granularity_for(src_fs, dst_fs)
        self.last_report: Optional[Reporter] = None

    # ── roots ───────────────────────────────────────────────────────────────

    def _prepare(self, src_root: str, dst_root: str) -> tuple[FileSet, FileSet, bool]:
        """
        Validate both roots. Returns (source set, destination set, whether
        the destination exists). A missing destination is created unless
        this is a dry run.
        """
        src_set = FileSet.build(self.src_fs, src_root)
        dst = self.dst_fs.resolve(dst_root)

        same_backend = self.src_fs is self.dst_fs or self.src_fs.name == self.dst_fs.name == "local"
        if same_backend and src_set.basepath == dst:
            raise InvalidRoot("source and destination path are identical")

        try:
            dst_info = self.dst_fs.stat(dst)
        except FileNotFoundError:
            dst_info = None
        except OSError as exc:
            raise InvalidRoot(f"cannot stat '{dst}': {exc}") from exc

        if dst_info is not None:
            if not dst_info.is_dir:
                raise InvalidRoot(f"specified directory '{dst}' is a file")
            return src_set, FileSet(self.dst_fs, dst), True

        if self.options.dry_run:
            return src_set, FileSet(self.dst_fs, dst), False

        try:
            self.dst_fs.mkdir_all(dst)
        except OSError as exc:
            raise InvalidRoot(f"cannot create destination '{dst}': {exc}") from exc
        return src_set, FileSet.build(self.dst_fs, dst), True

    # ── primitives gated by dry-run ─────────────────────────────────────────

    def _mkdir(self, fs: "Transport", path: str):
        if self.options.dry_run:
            return
        try:
            fs.mkdir_all(path)
        except OSError as exc:
            raise TransferError(f"cannot create directory '{path}': {exc}") from exc

    def _transfer(self, src_fs: "Transport", src_path: str,
                  dst_fs: "Transport", dst_path: str, info: EntryInfo):
        if self.options.dry_run:
            return
        from ..transport.base import transfer_file
        transfer_file(src_fs, src_path, dst_fs, dst_path, info,
                      keep_permissions=self.options.keep_permissions)

    def _contents_equal(self, src_fs: "Transport", src_path: str,
                        dst_fs: "Transport", dst_path: str) -> bool:
        try:
            return deep_equal(src_path, dst_path, src_fs, dst_fs)
        except OSError as exc:
            raise TransferError(f"deep compare of '{src_path}' failed: {exc}") from exc

    # ── one directed pass ───────────────────────────────────────────────────

    def _pass(self, rep: Reporter,
              src_fs: "Transport", src_root: str,
              dst_fs: "Transport", dst_set: FileSet,
              rule: Rule,
              record_into: Optional[FileSet] = None,
              exclude: Optional[set] = None,
              copied: Optional[set] = None,
              direction: str = ""):
        """
        Walk *src_root* depth-first and bring *dst_set*'s tree up to date
        with it. Entries are recorded into *record_into* as they are seen;
        paths in *exclude* are neither written nor counted; every file
        written and directory created is added to *copied*.
        """
        opts = self.options

        for rel, info in src_fs.walk(src_root):
            if opts.skip_hidden and is_hidden(rel):
                rep.record(Decision(Action.SKIP_HIDDEN, rel, direction=direction, counted=False))
                continue

            if record_into is not None:
                record_into.add(rel, info)

            if exclude and rel in exclude:
                rep.record(Decision(Action.SKIP, rel, size=info.size, counted=False,
                                    reason="just copied the other way", direction=direction))
                continue

            dst_path = dst_fs.join(dst_set.basepath, rel)
            dst_info = dst_set.get(rel)

            if info.is_dir:
                if dst_info is not None and dst_info.is_dir:
                    rep.record(Decision(Action.SKIP, rel, reason="directory exists", direction=direction))
                    continue
                self._mkdir(dst_fs, dst_path)
                if copied is not None:
                    copied.add(rel)
                rep.record(Decision(Action.CREATE_DIR, rel, direction=direction))
                continue

            if not info.is_regular:
                rep.record(Decision(Action.SKIP_NON_REGULAR, rel, direction=direction, counted=False))
                continue

            src_path = src_fs.join(src_root, rel)

            if dst_info is None:
                action, reason = Action.COPY, ""
            elif dst_info.is_dir:
                raise TransferError(
                    f"'{rel}' is a file in '{src_root}' but a directory in '{dst_set.basepath}'")
            elif opts.force_write:
                action, reason = Action.OVERWRITE, "forced"
            elif not rule(info, dst_info, self.granularity_ns):
                action, reason = Action.SKIP, "destination up to date"
            elif opts.deep_compare and self._contents_equal(src_fs, src_path, dst_fs, dst_path):
                action, reason = Action.SKIP, "identical content"
            else:
                action, reason = Action.OVERWRITE, ""

            if action is not Action.SKIP:
                self._transfer(src_fs, src_path, dst_fs, dst_path, info)
                if copied is not None:
                    copied.add(rel)
            rep.record(Decision(action, rel, size=info.size, reason=reason, direction=direction))

    # ── pruning ─────────────────────────────────────────────────────────────

    def _prune(self, rep: Reporter, src_set: FileSet, dst_set: FileSet):
        """
        Delete every destination entry that the source does not have.
        Failures are recorded and the loop carries on.
        """
        opts = self.options
        removed_dirs: list[str] = []
        hidden = [p for p in dst_set if is_hidden(p)] if opts.skip_hidden else []

        for rel in sorted(dst_set):
            if rel in src_set:
                continue
            if any(rel.startswith(d + "/") for d in removed_dirs):
                continue  # parent already gone
            if opts.skip_hidden and is_hidden(rel):
                rep.record(Decision(Action.SKIP_HIDDEN, rel, counted=False))
                continue

            info = dst_set.get(rel)
            if info.is_dir and any(h.startswith(rel + "/") for h in hidden):
                rep.record(Decision(Action.SKIP, rel, reason="holds hidden entries", counted=False))
                continue

            path = self.dst_fs.join(dst_set.basepath, rel)
            if not opts.dry_run:
                try:
                    if info.is_dir:
                        self.dst_fs.remove_directory(path)
                    else:
                        self.dst_fs.remove(path)
                except (OSError, WalkError) as exc:
                    err = PruneError(f"'{path}': {exc}")
                    rep.record(Decision(Action.PRUNE_ERROR, rel, counted=False, error=err))
                    continue
            if info.is_dir:
                removed_dirs.append(rel)
            rep.record(Decision(Action.DELETE, rel, size=info.size, counted=False,
                                reason="not in source"))

    # ── operations ──────────────────────────────────────────────────────────

    def _reporter(self) -> Reporter:
        self.last_report = Reporter(verbose=self.verbose, dry_run=self.options.dry_run)
        return self.last_report

    def copy(self, src_root: str, dst_root: str) -> Summary:
        """
        Plain copy: every directory is created and every regular file is
        written, whatever the destination holds. With clean_destination the
        destination is removed wholesale first.
        """
        rep = self._reporter()
        src_set, dst_set, dst_present = self._prepare(src_root, dst_root)
        rep.start("COPY", src_set.basepath, dst_set.basepath)

        if self.options.clean_destination and dst_present:
            rep.note(f"[copy] deleting '{dst_set.basepath}' for a clean copy")
            if not self.options.dry_run:
                try:
                    self.dst_fs.remove_directory(dst_set.basepath)
                    self.dst_fs.mkdir_all(dst_set.basepath)
                except OSError as exc:
                    raise TransferError(f"cannot clear '{dst_set.basepath}': {exc}") from exc

        # An empty set makes the pass copy everything
        self._pass(rep, self.src_fs, src_set.basepath, self.dst_fs,
                   FileSet(self.dst_fs, dst_set.basepath),
                   rule=lambda *_: True)
        return rep.finish()

    def mirror(self, src_root: str, dst_root: str) -> Summary:
        """
        One-way mirror: the destination converges toward the source.
        With clean_destination, destination-only entries are pruned.
        """
        rep = self._reporter()
        src_set, dst_set, dst_present = self._prepare(src_root, dst_root)
        rep.start("MIRROR", src_set.basepath, dst_set.basepath)

        if dst_present:
            dst_set.populate()
        rep.note(f"[mirror] destination holds {len(dst_set)} entries")

        self._pass(rep, self.src_fs, src_set.basepath, self.dst_fs, dst_set,
                   rule=unequal, record_into=src_set)

        if self.options.clean_destination:
            self._prune(rep, src_set, dst_set)
        return rep.finish()

    def sync(self, root_a: str, root_b: str) -> Summary:
        """
        Two-way sync. A → B first, then B → A; anything pushed in the first
        phase is not pulled back in the second. Nothing is deleted.
        """
        rep = self._reporter()
        a_set, b_set, b_present = self._prepare(root_a, root_b)
        rep.start("SYNC", a_set.basepath, b_set.basepath, arrow="<-->")

        if b_present:
            b_set.populate()

        pushed: set = set()
        self._pass(rep, self.src_fs, a_set.basepath, self.dst_fs, b_set,
                   rule=supersedes, record_into=a_set, copied=pushed, direction="->")

        if b_present:
            self._pass(rep, self.dst_fs, b_set.basepath, self.src_fs, a_set,
                       rule=supersedes, exclude=pushed, direction="<-")
        return rep.finish()
