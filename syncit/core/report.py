"""
Reporting: turns the reconciler's decision stream into log lines and a Summary
"""
import time

from .decisions import Action, Decision, Summary
from ..utils.file_utils import byte_count
from ..utils.logging import log, warn

_TAGS = {
    Action.CREATE_DIR: "MKDIR",
    Action.COPY: "COPY",
    Action.OVERWRITE: "OVERWRITE",
    Action.DELETE: "DELETE",
    Action.SKIP: "SKIP",
    Action.SKIP_HIDDEN: "SKIP-HIDDEN",
    Action.SKIP_NON_REGULAR: "SKIP-NONREG",
}

# Only printed with --verbose
_QUIET = frozenset({Action.CREATE_DIR, Action.SKIP, Action.SKIP_HIDDEN, Action.SKIP_NON_REGULAR})


class Reporter:
    """
    Consumes Decision records: logs each one and accumulates the Summary.
    Holds its own verbosity so nothing about output lives in module state.
    """

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        self.verbose = verbose
        self.dry_run = dry_run
        self.summary = Summary()
        self.decisions: list[Decision] = []
        self._t0 = time.monotonic()

    def start(self, title: str, src: str, dst: str, arrow: str = "-->"):
        self._t0 = time.monotonic()
        print(f"\n{'=' * 64}")
        print(f"  {title}")
        print(f"  '{src}' {arrow} '{dst}'")
        print(f"{'=' * 64}")
        if self.dry_run:
            print("  *** DRY-RUN — no files will be changed ***")
        print()

    def note(self, msg: str):
        if self.verbose:
            log(msg)

    def record(self, decision: Decision):
        self.decisions.append(decision)
        s = self.summary

        if decision.counted:
            s.item_count += 1
            s.byte_count += decision.size

        action = decision.action
        if action is Action.CREATE_DIR:
            s.created_dirs += 1
        elif action is Action.COPY:
            s.copied += 1
        elif action is Action.OVERWRITE:
            s.overwritten += 1
        elif action is Action.DELETE:
            s.deleted += 1
        elif action is Action.PRUNE_ERROR:
            s.prune_errors += 1
            s.errors.append(decision.error)
        else:
            s.skipped += 1

        if action is Action.PRUNE_ERROR:
            warn(f"could not delete '{decision.path}': {decision.error}")
            return
        if action in _QUIET and not self.verbose:
            return

        tag = _TAGS[action]
        if self.dry_run and action not in _QUIET:
            tag += "-DRY"
        direction = f"{decision.direction} " if decision.direction else ""
        reason = f"  ({decision.reason})" if decision.reason else ""
        log(f"  [{tag}] {direction}{decision.path}{reason}")

    def finish(self) -> Summary:
        s = self.summary
        s.elapsed = time.monotonic() - self._t0
        rate = byte_count(int(s.byte_count / s.elapsed)) if s.elapsed > 0 else "-"

        print()
        print(f"{'─' * 64}")
        print(" SUMMARY")
        print(f"  Items       : {s.item_count} ({byte_count(s.byte_count)})")
        print(f"  Copied      : {s.copied}")
        print(f"  Overwritten : {s.overwritten}")
        print(f"  Deleted     : {s.deleted}")
        print(f"  Dirs made   : {s.created_dirs}")
        print(f"  Skipped     : {s.skipped}")
        if s.prune_errors:
            print(f"  Prune errors: {s.prune_errors}")
        print(f"  Elapsed     : {s.elapsed:.2f}s ({rate}/s)")
        print(f"{'─' * 64}")
        return s
