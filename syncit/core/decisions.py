"""
Decision records produced per entry, and the run summary built from them
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Action(str, Enum):
    """What the reconciler did (or, in dry-run, would do) with one entry."""

    CREATE_DIR = "create_dir"
    COPY = "copy"
    OVERWRITE = "overwrite"
    DELETE = "delete"
    SKIP = "skip"
    SKIP_HIDDEN = "skip_hidden"
    SKIP_NON_REGULAR = "skip_non_regular"
    PRUNE_ERROR = "prune_error"


@dataclass
class Decision:
    """One entry's outcome."""

    action: Action
    path: str
    """Root-relative POSIX path"""

    size: int = 0
    reason: str = ""
    direction: str = ""
    """'->' or '<-' for two-way runs, empty otherwise"""

    counted: bool = True
    """Whether the entry contributes to item/byte totals"""

    error: Optional[Exception] = None


@dataclass
class Summary:
    item_count: int = 0
    byte_count: int = 0
    elapsed: float = 0.0
    created_dirs: int = 0
    copied: int = 0
    overwritten: int = 0
    deleted: int = 0
    skipped: int = 0
    prune_errors: int = 0
    errors: list = field(default_factory=list)

    @property
    def changes(self) -> int:
        """Number of file copies, overwrites and deletions."""
        return self.copied + self.overwritten + self.deleted
