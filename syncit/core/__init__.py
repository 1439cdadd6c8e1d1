"""Core functionality"""
from .compare import deep_equal, supersedes, unequal, younger
from .decisions import Action, Decision, Summary
from .errors import (
    InvalidRoot,
    PruneError,
    SyncitError,
    TransferError,
    TransportError,
    WalkError,
)
from .fileset import EntryInfo, FileSet
from .reconciler import ReconcileOptions, Reconciler
from .ssh_manager import SSHManager

__all__ = [
    "unequal", "younger", "supersedes", "deep_equal",
    "Action", "Decision", "Summary",
    "SyncitError", "InvalidRoot", "WalkError", "TransferError",
    "PruneError", "TransportError",
    "EntryInfo", "FileSet",
    "ReconcileOptions", "Reconciler",
    "SSHManager",
]
