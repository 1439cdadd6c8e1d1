"""
Error taxonomy for reconciliation runs
"""


class SyncitError(Exception):
    """Base class for every error raised by syncit."""


class InvalidRoot(SyncitError):
    """A root is missing, is a file, or source and destination coincide."""


class WalkError(SyncitError):
    """Enumerating a tree failed."""


class TransferError(SyncitError):
    """Opening, reading, writing or stamping a single entry failed."""


class PruneError(SyncitError):
    """Deleting one stale destination entry failed. Never fatal."""


class TransportError(SyncitError):
    """The remote session could not be established or broke down."""
