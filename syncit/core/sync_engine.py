"""
Entry points: copy, mirror and sync, locally or against an SFTP server
"""
from contextlib import contextmanager
from typing import Optional

from ..config import Credentials
from ..transport.local import LocalTransport
from .decisions import Summary
from .reconciler import ReconcileOptions, Reconciler
from .ssh_manager import SSHManager


def copy(src: str, dst: str, dry_run: bool = False, clean: bool = True,
         verbose: bool = False) -> Summary:
    """Copy directory *src* to *dst*, wiping *dst* first when *clean*."""
    opts = ReconcileOptions(dry_run=dry_run, clean_destination=clean)
    local = LocalTransport()
    return Reconciler(local, local, opts, verbose=verbose).copy(src, dst)


def mirror(src: str, dst: str, dry_run: bool = False, clean: bool = True,
           skip_hidden: bool = False, deep_compare: bool = False,
           force_write: bool = False, verbose: bool = False) -> Summary:
    """Mirror directory *src* to *dst*; *clean* prunes what *src* lacks."""
    opts = ReconcileOptions(dry_run=dry_run, clean_destination=clean,
                            skip_hidden=skip_hidden, deep_compare=deep_compare,
                            force_write=force_write)
    local = LocalTransport()
    return Reconciler(local, local, opts, verbose=verbose).mirror(src, dst)


def sync(src: str, dst: str, dry_run: bool = False, skip_hidden: bool = False,
         verbose: bool = False) -> Summary:
    """Two-way sync of *src* and *dst*; never deletes."""
    opts = ReconcileOptions(dry_run=dry_run, skip_hidden=skip_hidden)
    local = LocalTransport()
    return Reconciler(local, local, opts, verbose=verbose).sync(src, dst)


def mirror_remote(local: str, remote: str, credentials: Credentials,
                  reverse: bool = False, dry_run: bool = False,
                  skip_hidden: bool = False, clean: bool = True,
                  verbose: bool = False,
                  manager: Optional[SSHManager] = None) -> Summary:
    """
    Mirror *local* to *remote* over SFTP, or *remote* to *local* when
    *reverse*. The session is opened (and closed) here unless an already
    connected *manager* is passed in.
    """
    opts = ReconcileOptions(dry_run=dry_run, clean_destination=clean,
                            skip_hidden=skip_hidden)
    with _session(credentials, manager) as mgr:
        local_fs, remote_fs = LocalTransport(), mgr.transport()
        if reverse:
            return Reconciler(remote_fs, local_fs, opts, verbose=verbose).mirror(remote, local)
        return Reconciler(local_fs, remote_fs, opts, verbose=verbose).mirror(local, remote)


def sync_remote(local: str, remote: str, credentials: Credentials,
                dry_run: bool = False, skip_hidden: bool = False,
                verbose: bool = False,
                manager: Optional[SSHManager] = None) -> Summary:
    """Two-way sync between *local* and *remote* over SFTP."""
    opts = ReconcileOptions(dry_run=dry_run, skip_hidden=skip_hidden)
    with _session(credentials, manager) as mgr:
        return Reconciler(LocalTransport(), mgr.transport(), opts,
                          verbose=verbose).sync(local, remote)


@contextmanager
def _session(credentials: Credentials, manager: Optional[SSHManager]):
    """Use *manager* as-is, or own a fresh connection for the block."""
    if manager is not None:
        yield manager
        return
    mgr = SSHManager(credentials).connect()
    try:
        yield mgr
    finally:
        mgr.disconnect()
