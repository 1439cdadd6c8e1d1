"""
SSH session manager: authentication, host-key checking and SFTP setup
"""
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import paramiko

from .. import config as _cfg
from ..config import Credentials
from ..utils.logging import log
from ..utils.retry import retried
from .errors import TransportError

if TYPE_CHECKING:
    from ..transport.sftp import SftpTransport


class SSHManager:
    """
    Wraps paramiko SSHClient + SFTPClient.
    Host keys must already be known (system known_hosts or the file named
    in the credentials); unknown hosts are rejected. Keys come from the
    SSH agent and/or an explicit key file.
    """

    def __init__(self, credentials: Credentials):
        self.credentials = credentials
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    # ── connection ─────────────────────────────────────────────────────────

    def connect(self) -> "SSHManager":
        try:
            self._connect()
        except (paramiko.SSHException, OSError) as exc:
            self._close_quietly()
            raise TransportError(f"SSH connection to {self.credentials.host} failed: {exc}") from exc
        return self

    @retried
    def _connect(self):
        creds = self.credentials
        log(f"[SSH] connecting to {creds.user}@{creds.host}:{creds.port} …")
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        if creds.known_hosts and Path(creds.known_hosts).is_file():
            client.load_host_keys(creds.known_hosts)
        client.set_missing_host_key_policy(paramiko.RejectPolicy())

        kw: dict = dict(hostname=creds.host, port=creds.port, username=creds.user,
                        timeout=creds.timeout, banner_timeout=creds.timeout,
                        auth_timeout=creds.timeout, allow_agent=True)
        if creds.key_filename:
            kw["key_filename"] = creds.key_filename

        try:
            client.connect(**kw)
        except Exception:
            client.close()
            raise

        transport = client.get_transport()
        transport.set_keepalive(_cfg.SSH_KEEPALIVE)

        self._ssh = client
        self._sftp = client.open_sftp()
        log(f"[SSH] SFTP connection established; {creds}")

    def _close_quietly(self):
        for closable in (self._sftp, self._ssh):
            if closable is None:
                continue
            try:
                closable.close()
            except (OSError, paramiko.SSHException):
                pass
        self._ssh = None
        self._sftp = None

    def disconnect(self):
        if self._ssh is not None:
            self._close_quietly()
            log("[SSH] disconnected.")

    def is_active(self) -> bool:
        return bool(self._ssh and self._ssh.get_transport() and self._ssh.get_transport().is_active())

    # ── transport ───────────────────────────────────────────────────────────

    @property
    def sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise TransportError("SFTP session is not connected")
        return self._sftp

    def transport(self) -> "SftpTransport":
        from ..transport.sftp import SftpTransport
        return SftpTransport(self.sftp)

    def __enter__(self) -> "SSHManager":
        return self.connect()

    def __exit__(self, *exc_info):
        self.disconnect()
