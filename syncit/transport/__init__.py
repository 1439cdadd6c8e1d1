"""Transports (local filesystem, SFTP)"""
from .base import Transport, transfer_file
from .local import LocalTransport
from .sftp import SftpTransport

__all__ = ["Transport", "transfer_file", "LocalTransport", "SftpTransport"]
