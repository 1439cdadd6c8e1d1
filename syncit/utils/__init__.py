"""Utilities (logging, retry, size formatting)"""
from .logging import log, warn
from .retry import retried
from .file_utils import byte_count, is_hidden

__all__ = [
    "log", "warn",
    "retried",
    "byte_count", "is_hidden",
]
