"""
Logging utilities for syncit
"""
from datetime import datetime


def log(msg: str):
    """Log a message with timestamp"""
    ts = datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def warn(msg: str):
    """Log a warning message"""
    log(f"⚠  {msg}")
