"""
Path and size helpers
"""


def byte_count(b: int) -> str:
    """Human-readable size with 1024-based scaling: '512 B', '1.5 kB', '3.0 MB'."""
    unit = 1024
    if b < unit:
        return f"{b} B"
    div, exp = unit, 0
    n = b // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{b / div:.1f} {'kMGTPE'[exp]}B"


def is_hidden(rel_path: str) -> bool:
    """True if any segment of a POSIX relative path starts with '.'."""
    return any(part.startswith(".") for part in rel_path.split("/") if part)
