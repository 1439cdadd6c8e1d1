"""
Configuration constants and .syncit profile loading
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS
# ══════════════════════════════════════════════════════════════════════════════

DEFAULT_MODE_DIR = 0o755   # rwxr-xr-x
DEFAULT_MODE_FILE = 0o644  # rw-r--r--

# Chunk size for streamed copies and byte-level comparison
BUFFER_SIZE = 4096

# Timestamps are compared at microsecond granularity
TIME_GRANULARITY_NS = 1_000

SSH_PORT = 22
SSH_USER = "root"
SSH_TIMEOUT = 10  # seconds
SSH_KEEPALIVE = 30  # seconds

# Retry settings (SSH connect only)
RETRY_MAX = 3
RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt

CONFIG_FILE_NAME = ".syncit"


@dataclass
class Credentials:
    """Everything needed to open an SFTP session."""

    host: str
    user: str = SSH_USER
    port: int = SSH_PORT
    key_filename: Optional[str] = None
    known_hosts: Optional[str] = None
    timeout: float = SSH_TIMEOUT

    def __str__(self) -> str:
        return f"User: {self.user}, on: {self.host}:{self.port}"


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/syncit/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for syncit."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "syncit"
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "syncit"
    return Path.home() / ".config" / "syncit"


def load_global_config() -> dict:
    """Load global config; a missing file yields an empty dict."""
    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    return load_config_file(cfg_path)


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .syncit (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_config(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .syncit YAML file.
    Returns the Path if found, or None if no .syncit exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config_file(path: Path) -> dict:
    """Parse a YAML config file and return its contents as a dict."""
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .syncit or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults", {})
    profiles = data.get("profiles", [])
    if not profiles:
        return defaults.copy()
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = defaults.copy()
    merged.update(profile)
    return merged


def credentials_from_profile(profile: dict, **overrides) -> Credentials:
    """
    Build Credentials from a profile dict.
    Supports keys: server, port, user (or username), ssh_key, known_hosts,
    timeout. Non-None *overrides* win over the profile.
    """
    values = {
        "host": profile.get("server"),
        "user": profile.get("user", profile.get("username", SSH_USER)),
        "port": profile.get("port", SSH_PORT),
        "key_filename": profile.get("ssh_key"),
        "known_hosts": profile.get("known_hosts"),
        "timeout": profile.get("timeout", SSH_TIMEOUT),
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    if not values["host"]:
        raise ValueError("no server given and none found in the profile")
    return Credentials(
        host=str(values["host"]),
        user=str(values["user"]),
        port=int(values["port"]),
        key_filename=str(Path(values["key_filename"]).expanduser()) if values["key_filename"] else None,
        known_hosts=str(Path(values["known_hosts"]).expanduser()) if values["known_hosts"] else None,
        timeout=float(values["timeout"]),
    )
