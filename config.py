"""Configuration management for koh."""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

APP_NAME = "koh"
CONFIG_DIR_ENV = "KOH_CONFIG_DIR"

DEFAULT_CONFIG = {
    "namespace": ".koh",  # str - directory under the main repo root holding worktrees
    "force_remove": False,  # bool - pass --force to `git worktree remove`
    "log_level": "WARNING",  # str
    "log_to_file": True,  # bool
    "tmux_command": "tmux",  # str
}


@dataclass(frozen=True)
class Capabilities:
    """Platform features resolved once at startup."""

    supports_session_integration: bool
    platform: str


def detect_capabilities(platform: str | None = None) -> Capabilities:
    """Resolve what this platform supports.

    Windows has no usable process-group/session semantics for tmux, so
    session integration (and with it, cleanup) is disabled there.
    """
    platform = platform or sys.platform
    return Capabilities(
        supports_session_integration=not platform.startswith("win"),
        platform=platform,
    )


def _config_dir() -> Path:
    """Get the platform-specific configuration directory."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(base) / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        return Path(base) / APP_NAME


def _config_path() -> Path:
    """Get the configuration file path."""
    return _config_dir() / "settings.json"


def load_config(path: Path | None = None) -> dict:
    """Load configuration from file, falling back to defaults."""
    p = path or _config_path()
    try:
        with p.open("r", encoding="utf-8") as f:
            cfg = json.load(f)
    except FileNotFoundError:
        return DEFAULT_CONFIG.copy()
    except (OSError, json.JSONDecodeError) as e:
        # Imported here: error_handler pulls in logging_config, which needs _config_dir.
        from error_handler import handle_configuration_error
        handle_configuration_error(e, config_key=str(p))
        return DEFAULT_CONFIG.copy()
    if not isinstance(cfg, dict):
        logging.getLogger(__name__).warning(f"Ignoring non-object configuration in {p}")
        return DEFAULT_CONFIG.copy()
    # Fill any missing keys with defaults
    for k, v in DEFAULT_CONFIG.items():
        cfg.setdefault(k, v)
    return cfg


def get_namespace(cfg: dict) -> str:
    """Get the worktree namespace directory name.

    The namespace must be a single path segment; anything else falls back to
    the default so a bad setting can never point cleanup outside the repo.
    """
    namespace = cfg.get("namespace") or DEFAULT_CONFIG["namespace"]
    if namespace in (".", "..") or "/" in namespace or "\\" in namespace or "\0" in namespace:
        logging.getLogger(__name__).warning(f"Invalid namespace {namespace!r}, using default")
        return DEFAULT_CONFIG["namespace"]
    return namespace
