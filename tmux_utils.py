"""Tmux operations for koh."""

import os
import subprocess
from collections.abc import Mapping
from typing import List

from errors import TmuxError
from logging_config import get_logger

logger = get_logger(__name__)

TMUX_TIMEOUT = 10


def is_in_tmux(env: Mapping[str, str] | None = None) -> bool:
    """True if this process runs inside a tmux client."""
    env = os.environ if env is None else env
    return bool(env.get("TMUX"))


def run_tmux(args: List[str], command: str = "tmux") -> subprocess.CompletedProcess[str]:
    """Run a tmux command, raising TmuxError on failure."""
    cmd = [command] + list(args)
    logger.debug(f"Running: {cmd}")
    try:
        return subprocess.run(
            cmd,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=TMUX_TIMEOUT,
        )
    except FileNotFoundError as e:
        raise TmuxError(f"{command} not found on PATH") from e
    except subprocess.TimeoutExpired as e:
        raise TmuxError(f"{command} {args[0]} timed out after {TMUX_TIMEOUT}s") from e
    except subprocess.CalledProcessError as e:
        raise TmuxError(e.stderr.strip() or str(e)) from e


def list_windows(command: str = "tmux") -> list[tuple[str, str]]:
    """Return (window_id, window_name) for every window of the current session."""
    cp = run_tmux(["list-windows", "-F", "#{window_id}\t#{window_name}"], command=command)
    windows = []
    for line in cp.stdout.splitlines():
        window_id, sep, name = line.partition("\t")
        if sep:
            windows.append((window_id, name))
    return windows


def find_window(windows: list[tuple[str, str]], window_name: str, hint: str) -> str | None:
    """Pick the window to close: an exact name match first, then one named after hint."""
    for window_id, name in windows:
        if name == window_name:
            return window_id
    for window_id, name in windows:
        if name == hint:
            return window_id
    return None


def close_window(window_name: str, hint: str, command: str = "tmux") -> None:
    """Kill the window named window_name; tmux switches to the previous window."""
    window_id = find_window(list_windows(command), window_name, hint)
    if window_id is None:
        raise TmuxError(f"tmux window '{window_name}' not found")
    run_tmux(["kill-window", "-t", window_id], command=command)
    logger.info(f"Closed tmux window {window_name} ({window_id})")


class TmuxClient:
    """Tmux collaborator used by the cleanup orchestrator."""

    def __init__(self, command: str = "tmux", env: Mapping[str, str] | None = None):
        self.command = command
        self.env = env

    def is_active_session(self) -> bool:
        return is_in_tmux(self.env)

    def close_window(self, window_name: str, hint: str) -> None:
        close_window(window_name, hint, command=self.command)
