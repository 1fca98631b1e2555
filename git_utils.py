"""Git operations for koh."""

import subprocess
import time
from pathlib import Path
from typing import List

from cancellation import CancellationToken
from errors import GitError, OperationCancelled
from logging_config import get_logger, log_performance
from models import WorktreeInfo

logger = get_logger(__name__)

GIT_COMMAND = "git"

# How often a cancellable git call checks its token, and how long a
# terminated git gets before it is killed.
POLL_INTERVAL = 0.1
TERMINATE_GRACE = 2.0


def run_git(args: List[str], cwd: Path | None = None, check: bool = True) -> subprocess.CompletedProcess[str]:
    """Run a git command with safe argument passing."""
    cmd = [GIT_COMMAND] + list(args)
    logger.debug(f"Running: {cmd}")
    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            check=check,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise GitError("Git not found on PATH.") from e
    except subprocess.CalledProcessError as e:
        # surface stderr to caller
        raise GitError(e.stderr.strip() or str(e)) from e


def run_cancellable(args: List[str], token: CancellationToken, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a git command that is terminated if token is cancelled."""
    token.raise_if_cancelled()
    cmd = [GIT_COMMAND] + list(args)
    logger.debug(f"Running (cancellable): {cmd}")
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise GitError("Git not found on PATH.") from e

    with proc:
        while True:
            try:
                stdout, stderr = proc.communicate(timeout=POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if token.cancelled:
                    _stop(proc)
                    raise OperationCancelled(f"git {' '.join(args[:3])} interrupted ({token.reason})")

    if proc.returncode != 0 and token.cancelled:
        # The terminal delivered the signal to git as well
        raise OperationCancelled(f"git {' '.join(args[:3])} interrupted ({token.reason})")
    if proc.returncode != 0:
        raise GitError(stderr.strip() or f"{cmd} exited with status {proc.returncode}")
    return subprocess.CompletedProcess(cmd, proc.returncode, stdout, stderr)


def _stop(proc: subprocess.Popen) -> None:
    """Terminate proc, killing it if it ignores the request."""
    proc.terminate()
    try:
        proc.communicate(timeout=TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        logger.warning(f"git (pid {proc.pid}) ignored SIGTERM, killing it")
        proc.kill()
        proc.communicate()


def ensure_repo_root(path: Path) -> Path:
    """Return the worktree root for any path inside a Git repo."""
    cp = run_git(["-C", str(path), "rev-parse", "--show-toplevel"])
    return Path(cp.stdout.strip())


def main_repo_root(path: Path) -> Path:
    """Return the root of the main worktree, even when called from a linked one."""
    cp = run_git(["-C", str(path), "rev-parse", "--git-common-dir"])
    common_dir = Path(cp.stdout.strip())
    if not common_dir.is_absolute():
        common_dir = (path / common_dir).resolve()
    if common_dir.name == ".git":
        return common_dir.parent
    # Bare repository or a separate git dir: fall back to the first listed worktree
    worktrees = list_worktrees(path)
    if not worktrees:
        raise GitError(f"Could not determine main worktree for {path}")
    return worktrees[0].path


def parse_porcelain_list(text: str) -> list[WorktreeInfo]:
    """Parse `git worktree list --porcelain`."""
    results = []
    block = {}
    for line in text.splitlines():
        if not line.strip():
            if block:
                results.append(_block_to_info(block))
                block = {}
            continue
        key, *rest = line.split(" ", 1)
        val = rest[0] if rest else ""
        block.setdefault(key, []).append(val)
    if block:
        results.append(_block_to_info(block))
    return results


def _block_to_info(block: dict) -> WorktreeInfo:
    """Convert a parsed block to WorktreeInfo."""
    path = Path(block.get("worktree", [""])[0])
    head = (block.get("HEAD", [None])[0]) or None
    branch = None
    if "branch" in block:
        br = block["branch"][0]
        if br and br != "(detached)":
            branch = br
    locked = "locked" in block
    prunable = "prunable" in block
    return WorktreeInfo(path=path, head=head, branch=branch,
                        locked=locked, prunable=prunable, is_main=False)


def list_worktrees(path: Path) -> list[WorktreeInfo]:
    """List all worktrees of the repository containing path; the first is the main one."""
    cp = run_git(["-C", str(path), "worktree", "list", "--porcelain"])
    infos = parse_porcelain_list(cp.stdout)
    if infos:
        infos[0].is_main = True
    return infos


def remove_worktree(token: CancellationToken, repo_root: Path, wt_path: Path, force: bool = False) -> None:
    """Remove a worktree, aborting if token is cancelled."""
    args = ["-C", str(repo_root), "worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(wt_path))
    started = time.monotonic()
    run_cancellable(args, token)
    log_performance(logger, "git worktree remove", time.monotonic() - started, path=str(wt_path))


def prune_worktrees(repo_root: Path) -> None:
    """Prune stale worktree metadata."""
    run_git(["-C", str(repo_root), "worktree", "prune", "-v"])


class GitClient:
    """Git collaborator used by the cleanup orchestrator."""

    def __init__(self, namespace: str = ".koh"):
        self.namespace = namespace

    def is_inside_managed_worktree(self, cwd: Path) -> bool:
        """True if cwd is inside a linked worktree living in <main root>/<namespace>/."""
        try:
            root = ensure_repo_root(cwd)
            main_root = main_repo_root(cwd)
        except GitError as e:
            logger.debug(f"{cwd} is not inside a git repository: {e}")
            return False
        if root.resolve() == main_root.resolve():
            return False
        return root.resolve().parent == (main_root / self.namespace).resolve()

    def current_worktree_root(self, cwd: Path) -> Path:
        return ensure_repo_root(cwd)

    def main_repo_root(self, cwd: Path) -> Path:
        return main_repo_root(cwd)

    def repo_name(self, cwd: Path) -> str:
        """Name of the repository, taken from the main worktree's directory."""
        return main_repo_root(cwd).name

    def remove_worktree(self, token: CancellationToken, repo_root: Path, wt_path: Path, force: bool = False) -> None:
        remove_worktree(token, repo_root, wt_path, force=force)

    def prune_worktrees(self, repo_root: Path) -> None:
        prune_worktrees(repo_root)
