"""Worktree teardown: `koh cleanup [worktree-name]`.

Closes the tmux window associated with a worktree and removes the worktree.
Only resolving, validating and locating the target can abort a run; once
teardown starts, each step's failure is reported as a warning and the next
step still runs, so a run always gets as far as it can.
"""

from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path

from cancellation import CancellationToken, cancellable_context
from config import Capabilities
from error_handler import handle_file_system_error, handle_git_error, handle_session_error
from errors import (
    GitError,
    InvalidIdentifier,
    KohError,
    LocationError,
    NotInWorktree,
    PlatformUnsupported,
    RepoRootError,
)
from filesystem import LocalFilesystem, OsLocation
from git_utils import GitClient
from logging_config import get_logger
from models import CleanupStep, CleanupTarget, TeardownReport, window_name_for
from tmux_utils import TmuxClient
from validation import validate_worktree_name

logger = get_logger(__name__)


def resolve_target(explicit: str | None, git: GitClient, location: OsLocation, report: TeardownReport) -> str:
    """Return the worktree name to clean up.

    An explicit name is returned as given. Without one, the name is the
    directory name of the worktree the process is running in.
    """
    if explicit is not None:
        return explicit

    try:
        cwd = location.getcwd()
    except OSError as e:
        raise LocationError(f"failed to get current directory: {e}") from e

    if not git.is_inside_managed_worktree(cwd):
        raise NotInWorktree("failed to extract worktree name: not in a worktree")
    try:
        root = git.current_worktree_root(cwd)
    except GitError as e:
        raise NotInWorktree(f"failed to get current worktree path: {e}") from e

    name = Path(root).name
    report.info(CleanupStep.RESOLVE, f"Detected current worktree: {name}")
    return name


def relocate_if_inside(
    main_root: Path,
    target_path: Path,
    location: OsLocation,
    fs: LocalFilesystem,
    report: TeardownReport,
) -> bool:
    """Move the process to main_root if it is running from inside target_path.

    Returns True if the working directory was changed.
    """
    try:
        current = fs.absolute(location.getcwd())
    except OSError as e:
        raise LocationError(f"failed to get current directory: {e}") from e
    target = fs.absolute(target_path)

    try:
        rel = fs.relative(current, target)
    except ValueError:
        # No relative path between them (different drives): not inside.
        return False
    if rel.parts and rel.parts[0] == "..":
        return False

    report.info(CleanupStep.RELOCATE, "Running from within target worktree, switching to parent repository...")
    try:
        location.chdir(main_root)
    except OSError as e:
        raise LocationError(f"failed to change to parent directory: {e}") from e
    report.info(CleanupStep.RELOCATE, f"Changed directory to: {main_root}")
    return True


def teardown(
    token: CancellationToken,
    target: CleanupTarget,
    *,
    git: GitClient,
    tmux: TmuxClient,
    fs: LocalFilesystem,
    report: TeardownReport,
    force: bool = False,
) -> TeardownReport:
    """Remove the worktree, whatever is left of its directory, and its tmux window."""
    path = target.path

    if not fs.exists(path):
        report.info(CleanupStep.PROBE, f"Worktree {target.display_path} not found")
        report.info(CleanupStep.PROBE, "Will attempt to clean up tmux window only")
    else:
        removed_by_git = _remove_with_git(token, target, git, report, force)
        _remove_directory(target, fs, report)
        if not removed_by_git:
            _prune(target, git, report)

    _close_window(target, git, tmux, report)
    return report


def _remove_with_git(
    token: CancellationToken,
    target: CleanupTarget,
    git: GitClient,
    report: TeardownReport,
    force: bool,
) -> bool:
    report.info(CleanupStep.GIT_REMOVE, f"Removing git worktree: {target.display_path}")
    try:
        git.remove_worktree(token, target.repo_root, target.path, force=force)
    except (KohError, OSError) as e:
        info = handle_git_error(e, "remove worktree", target.repo_root)
        report.warning(CleanupStep.GIT_REMOVE, info.user_message)
        return False
    report.info(CleanupStep.GIT_REMOVE, "Worktree removed successfully")
    return True


def _remove_directory(target: CleanupTarget, fs: LocalFilesystem, report: TeardownReport) -> None:
    # git worktree remove may leave empty directories behind, or may have failed
    try:
        fs.remove_tree(target.path)
    except OSError as e:
        info = handle_file_system_error(e, "remove worktree directory", target.path)
        report.warning(CleanupStep.REMOVE_DIRECTORY, info.user_message)


def _prune(target: CleanupTarget, git: GitClient, report: TeardownReport) -> None:
    try:
        git.prune_worktrees(target.repo_root)
    except (KohError, OSError) as e:
        info = handle_git_error(e, "prune stale worktree metadata", target.repo_root)
        report.warning(CleanupStep.PRUNE, info.user_message)
        return
    report.info(CleanupStep.PRUNE, "Pruned stale worktree metadata")


def _close_window(target: CleanupTarget, git: GitClient, tmux: TmuxClient, report: TeardownReport) -> None:
    if not tmux.is_active_session():
        report.info(CleanupStep.TMUX, "Not in a tmux session, skipping tmux cleanup")
        return

    try:
        repo_name = git.repo_name(target.repo_root)
    except (KohError, OSError) as e:
        info = handle_git_error(e, "get repository name", target.repo_root)
        report.warning(CleanupStep.TMUX, info.user_message)
        repo_name = ""

    window_name = window_name_for(repo_name, target.name)
    try:
        tmux.close_window(window_name, target.name)
    except (KohError, OSError) as e:
        info = handle_session_error(e, window_name)
        report.warning(CleanupStep.TMUX, info.user_message)
        return
    report.info(CleanupStep.TMUX, "Tmux window closed (switched to previous window)")


def run_cleanup(
    name: str | None,
    capabilities: Capabilities,
    *,
    namespace: str = ".koh",
    force: bool = False,
    git: GitClient | None = None,
    tmux: TmuxClient | None = None,
    fs: LocalFilesystem | None = None,
    location: OsLocation | None = None,
    report: TeardownReport | None = None,
    context: Callable[[], AbstractContextManager[CancellationToken]] = cancellable_context,
) -> TeardownReport:
    """Clean up one worktree and its tmux window.

    Raises a KohError subclass for anything that aborts the run; every other
    problem ends up as a warning in the returned report.
    """
    if not capabilities.supports_session_integration:
        raise PlatformUnsupported(f"cleanup command is not supported on {capabilities.platform}")

    git = git or GitClient(namespace)
    tmux = tmux or TmuxClient()
    fs = fs or LocalFilesystem()
    location = location or OsLocation()
    report = report if report is not None else TeardownReport()

    worktree_name = resolve_target(name, git, location, report)
    try:
        validate_worktree_name(worktree_name)
    except InvalidIdentifier as e:
        raise InvalidIdentifier(f"invalid worktree name: {e}") from e

    with context() as token:
        try:
            cwd = location.getcwd()
        except OSError as e:
            raise LocationError(f"failed to get current directory: {e}") from e
        try:
            repo_root = git.main_repo_root(cwd)
        except GitError as e:
            raise RepoRootError(f"failed to get main repository root: {e}") from e

        target = CleanupTarget(name=worktree_name, repo_root=repo_root, namespace=namespace)
        logger.info(f"Cleaning up {target.path}")
        relocate_if_inside(repo_root, target.path, location, fs, report)
        teardown(token, target, git=git, tmux=tmux, fs=fs, report=report, force=force)

    report.info(CleanupStep.DONE, "Cleanup complete!")
    return report
