"""Exception types for koh.

Fatal conditions abort a cleanup run and reach the CLI; the rest are caught
inside the teardown sequence and turned into warnings.
"""


class KohError(Exception):
    """Base class for all koh errors."""


class PlatformUnsupported(KohError):
    """The platform lacks the process/session semantics tmux integration needs."""


class NotInWorktree(KohError):
    """No worktree name given and the current directory is not a managed worktree."""


class InvalidIdentifier(KohError, ValueError):
    """A worktree name failed validation."""


class RepoRootError(KohError):
    """The main repository root could not be resolved."""


class LocationError(KohError):
    """The working directory could not be read or changed."""


class GitError(KohError, RuntimeError):
    """A git command failed."""


class TmuxError(KohError, RuntimeError):
    """A tmux command failed."""


class OperationCancelled(KohError):
    """A long-running operation was interrupted by the user."""
