"""Data models for koh."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from error_handler import ErrorSeverity
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class WorktreeInfo:
    """Information about a Git worktree."""

    path: Path
    head: str | None
    branch: str | None  # 'refs/heads/feature-x' or None (detached)
    locked: bool
    prunable: bool
    is_main: bool


@dataclass(frozen=True)
class CleanupTarget:
    """A validated worktree name and everything derived from it."""

    name: str
    repo_root: Path
    namespace: str

    @property
    def path(self) -> Path:
        return self.repo_root / self.namespace / self.name

    @property
    def display_path(self) -> str:
        """Path relative to the repo root, as shown to the user."""
        return f"{self.namespace}/{self.name}"


def window_name_for(repo_name: str, worktree_name: str) -> str:
    """Name of the tmux window koh opens for a worktree."""
    return f"{repo_name}|{worktree_name}"


class CleanupStep(Enum):
    """Steps of a cleanup run, in execution order."""
    RESOLVE = "resolve"
    RELOCATE = "relocate"
    PROBE = "probe"
    GIT_REMOVE = "git_remove"
    REMOVE_DIRECTORY = "remove_directory"
    PRUNE = "prune"
    TMUX = "tmux"
    DONE = "done"


@dataclass(frozen=True)
class StepOutcome:
    """One reported result of a cleanup step."""

    step: CleanupStep
    severity: ErrorSeverity
    message: str


Listener = Callable[[StepOutcome], None]


@dataclass
class TeardownReport:
    """Ordered record of everything a cleanup run reported.

    Listeners see each outcome as it is added. Adding never raises, so a
    broken listener cannot interrupt the teardown sequence.
    """

    outcomes: list[StepOutcome] = field(default_factory=list)
    listeners: list[Listener] = field(default_factory=list)

    def add(self, step: CleanupStep, severity: ErrorSeverity, message: str) -> StepOutcome:
        outcome = StepOutcome(step=step, severity=severity, message=message)
        self.outcomes.append(outcome)
        for listener in self.listeners:
            try:
                listener(outcome)
            except Exception as e:
                logger.error(f"Report listener failed on {step.value}: {e}", exc_info=True)
        return outcome

    def info(self, step: CleanupStep, message: str) -> StepOutcome:
        return self.add(step, ErrorSeverity.INFO, message)

    def warning(self, step: CleanupStep, message: str) -> StepOutcome:
        return self.add(step, ErrorSeverity.WARNING, message)

    @property
    def warnings(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if o.severity == ErrorSeverity.WARNING]

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def for_step(self, step: CleanupStep) -> list[StepOutcome]:
        return [o for o in self.outcomes if o.step == step]

    def messages(self) -> list[str]:
        return [o.message for o in self.outcomes]
