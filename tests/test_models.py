"""Tests for data models."""

from pathlib import Path
from unittest.mock import Mock

from error_handler import ErrorSeverity
from models import (
    CleanupStep,
    CleanupTarget,
    StepOutcome,
    TeardownReport,
    WorktreeInfo,
    window_name_for,
)


class TestWorktreeInfo:
    """Test cases for WorktreeInfo dataclass."""

    def test_worktree_info_creation(self):
        """Test creating a WorktreeInfo instance."""
        path = Path("/test/repo")
        worktree = WorktreeInfo(
            path=path,
            head="abc123",
            branch="refs/heads/main",
            locked=False,
            prunable=False,
            is_main=True
        )

        assert worktree.path == path
        assert worktree.head == "abc123"
        assert worktree.branch == "refs/heads/main"
        assert worktree.is_main is True

    def test_worktree_info_with_none_values(self):
        """Test WorktreeInfo with None values for optional fields."""
        worktree = WorktreeInfo(
            path=Path("/test/detached"),
            head=None,
            branch=None,
            locked=True,
            prunable=True,
            is_main=False
        )

        assert worktree.head is None
        assert worktree.branch is None
        assert worktree.locked is True
        assert worktree.prunable is True


class TestCleanupTarget:
    def test_path_is_under_namespace(self):
        target = CleanupTarget(name="feature-x", repo_root=Path("/src/myrepo"), namespace=".koh")

        assert target.path == Path("/src/myrepo/.koh/feature-x")
        assert target.display_path == ".koh/feature-x"

    def test_window_name(self):
        assert window_name_for("myrepo", "feature-x") == "myrepo|feature-x"
        assert window_name_for("", "feature-x") == "|feature-x"


class TestTeardownReport:
    def test_outcomes_are_ordered(self):
        report = TeardownReport()
        report.info(CleanupStep.PROBE, "first")
        report.warning(CleanupStep.GIT_REMOVE, "second")
        report.info(CleanupStep.DONE, "third")

        assert report.messages() == ["first", "second", "third"]
        assert report.outcomes[1] == StepOutcome(CleanupStep.GIT_REMOVE, ErrorSeverity.WARNING, "second")

    def test_warnings(self):
        report = TeardownReport()
        report.info(CleanupStep.PROBE, "fine")
        assert not report.has_warnings

        report.warning(CleanupStep.TMUX, "window gone")
        assert report.has_warnings
        assert [w.message for w in report.warnings] == ["window gone"]

    def test_for_step(self):
        report = TeardownReport()
        report.info(CleanupStep.RELOCATE, "a")
        report.info(CleanupStep.TMUX, "b")
        report.info(CleanupStep.RELOCATE, "c")

        assert [o.message for o in report.for_step(CleanupStep.RELOCATE)] == ["a", "c"]

    def test_listeners_see_each_outcome(self):
        listener = Mock()
        report = TeardownReport(listeners=[listener])

        outcome = report.info(CleanupStep.DONE, "Cleanup complete!")

        listener.assert_called_once_with(outcome)

    def test_failing_listener_does_not_raise(self):
        broken = Mock(side_effect=RuntimeError("terminal gone"))
        working = Mock()
        report = TeardownReport(listeners=[broken, working])

        report.warning(CleanupStep.TMUX, "oops")

        assert report.messages() == ["oops"]
        working.assert_called_once()
