"""Tests for the error handler."""

import json
import logging
from pathlib import Path

from error_handler import (
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    get_error_handler,
    handle_configuration_error,
    handle_error,
    handle_file_system_error,
    handle_git_error,
    handle_session_error,
)
from errors import GitError, OperationCancelled, TmuxError


class TestErrorHandler:
    def test_handle_error_defaults(self):
        info = handle_error(RuntimeError("kaboom"))

        assert info.category == ErrorCategory.UNKNOWN
        assert info.severity == ErrorSeverity.WARNING
        assert info.message == "kaboom"
        assert info.user_message == "An unexpected error occurred: kaboom"
        assert info.traceback_str is None

    def test_traceback_captured_for_raised_errors(self):
        try:
            raise GitError("fatal")
        except GitError as e:
            info = handle_git_error(e, "remove worktree")
        assert "GitError: fatal" in info.traceback_str

    def test_logs_with_category_and_context(self, caplog):
        with caplog.at_level(logging.WARNING, logger="error_handler"):
            handle_git_error(GitError("fatal: not a git repository"), "remove worktree", Path("/src/r"))

        [record] = caplog.records
        assert record.levelno == logging.WARNING
        assert "[git_operation]" in record.getMessage()
        assert "/src/r" in record.getMessage()

    def test_error_severity_logs_at_error(self, caplog):
        with caplog.at_level(logging.ERROR, logger="error_handler"):
            handle_error(ValueError("bad"), severity=ErrorSeverity.ERROR)
        assert caplog.records[0].levelno == logging.ERROR

    def test_global_handler(self):
        assert isinstance(get_error_handler(), ErrorHandler)
        assert get_error_handler() is get_error_handler()


class TestGitMessages:
    def test_dirty_worktree(self):
        info = handle_git_error(
            GitError("fatal: '/r/.koh/x' contains modified or untracked files, use --force to delete it"),
            "remove worktree",
        )
        assert info.user_message == (
            "Failed to remove worktree: it contains modified or untracked files (use --force to remove anyway)"
        )

    def test_locked_worktree(self):
        info = handle_git_error(GitError("fatal: cannot remove a locked working tree, lock reason: x is locked"),
                                "remove worktree")
        assert "locked" in info.user_message

    def test_not_a_repository(self):
        info = handle_git_error(GitError("fatal: not a git repository"), "prune stale worktree metadata")
        assert info.user_message == "Failed to prune stale worktree metadata: not inside a git repository"

    def test_cancelled(self):
        info = handle_git_error(OperationCancelled("interrupted"), "remove worktree")
        assert info.user_message == "Cancelled while trying to remove worktree"

    def test_generic(self):
        info = handle_git_error(GitError("something odd"), "remove worktree")
        assert info.user_message == "Failed to remove worktree: something odd"
        assert info.context == {"operation": "remove worktree", "repo_path": None}


class TestOtherMessages:
    def test_file_system_permission(self):
        info = handle_file_system_error(PermissionError("denied"), "remove worktree directory", Path("/r/.koh/x"))
        assert info.category == ErrorCategory.FILE_SYSTEM
        assert info.user_message == "Failed to remove worktree directory: permission denied accessing /r/.koh/x"

    def test_file_system_generic(self):
        info = handle_file_system_error(OSError("device busy"), "remove worktree directory")
        assert info.user_message == "Failed to remove worktree directory: device busy"

    def test_session_error_passes_message_through(self):
        info = handle_session_error(TmuxError("no server running"), "myrepo|x")
        assert info.category == ErrorCategory.SESSION_MANAGEMENT
        assert info.user_message == "no server running"
        assert info.context == {"window_name": "myrepo|x"}

    def test_configuration_invalid_json(self):
        try:
            json.loads("{ nope }")
        except json.JSONDecodeError as e:
            info = handle_configuration_error(e, config_key="settings.json")
        assert info.user_message == "Configuration file contains invalid JSON in 'settings.json', using defaults"
