"""Worktree name validation.

Names end up in filesystem paths and subprocess arguments, so anything that
could traverse directories or look like a command-line option is rejected.
"""

import re

from errors import InvalidIdentifier

MAX_NAME_LENGTH = 100

_ALLOWED_NAME = re.compile(r"[A-Za-z0-9._-]+")


def validate_worktree_name(name: str) -> None:
    """Raise InvalidIdentifier unless name is a safe worktree name."""
    if not name:
        raise InvalidIdentifier("worktree name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidIdentifier(f"worktree name is too long (max {MAX_NAME_LENGTH} characters)")
    if ".." in name:
        raise InvalidIdentifier("worktree name cannot contain '..'")
    if "/" in name or "\\" in name:
        raise InvalidIdentifier("worktree name cannot contain path separators")
    if name.startswith("."):
        raise InvalidIdentifier("worktree name cannot start with '.'")
    if name.startswith("-"):
        raise InvalidIdentifier("worktree name cannot start with '-'")
    if not _ALLOWED_NAME.fullmatch(name):
        raise InvalidIdentifier(
            f"worktree name {name!r} contains invalid characters "
            "(allowed: letters, digits, '.', '_', '-')"
        )

