"""Pytest configuration and fixtures for koh tests."""

import json
import shutil
import subprocess
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp()).resolve()
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def temp_git_repo(temp_dir: Path) -> Path:
    """Create a temporary git repository for testing."""
    repo = temp_dir / "myrepo"
    repo.mkdir()

    subprocess.run(["git", "init"], cwd=repo, check=True, capture_output=True)
    subprocess.run(["git", "config", "user.name", "Test User"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.email", "test@example.com"], cwd=repo, check=True)

    # Create initial commit
    readme_file = repo / "README.md"
    readme_file.write_text("# Test Repository\n")
    subprocess.run(["git", "add", "README.md"], cwd=repo, check=True)
    subprocess.run(["git", "commit", "-m", "Initial commit"], cwd=repo, check=True, capture_output=True)

    return repo


@pytest.fixture
def koh_worktree(temp_git_repo: Path) -> Path:
    """Create a linked worktree at .koh/feature-x inside the temp repo."""
    path = temp_git_repo / ".koh" / "feature-x"
    subprocess.run(
        ["git", "worktree", "add", "-b", "feature-x", str(path)],
        cwd=temp_git_repo, check=True, capture_output=True,
    )
    return path


@pytest.fixture
def sample_config() -> dict:
    """Provide a sample configuration for testing."""
    return {
        "namespace": ".worktrees",
        "force_remove": True,
        "log_level": "DEBUG",
        "log_to_file": False,
        "tmux_command": "tmux",
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: dict) -> Path:
    """Create a temporary config file for testing."""
    config_path = temp_dir / "config.json"
    config_path.write_text(json.dumps(sample_config, indent=2))
    return config_path


@pytest.fixture
def config_dir(temp_dir: Path, monkeypatch) -> Path:
    """Point koh's config directory at a temp dir."""
    path = temp_dir / "config"
    monkeypatch.setenv("KOH_CONFIG_DIR", str(path))
    return path
