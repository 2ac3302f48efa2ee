"""Pytest fixtures for gityard tests"""
import json
import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest
import git

from gityard.config import Settings
from gityard.core import Gityard
from gityard.services.git.runner import CommandResult, GitRunner


def make_result(stdout: str = "", stderr: str = "", exit_code: int = 0) -> CommandResult:
    """Build a CommandResult for mocked git calls."""
    return CommandResult(stdout=stdout, stderr=stderr, exit_code=exit_code)


def commit_file(repo: git.Repo, name: str, content: str, message: str) -> None:
    """Write a file in a repository's working tree and commit it."""
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message)


def write_config(directory: Path, data: dict) -> Path:
    """Write a gityard.json document into a directory."""
    config_path = directory / "gityard.json"
    config_path.write_text(json.dumps(data, indent=2) + "\n")
    return config_path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep log files out of the real home directory and restore logging."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on master."""
    repo_path = temp_dir / "repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Whatever init.defaultBranch says, the base branch is master
    repo.git.branch("-M", "master")

    yield repo

    repo.close()


@pytest.fixture
def repo_path(git_repo) -> Path:
    return Path(git_repo.working_dir)


@pytest.fixture
def yard(repo_path):
    """Gityard started from the main worktree."""
    return Gityard(str(repo_path), Settings())


@pytest.fixture
def add_worktree(git_repo, temp_dir):
    """Factory creating a linked worktree next to the repository."""

    def _add(name: str, branch: str = None, detach: bool = False) -> Path:
        path = temp_dir / name
        if detach:
            git_repo.git.worktree("add", "--detach", str(path))
        else:
            git_repo.git.worktree("add", "-b", branch or name, str(path))
        return path

    return _add


@pytest.fixture
def mock_runner():
    """Create a mock GitRunner whose calls succeed with empty output."""
    runner = Mock(spec=GitRunner)
    runner.run = Mock(return_value=make_result())
    return runner
