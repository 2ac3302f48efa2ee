"""Tests for the git subprocess runner"""
from unittest.mock import patch

import git

from gityard.services.git.runner import EXIT_COMMAND_NOT_FOUND, CommandResult, GitRunner


class TestGitRunner:
    """Test GitRunner.run."""

    def test_successful_command(self, repo_path):
        result = GitRunner().run(["rev-parse", "--abbrev-ref", "HEAD"], str(repo_path))

        assert result.ok
        assert result.exit_code == 0
        assert result.stdout == "master"

    def test_failure_is_returned_not_raised(self, repo_path):
        """Test that a non-zero exit comes back as a result."""
        result = GitRunner().run(["rev-parse", "--verify", "no-such-ref"], str(repo_path))

        assert not result.ok
        assert result.exit_code != 0
        assert result.stderr

    def test_default_cwd_used(self, repo_path):
        result = GitRunner(default_cwd=str(repo_path)).run(["rev-parse", "--show-toplevel"])

        assert result.stdout == str(repo_path)

    def test_missing_working_directory(self, temp_dir):
        result = GitRunner().run(["status"], str(temp_dir / "missing"))

        assert result.exit_code == 128
        assert "cannot change to" in result.stderr

    def test_streams_are_trimmed(self, temp_dir):
        """Test that trailing whitespace is removed from both streams."""
        with patch.object(git.Git, "execute", return_value=(0, "out\n\n", "warn  \n")):
            result = GitRunner().run(["status"], str(temp_dir))

        assert result == CommandResult(stdout="out", stderr="warn", exit_code=0)

    def test_git_not_installed(self, temp_dir):
        """Test that a missing executable is reported as exit 127."""
        error = git.exc.GitCommandNotFound("git", "No such file or directory")
        with patch.object(git.Git, "execute", side_effect=error):
            result = GitRunner().run(["status"], str(temp_dir))

        assert result.exit_code == EXIT_COMMAND_NOT_FOUND
        assert "command not found" in result.stderr
