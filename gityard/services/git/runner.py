"""Subprocess runner for the git executable."""

import os
from dataclasses import dataclass
from typing import Optional, Sequence

import git

from gityard.constants import GIT_EXECUTABLE
from gityard.logging_config import get_logger

logger = get_logger(__name__)

# Exit code reported when the git executable cannot be spawned
EXIT_COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one git invocation."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class GitRunner:
    """Runs git commands and returns their output instead of raising."""

    def __init__(self, default_cwd: Optional[str] = None):
        """Initialize the runner.

        Args:
            default_cwd: Working directory used when a call gives none
        """
        self.default_cwd = default_cwd

    def _executable(self) -> str:
        # After a quiet failed refresh GitPython leaves its executable unset
        return (
            git.Git.GIT_PYTHON_GIT_EXECUTABLE
            or os.environ.get("GIT_PYTHON_GIT_EXECUTABLE")
            or GIT_EXECUTABLE
        )

    def run(self, args: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
        """Execute `git <args>` in a working directory.

        A non-zero exit is returned, not raised: callers decide what the exit
        status and stderr mean.

        Args:
            args: Arguments after the executable name
            cwd: Working directory (defaults to default_cwd, then the process cwd)

        Returns:
            CommandResult with trailing whitespace trimmed from both streams
        """
        working_dir = cwd or self.default_cwd or os.getcwd()
        command = [self._executable(), *args]
        logger.debug(f"Running {' '.join(command)} in {working_dir}")

        if not os.path.isdir(working_dir):
            return CommandResult(
                stdout="",
                stderr=f"fatal: cannot change to '{working_dir}': No such file or directory",
                exit_code=128,
            )

        try:
            status, stdout, stderr = git.Git(working_dir).execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
            )
        except git.exc.GitCommandNotFound as e:
            logger.debug(f"git executable not available: {e}")
            return CommandResult(
                stdout="",
                stderr="git: command not found",
                exit_code=EXIT_COMMAND_NOT_FOUND,
            )

        result = CommandResult(
            stdout=(stdout or "").rstrip(),
            stderr=(stderr or "").rstrip(),
            exit_code=status if status is not None else 0,
        )
        if not result.ok:
            logger.debug(f"git {' '.join(args)} exited {result.exit_code}: {result.stderr}")
        return result
