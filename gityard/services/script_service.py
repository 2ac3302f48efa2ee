"""Script and hook execution service for gityard."""

import shlex
import subprocess
from typing import Iterable, List, Optional

from gityard.config import ProjectConfig
from gityard.constants import GIT_EXECUTABLE
from gityard.exceptions import ScriptExecutionError
from gityard.logging_config import get_logger
from gityard.services.git.runner import GitRunner

logger = get_logger(__name__)


class ScriptService:
    """Runs gityard.json scripts and lifecycle hooks inside a worktree."""

    def __init__(self, runner: GitRunner):
        """Initialize the script service.

        Args:
            runner: Runner used for commands that start with "git"
        """
        self.runner = runner

    def run_commands(self, commands: Iterable[str], worktree_path: str) -> None:
        """Run commands in order, stopping at the first failure.

        Raises:
            ScriptExecutionError: If a command exits non-zero
        """
        for command in commands:
            self.run_command(command, worktree_path)

    def run_command(self, command: str, worktree_path: str) -> None:
        """Run a single script command in a worktree.

        Commands whose first word is "git" go through the git runner against
        the worktree; everything else runs through the shell with the
        terminal's standard streams.

        Raises:
            ScriptExecutionError: If the command exits non-zero
        """
        command = command.strip()
        if not command:
            return

        try:
            parts = shlex.split(command)
        except ValueError:
            parts = command.split()

        if parts and parts[0] == GIT_EXECUTABLE:
            logger.info(f"Running '{command}' in {worktree_path}")
            result = self.runner.run(parts[1:], worktree_path)
            if not result.ok:
                raise ScriptExecutionError(command, exit_code=result.exit_code, stderr=result.stderr)
            if result.stdout:
                logger.info(result.stdout)
            return

        logger.info(f"Running shell command '{command}' in {worktree_path}")
        try:
            completed = subprocess.run(command, shell=True, cwd=worktree_path)
        except OSError as e:
            raise ScriptExecutionError(command, stderr=str(e)) from e

        if completed.returncode != 0:
            raise ScriptExecutionError(command, exit_code=completed.returncode)

    def run_hooks(
        self,
        hook_entries: List[str],
        worktree_path: str,
        config: Optional[ProjectConfig],
    ) -> None:
        """Run lifecycle hook entries in a worktree.

        An entry naming a script runs that script's commands; any other entry
        is run as a command itself.
        """
        for entry in hook_entries:
            script = config.get_script(entry) if config else None
            if script is not None:
                logger.debug(f"Running hook script '{entry}' in {worktree_path}")
                self.run_commands(script, worktree_path)
            else:
                self.run_command(entry, worktree_path)
