"""Mutating git operations: checkout, merge and branch deletion."""

from typing import List

from gityard.exceptions import MergeFailedError, RepositoryError
from gityard.logging_config import get_logger
from gityard.services.git.runner import GitRunner

logger = get_logger(__name__)


class GitOperations:
    """Service for git commands that change repository state."""

    def __init__(self, runner: GitRunner):
        self.runner = runner

    def checkout(self, branch_name: str, cwd: str) -> None:
        """Check out a branch in cwd.

        Raises:
            MergeFailedError: If the checkout fails (it only happens before a merge)
        """
        result = self.runner.run(["checkout", branch_name], cwd)
        if not result.ok:
            raise MergeFailedError(
                f"Failed to checkout {branch_name}: {result.stderr or 'Unknown error'}",
                stderr=result.stderr,
            )
        logger.info(f"Checked out {branch_name} in {cwd}")

    def merge(self, branch_name: str, cwd: str, squash: bool = False, no_ff: bool = False) -> None:
        """Merge branch_name into the branch checked out in cwd.

        Raises:
            MergeFailedError: If git merge exits non-zero
        """
        args: List[str] = ["merge"]
        if squash:
            args.append("--squash")
        if no_ff:
            args.append("--no-ff")
        args.append(branch_name)

        result = self.runner.run(args, cwd)
        if not result.ok:
            raise MergeFailedError(
                f"Merge failed: {result.stderr or 'Unknown error'}", stderr=result.stderr
            )
        logger.info(f"Merged {branch_name} ({' '.join(args[1:-1])}) in {cwd}")

    def delete_branch(self, branch_name: str, cwd: str, force: bool = False) -> None:
        """Delete a local branch with `git branch -d` (or `-D` when forced).

        A safe delete of an unmerged branch fails and is reported as is.

        Raises:
            RepositoryError: If git refuses to delete the branch
        """
        result = self.runner.run(["branch", "-D" if force else "-d", branch_name], cwd)
        if not result.ok:
            raise RepositoryError.command_failed("Failed to delete branch", result.stderr)
        logger.info(f"Deleted branch {branch_name}{' (forced)' if force else ''}")
