"""Read-only git queries: branches, status, diff and commit age."""

from typing import Optional

from gityard.constants import DEFAULT_REMOTE
from gityard.exceptions import RepositoryError
from gityard.logging_config import get_logger
from gityard.models.worktree import DiffCounts, StatusCounts
from gityard.services.git.runner import GitRunner

logger = get_logger(__name__)


def parse_status_porcelain(output: str) -> StatusCounts:
    """Count staged, unstaged and untracked files in `git status --porcelain`.

    Each line is ``XY path`` where X is the index column and Y the work tree
    column.
    """
    staged = unstaged = untracked = 0

    for line in output.split("\n"):
        if len(line) < 2:
            continue

        if line.startswith("??"):
            untracked += 1
            continue

        index_status = line[0]
        worktree_status = line[1]
        if index_status not in (" ", "?", "!"):
            staged += 1
        if worktree_status not in (" ", "?", "!"):
            unstaged += 1

    return StatusCounts(staged=staged, unstaged=unstaged, untracked=untracked)


def parse_numstat(output: str) -> DiffCounts:
    """Sum `git diff --numstat` lines; binary files ("-") count as zero."""
    added = deleted = 0
    for line in output.split("\n"):
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        if parts[0].isdigit():
            added += int(parts[0])
        if parts[1].isdigit():
            deleted += int(parts[1])
    return DiffCounts(added=added, deleted=deleted)


class BranchQueries:
    """Queries about branches and working-tree state."""

    def __init__(self, runner: GitRunner):
        self.runner = runner

    def branch_exists_locally(self, branch_name: str, cwd: Optional[str] = None) -> bool:
        result = self.runner.run(
            ["show-ref", "--verify", "--quiet", f"refs/heads/{branch_name}"], cwd
        )
        return result.ok

    def branch_exists_remotely(
        self, branch_name: str, cwd: Optional[str] = None, remote: str = DEFAULT_REMOTE
    ) -> bool:
        result = self.runner.run(
            ["show-ref", "--verify", "--quiet", f"refs/remotes/{remote}/{branch_name}"], cwd
        )
        return result.ok

    def get_current_branch(self, cwd: Optional[str] = None) -> Optional[str]:
        """Get the checked-out branch, or None when HEAD is detached."""
        result = self.runner.run(["rev-parse", "--abbrev-ref", "HEAD"], cwd)
        if not result.ok:
            raise RepositoryError.command_failed("Failed to read current branch", result.stderr)
        branch = result.stdout.strip()
        return None if branch == "HEAD" else branch

    def get_remote_head_branch(self, cwd: Optional[str] = None) -> Optional[str]:
        """Get the branch origin/HEAD points at, if the remote advertises one."""
        result = self.runner.run(
            ["symbolic-ref", "--short", f"refs/remotes/{DEFAULT_REMOTE}/HEAD"], cwd
        )
        if not result.ok or not result.stdout:
            return None
        return result.stdout.strip().split("/", 1)[-1]

    def resolve_base_branch(self, preferred: str, cwd: Optional[str] = None) -> Optional[str]:
        """Resolve the integration branch.

        Returns the preferred branch when it exists locally, otherwise the
        branch origin/HEAD names, then "main" or "master". None when none of
        them exist.
        """
        candidates = [preferred]
        remote_head = self.get_remote_head_branch(cwd)
        if remote_head:
            candidates.append(remote_head)
        candidates.extend(["main", "master"])

        for candidate in candidates:
            if self.branch_exists_locally(candidate, cwd):
                if candidate != preferred:
                    logger.debug(f"Base branch {preferred} not found, using {candidate}")
                return candidate
        return None

    def get_status_counts(self, cwd: str) -> StatusCounts:
        """Get staged/unstaged/untracked file counts of a worktree.

        Raises:
            RepositoryError: If git status fails
        """
        result = self.runner.run(["status", "--porcelain"], cwd)
        if not result.ok:
            raise RepositoryError.command_failed("git status in worktree failed", result.stderr)
        return parse_status_porcelain(result.stdout)

    def get_diff_counts(self, cwd: str, base: Optional[str] = None) -> DiffCounts:
        """Get added/deleted line totals of a worktree against base (or HEAD).

        Raises:
            RepositoryError: If git diff fails
        """
        result = self.runner.run(["diff", "--numstat", base or "HEAD"], cwd)
        if not result.ok:
            raise RepositoryError.command_failed("git diff in worktree failed", result.stderr)
        return parse_numstat(result.stdout)

    def get_last_commit_timestamp(self, cwd: str) -> int:
        """Get the committer timestamp (unix seconds) of HEAD in a worktree.

        Raises:
            RepositoryError: If the worktree has no commits or git fails
        """
        result = self.runner.run(["log", "-1", "--format=%ct"], cwd)
        if not result.ok or not result.stdout.strip().isdigit():
            raise RepositoryError.command_failed("Failed to read last commit", result.stderr)
        return int(result.stdout.strip())
