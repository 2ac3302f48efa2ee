"""Worktree listing and lifecycle service for gityard."""

import os
from typing import Any, Dict, List, Optional

from gityard.constants import BRANCH_BARE, BRANCH_DETACHED, COMMIT_UNKNOWN
from gityard.exceptions import RepositoryError, RepositoryErrorKind
from gityard.logging_config import get_logger
from gityard.models.worktree import WorktreeRecord
from gityard.services.git.runner import EXIT_COMMAND_NOT_FOUND, CommandResult, GitRunner

logger = get_logger(__name__)

_BRANCH_PREFIXES = ("refs/heads/", "refs/remotes/")


def parse_worktree_porcelain(output: str) -> List[WorktreeRecord]:
    """Parse `git worktree list --porcelain` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached", or "bare")
        (blank line between worktrees)

    A block ends at a blank line or at the next ``worktree`` line, whichever
    comes first.

    Args:
        output: Raw porcelain text

    Returns:
        WorktreeRecords in listing order (the main worktree first)
    """
    records: List[WorktreeRecord] = []
    current: Dict[str, Any] = {}

    def flush():
        if current.get("path"):
            records.append(WorktreeRecord(**current))

    for raw_line in output.split("\n"):
        line = raw_line.strip()

        if line.startswith("worktree "):
            flush()
            current = {
                "path": line[len("worktree "):].strip(),
                "branch_name": BRANCH_DETACHED,
                "commit_id": COMMIT_UNKNOWN,
            }
        elif not current:
            continue
        elif line.startswith("HEAD "):
            current["commit_id"] = line[len("HEAD "):].strip()
        elif line.startswith("branch "):
            branch_ref = line[len("branch "):].strip()
            for prefix in _BRANCH_PREFIXES:
                if branch_ref.startswith(prefix):
                    branch_ref = branch_ref[len(prefix):]
                    break
            current["branch_name"] = branch_ref
            current["is_detached"] = False
        elif line.startswith("detached"):
            current["is_detached"] = True
            current["branch_name"] = BRANCH_DETACHED
        elif line.startswith("bare"):
            current["is_bare"] = True
            current["branch_name"] = BRANCH_BARE
        elif not line:
            flush()
            current = {}

    # Handle last entry if no trailing blank line
    flush()
    return records


def raise_for_listing_failure(result: CommandResult, cwd: str) -> None:
    """Translate a failed listing into the matching RepositoryError."""
    stderr = result.stderr
    if "not a git repository" in stderr:
        raise RepositoryError.not_a_repository(cwd)
    if "command not found" in stderr or "not found" in stderr:
        raise RepositoryError(RepositoryErrorKind.TOOL_UNAVAILABLE, stderr=stderr)
    raise RepositoryError.command_failed("Failed to list worktrees", stderr)


class WorktreeService:
    """Service for listing, adding and removing git worktrees."""

    def __init__(self, runner: GitRunner):
        """Initialize the worktree service.

        Args:
            runner: Runner used for every git invocation
        """
        self.runner = runner

    def list_worktrees(self, cwd: Optional[str] = None) -> List[WorktreeRecord]:
        """Get all worktrees of the repository containing cwd.

        Not cached: the repository can change between calls.

        Raises:
            RepositoryError: If the listing command fails
        """
        cwd = cwd or os.getcwd()
        result = self.runner.run(["worktree", "list", "--porcelain"], cwd)
        if not result.ok:
            raise_for_listing_failure(result, cwd)

        records = parse_worktree_porcelain(result.stdout)
        logger.debug(f"Found {len(records)} worktrees")
        for record in records:
            logger.debug(f"  {record}")
        return records

    def resolve_root(self, start_dir: Optional[str] = None) -> str:
        """Get the root directory of the repository containing start_dir.

        Bare repositories have no top-level directory, so the git dir is used
        to infer the root instead.

        Raises:
            RepositoryError: If git is unavailable or start_dir is not inside a repository
        """
        start_dir = start_dir or os.getcwd()

        result = self.runner.run(["rev-parse", "--show-toplevel"], start_dir)
        if result.ok and result.stdout.strip():
            return result.stdout.strip()
        if result.exit_code == EXIT_COMMAND_NOT_FOUND:
            raise RepositoryError(RepositoryErrorKind.TOOL_UNAVAILABLE, stderr=result.stderr)

        result = self.runner.run(["rev-parse", "--git-dir"], start_dir)
        if not result.ok:
            raise RepositoryError.not_a_repository(start_dir)

        git_dir = result.stdout.strip()
        if git_dir == ".git":
            return start_dir
        if git_dir.endswith("/.git"):
            return git_dir[: -len("/.git")]
        return start_dir

    def add_worktree(self, args: List[str], cwd: str) -> None:
        """Run `git worktree add <args>`.

        Raises:
            RepositoryError: If git refuses to create the worktree
        """
        result = self.runner.run(["worktree", "add", *args], cwd)
        if not result.ok:
            raise RepositoryError.command_failed("Failed to create worktree", result.stderr)
        logger.info(f"Created worktree with: git worktree add {' '.join(args)}")

    def remove_worktree(self, path: str, cwd: str, force: bool = False) -> CommandResult:
        """Run `git worktree remove`, returning the result for the caller to judge."""
        args = ["worktree", "remove", path]
        if force:
            args.append("--force")

        result = self.runner.run(args, cwd)
        if result.ok:
            logger.info(f"Removed worktree at {path}")
        else:
            logger.error(
                f"git worktree remove failed (exit {result.exit_code}): {result.stderr}"
            )
        return result
