"""Git-related services for gityard."""

from .runner import GitRunner, CommandResult
from .worktrees import WorktreeService, parse_worktree_porcelain
from .branch_queries import BranchQueries
from .operations import GitOperations

__all__ = [
    "GitRunner",
    "CommandResult",
    "WorktreeService",
    "parse_worktree_porcelain",
    "BranchQueries",
    "GitOperations",
]
