"""Worktree data models."""

from dataclasses import dataclass
from typing import Optional

from gityard.constants import BRANCH_DETACHED, COMMIT_UNKNOWN


@dataclass(frozen=True)
class WorktreeRecord:
    """One entry of `git worktree list --porcelain`."""

    path: str
    branch_name: str = BRANCH_DETACHED
    commit_id: str = COMMIT_UNKNOWN
    is_detached: bool = False
    is_bare: bool = False

    @property
    def name(self) -> str:
        """Final path segment, used as the worktree's short name."""
        return self.path.rstrip("/").split("/")[-1] or self.path

    @property
    def is_switch_target(self) -> bool:
        return not self.is_bare

    @property
    def is_on_branch(self) -> bool:
        """True when HEAD is attached to a real branch."""
        return not (self.is_detached or self.is_bare or self.branch_name == BRANCH_DETACHED)

    def __str__(self) -> str:
        """String representation of worktree."""
        status = " (detached)" if self.is_detached else ""
        return f"{self.path} {self.branch_name}{status} [{self.commit_id[:7]}]"


@dataclass(frozen=True)
class StatusCounts:
    """File counts from `git status --porcelain`."""

    staged: int = 0
    unstaged: int = 0
    untracked: int = 0

    @property
    def is_clean(self) -> bool:
        return not (self.staged or self.unstaged or self.untracked)


@dataclass(frozen=True)
class DiffCounts:
    """Added/deleted line totals versus the base branch."""

    added: int = 0
    deleted: int = 0


@dataclass
class WorktreeRow:
    """A row of the worktree table, with derived display fields."""

    value: str
    name: str
    branch: str = ""
    age: str = ""
    status: str = ""
    status_counts: Optional[StatusCounts] = None
    diff: str = ""
    diff_counts: Optional[DiffCounts] = None
    is_current: bool = False
    is_create: bool = False


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of switching to (and possibly creating) a worktree."""

    path: str
    created: bool


@dataclass(frozen=True)
class MergeResult:
    base_branch: str
    merged_branch: str


@dataclass(frozen=True)
class DeleteResult:
    branch_name: str
