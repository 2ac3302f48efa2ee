"""Data models for gityard."""

from .worktree import (
    WorktreeRecord,
    StatusCounts,
    DiffCounts,
    WorktreeRow,
    SwitchResult,
    MergeResult,
    DeleteResult,
)

__all__ = [
    "WorktreeRecord",
    "StatusCounts",
    "DiffCounts",
    "WorktreeRow",
    "SwitchResult",
    "MergeResult",
    "DeleteResult",
]
