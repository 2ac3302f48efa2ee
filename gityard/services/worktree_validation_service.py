"""Worktree validation service for gityard."""

import os
from typing import Iterable, Optional

from gityard.models.worktree import WorktreeRecord


def is_valid_worktree_path(path: str) -> bool:
    """Check a candidate worktree path: non-empty, no ".." segment."""
    if not path or not path.strip():
        return False
    segments = path.replace("\\", "/").split("/")
    return ".." not in segments


def same_path(first: str, second: str) -> bool:
    """Compare two filesystem paths after resolving symlinks."""
    return os.path.realpath(first) == os.path.realpath(second)


class WorktreeValidationService:
    """Service for validating worktree lookups and destructive operations."""

    @staticmethod
    def matches(record: WorktreeRecord, name_or_path: str) -> bool:
        """
        Check if a record is addressed by a full path or its short name.

        Args:
            record: Worktree record
            name_or_path: Full path or final path segment

        Returns:
            True if the record matches
        """
        return record.path == name_or_path or record.name == name_or_path

    @staticmethod
    def find_worktree(
        records: Iterable[WorktreeRecord], name_or_path: str
    ) -> Optional[WorktreeRecord]:
        """
        Find the first record matching name_or_path, in listing order.

        Ambiguous short names are not resolved: the first match wins.
        """
        for record in records:
            if WorktreeValidationService.matches(record, name_or_path):
                return record
        return None

    @staticmethod
    def is_main_worktree(record: WorktreeRecord, repo_root: str) -> bool:
        return same_path(record.path, repo_root)

    @staticmethod
    def deletion_block_reason(
        record: WorktreeRecord, repo_root: str, base_branch: Optional[str]
    ) -> Optional[str]:
        """
        Explain why a worktree's branch must not be deleted.

        Args:
            record: Worktree to delete
            repo_root: Resolved repository root (the main worktree)
            base_branch: Resolved integration branch, if any

        Returns:
            A message when deletion is forbidden, otherwise None
        """
        if WorktreeValidationService.is_main_worktree(record, repo_root):
            return "Cannot delete the main worktree."
        if not record.is_on_branch:
            return "Cannot delete a detached or bare worktree branch."
        if base_branch and record.branch_name == base_branch:
            return f"Refusing to delete base branch: {base_branch}."
        return None
