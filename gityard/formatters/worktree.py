"""Worktree name, change count and table cell formatting utilities."""

import os
from typing import Dict, Iterable, Optional

from gityard.constants import COLUMNS
from gityard.models.worktree import DiffCounts, StatusCounts, WorktreeRecord, WorktreeRow


def format_status_text(counts: StatusCounts) -> str:
    """
    Format change counts for the Changes column.

    Example:
        "staged:1 unstaged:0 untracked:2"
    """
    return f"staged:{counts.staged} unstaged:{counts.unstaged} untracked:{counts.untracked}"


def format_diff_text(counts: DiffCounts) -> str:
    """Format line counts for the Diff column, e.g. "+12 -3"."""
    return f"+{counts.added} -{counts.deleted}"


def format_worktree(record: WorktreeRecord) -> str:
    """
    Format a worktree as one line of text.

    Args:
        record: Worktree record

    Returns:
        "<path> <branch>[ (detached)] [<commit7>]"
    """
    return str(record)


def get_worktree_name(path: str) -> str:
    """Get the short name of a worktree: the final path segment."""
    parts = path.split("/")
    return parts[-1] or path


def get_relative_worktree_name(path: str, display_base_path: Optional[str] = None) -> str:
    """
    Get the display name of a worktree.

    Args:
        path: Worktree path
        display_base_path: Directory that display names are relative to

    Returns:
        The path relative to display_base_path when it lies under it,
        otherwise the final path segment
    """
    if display_base_path:
        base = os.path.normpath(display_base_path)
        target = os.path.normpath(path)
        if target != base and target.startswith(base.rstrip(os.sep) + os.sep):
            return os.path.relpath(target, base)
    return get_worktree_name(path)


def pad_cell(value: str, width: int) -> str:
    """
    Pad or truncate a cell to an exact width.

    Values longer than the width are cut and end with "..." (or are simply
    cut when the width leaves no room for the ellipsis).
    """
    if len(value) == width:
        return value
    if len(value) < width:
        return value.ljust(width)
    if width <= 3:
        return value[:width]
    return f"{value[:width - 3]}..."


def column_widths(rows: Iterable[WorktreeRow]) -> Dict[str, int]:
    """
    Compute column widths for the worktree table.

    Each column fits its widest cell (or its label), clamped to the
    column's minimum and maximum width.
    """
    rows = list(rows)
    widths = {}
    for col in COLUMNS:
        longest = max([len(col.label)] + [len(getattr(row, col.key)) for row in rows])
        widths[col.key] = max(col.min_width, min(col.max_width, longest))
    return widths
