"""Formatting utilities for gityard.

This package provides the formatting functions shared by the list table and
the interactive view, organized into logical modules:
- date: Commit age formatting
- worktree: Worktree names, change counts and table cells
"""

# Date formatters
from .date import format_age

# Worktree formatters
from .worktree import (
    format_status_text,
    format_diff_text,
    format_worktree,
    get_worktree_name,
    get_relative_worktree_name,
    pad_cell,
    column_widths,
)

__all__ = [
    # Date
    "format_age",
    # Worktree
    "format_status_text",
    "format_diff_text",
    "format_worktree",
    "get_worktree_name",
    "get_relative_worktree_name",
    "pad_cell",
    "column_widths",
]
