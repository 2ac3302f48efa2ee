"""Shared constants for gityard."""

from dataclasses import dataclass
from typing import Dict, List


CONFIG_FILENAME = "gityard.json"
GIT_EXECUTABLE = "git"
DEFAULT_BASE_BRANCH = "master"
DEFAULT_REMOTE = "origin"

# Sentinel branch names used by WorktreeRecord
BRANCH_DETACHED = "detached"
BRANCH_BARE = "bare"
COMMIT_UNKNOWN = "unknown"

# Placeholder for a display field that could not be derived
PLACEHOLDER = "-"

DEFAULT_SCRIPTS: Dict[str, str] = {
    "test": "bun test",
    "build": "bun run build",
    "dev": "bun run dev",
    "lint": "bun run lint",
}


@dataclass
class ColumnDefinition:
    """Definition of a worktree table column."""

    key: str
    label: str
    min_width: int
    max_width: int


# Unified column definitions for the list command and the interactive view
COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("name", "Worktree", 10, 28),
    ColumnDefinition("branch", "Branch", 8, 20),
    ColumnDefinition("age", "Age", 5, 8),
    ColumnDefinition("status", "Changes", 7, 42),
    ColumnDefinition("diff", "Diff", 6, 14),
]


# Symbol constants
SYMBOL_SELECTED = "➤ "
SYMBOL_UNSELECTED = "  "
CREATE_ROW_LABEL = "+ Create a new worktree"


# Colors shared by the list table and the interactive view (Rich color names)
COLORS = {
    "selected": "green",
    "current": "blue",
    "staged": "blue",
    "unstaged": "yellow",
    "untracked": "yellow",
    "added": "green",
    "deleted": "red",
    "error": "red",
    "hint": "bright_black",
    "menu_selected": "cyan",
}


HELP_TEXT = """gityard - Git worktree helper

Usage:
  gityard [switch] [name] [branch] [--cd]
  gityard list
  gityard rm <worktree> [--force]
  gityard run <worktree> <script>
  gityard init
  gityard merge <worktree> --squash|--no-ff [--base BRANCH]
  gityard delete <worktree> [--force] [--force-branch]

Tips:
  eval "$(gityard switch --cd <name>)"
"""
