"""Display and formatting service for worktree information"""
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from gityard.config import ProjectConfig
from gityard.constants import COLORS, COLUMNS, PLACEHOLDER
from gityard.formatters import (
    format_age,
    format_diff_text,
    format_status_text,
    format_worktree,
    get_relative_worktree_name,
)
from gityard.logging_config import get_logger
from gityard.models.worktree import WorktreeRecord, WorktreeRow
from gityard.services.git.branch_queries import BranchQueries
from gityard.services.worktree_validation_service import same_path

console = Console()
logger = get_logger(__name__)


def status_text(row: WorktreeRow) -> Text:
    """Changes cell with staged in blue and unstaged/untracked in yellow."""
    if row.status_counts is None:
        return Text(row.status)
    counts = row.status_counts
    text = Text()
    text.append(f"staged:{counts.staged}", style=COLORS["staged"])
    text.append(" ")
    text.append(f"unstaged:{counts.unstaged}", style=COLORS["unstaged"])
    text.append(" ")
    text.append(f"untracked:{counts.untracked}", style=COLORS["untracked"])
    return text


def diff_text(row: WorktreeRow) -> Text:
    """Diff cell with additions in green and deletions in red."""
    if row.diff_counts is None:
        return Text(row.diff)
    text = Text()
    text.append(f"+{row.diff_counts.added}", style=COLORS["added"])
    text.append(" ")
    text.append(f"-{row.diff_counts.deleted}", style=COLORS["deleted"])
    return text


class DisplayService:
    """Derives per-worktree display rows and prints the worktree table."""

    def __init__(self, branch_queries: BranchQueries, verbose: bool = False):
        self.branch_queries = branch_queries
        self.verbose = verbose

    def build_row(
        self,
        record: WorktreeRecord,
        repo_root: str,
        config: Optional[ProjectConfig] = None,
        base_branch: Optional[str] = None,
    ) -> WorktreeRow:
        """
        Build the display row of one worktree.

        Age, changes and diff are looked up independently; a lookup that
        fails leaves its field as "-" instead of failing the row.

        Args:
            record: Worktree to describe
            repo_root: Resolved repository root (marks the current row)
            config: Loaded gityard.json, for displayBasePath
            base_branch: Branch the diff is taken against (HEAD when None)

        Returns:
            WorktreeRow for the table
        """
        display_base_path = config.display_base_path if config else None
        row = WorktreeRow(
            value=record.path,
            name=get_relative_worktree_name(record.path, display_base_path),
            branch=record.branch_name,
            age=PLACEHOLDER,
            status=PLACEHOLDER,
            diff=PLACEHOLDER,
            is_current=same_path(record.path, repo_root),
        )

        try:
            timestamp = self.branch_queries.get_last_commit_timestamp(record.path)
            row.age = format_age(timestamp)
        except Exception as e:
            logger.debug(f"Could not read last commit of {record.path}: {e}")

        try:
            row.status_counts = self.branch_queries.get_status_counts(record.path)
            row.status = format_status_text(row.status_counts)
        except Exception as e:
            logger.debug(f"Could not read status of {record.path}: {e}")

        try:
            row.diff_counts = self.branch_queries.get_diff_counts(record.path, base_branch)
            row.diff = format_diff_text(row.diff_counts)
        except Exception as e:
            logger.debug(f"Could not read diff of {record.path}: {e}")

        return row

    def build_rows(
        self,
        records: List[WorktreeRecord],
        repo_root: str,
        config: Optional[ProjectConfig] = None,
        base_branch: Optional[str] = None,
    ) -> List[WorktreeRow]:
        return [self.build_row(record, repo_root, config, base_branch) for record in records]

    def display_worktree_table(
        self, records: List[WorktreeRecord], rows: List[WorktreeRow]
    ) -> None:
        """Display a table of worktree information."""
        if not rows:
            console.print("No worktrees found.")
            return

        table = Table()
        for col in COLUMNS:
            table.add_column(col.label, max_width=col.max_width, overflow="ellipsis")
            if col.key == "branch":
                table.add_column("Commit")

        for record, row in zip(records, rows):
            row_style = COLORS["current"] if row.is_current else None
            table.add_row(
                row.name,
                row.branch,
                record.commit_id[:7],
                row.age,
                status_text(row),
                diff_text(row),
                style=row_style,
            )

        console.print(table)

        if self.verbose:
            for record in records:
                console.print(f"  {format_worktree(record)}", style=COLORS["hint"])
