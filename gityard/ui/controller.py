"""State machine behind the interactive worktree switcher."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from gityard.constants import CREATE_ROW_LABEL, DEFAULT_BASE_BRANCH
from gityard.logging_config import get_logger
from gityard.models.worktree import WorktreeRow
from gityard.services.worktree_validation_service import is_valid_worktree_path

logger = get_logger(__name__)

CREATE_ROW_VALUE = "__CREATE__"

# Zero-argument coroutine function the host awaits to run a dispatched operation
OperationTask = Callable[[], Awaitable[None]]


class ViewState(Enum):
    """Steps of the interactive view."""
    LOADING = "loading"
    SELECT = "select"
    PATH = "path"
    BRANCH = "branch"
    MERGE = "merge"
    MERGING = "merging"
    DELETE = "delete"
    DELETING = "deleting"
    DONE = "done"
    ERROR = "error"


TERMINAL_STATES = (ViewState.DONE, ViewState.ERROR)


@dataclass(frozen=True)
class ViewOutcome:
    """Final message of an interactive session; errors exit non-zero."""

    message: str
    is_error: bool = False

    @property
    def exit_code(self) -> int:
        return 1 if self.is_error else 0


@dataclass(frozen=True)
class MenuOption:
    value: str
    label: str


DELETE_OPTIONS = [
    MenuOption("worktree", "Remove worktree only"),
    MenuOption("safe", "Remove worktree + delete branch (safe)"),
    MenuOption("force", "Remove worktree + delete branch (force)"),
    MenuOption("back", "Back"),
]


def default_branch_for_path(path: str) -> str:
    """Pre-filled branch name for a new worktree path: its final segment."""
    return path.rstrip("/").split("/")[-1] or path


def create_row() -> WorktreeRow:
    return WorktreeRow(value=CREATE_ROW_VALUE, name=CREATE_ROW_LABEL, is_create=True)


class SwitchController:
    """Owns the interactive view state and reacts to keypresses.

    Key handling is synchronous. Operations that touch the repository are
    returned from handle_key as coroutine functions for the host to await;
    once dispatched they run to completion and end in DONE or ERROR.
    """

    def __init__(self, yard, cd_mode: bool = False):
        """Initialize the controller.

        Args:
            yard: Gityard instance the operations run against
            cd_mode: Report successful switches as a `cd "<path>"` line
        """
        self.yard = yard
        self.cd_mode = cd_mode

        self.state = ViewState.LOADING
        self.rows: List[WorktreeRow] = []
        self.index = 0
        self.menu_index = 0
        self.path_input = ""
        self.branch_input = ""
        self.default_branch = ""
        self.base_branch: Optional[str] = None
        self.output: Optional[str] = None
        self.error: Optional[str] = None
        self.busy = False

    # Derived state

    @property
    def items(self) -> List[WorktreeRow]:
        """Rows shown in the list, the create row first."""
        return [create_row()] + self.rows

    @property
    def selected(self) -> Optional[WorktreeRow]:
        items = self.items
        if not items:
            return None
        return items[self.index % len(items)]

    @property
    def base_label(self) -> str:
        return self.base_branch or DEFAULT_BASE_BRANCH

    @property
    def merge_options(self) -> List[MenuOption]:
        return [
            MenuOption("squash", f"Merge into {self.base_label} (squash)"),
            MenuOption("no-ff", f"Merge into {self.base_label} (no-ff)"),
            MenuOption("back", "Back"),
        ]

    @property
    def menu_options(self) -> List[MenuOption]:
        if self.state == ViewState.MERGE:
            return self.merge_options
        if self.state == ViewState.DELETE:
            return DELETE_OPTIONS
        return []

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def outcome(self) -> Optional[ViewOutcome]:
        if self.state == ViewState.DONE:
            return ViewOutcome(self.output or "Done.")
        if self.state == ViewState.ERROR:
            return ViewOutcome(self.error or "Unknown error", is_error=True)
        return None

    # Loading

    async def load(self) -> None:
        """Load worktrees and their display rows, then enter SELECT.

        Row details for every worktree are derived concurrently; any failure
        before that point ends the session in ERROR.
        """
        yard = self.yard
        try:
            repo_root = await asyncio.to_thread(yard.resolve_root)
            records, config = await asyncio.gather(
                asyncio.to_thread(yard.list_worktrees, repo_root),
                asyncio.to_thread(yard.load_config, repo_root),
            )
            self.base_branch = await asyncio.to_thread(
                yard.resolve_base_branch, None, repo_root, config
            )
            rows = await asyncio.gather(
                *(
                    asyncio.to_thread(
                        yard.display_service.build_row, record, repo_root, config, self.base_branch
                    )
                    for record in records
                    if record.is_switch_target
                )
            )
        except Exception as e:
            logger.error(f"Error loading worktrees: {e}", exc_info=True)
            self._fail(e)
            return

        self.rows = list(rows)
        self.index = 0
        self.state = ViewState.SELECT
        logger.debug(f"Loaded {len(self.rows)} worktree rows (base: {self.base_branch})")

    # Key handling

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[OperationTask]:
        """
        Apply one keypress.

        Args:
            key: Key name ("up", "down", "enter", "escape", "backspace", ...)
            character: Printable character typed, if any

        Returns:
            A coroutine function to await when the key dispatched an operation
        """
        if self.busy or self.is_finished:
            return None

        if self.state == ViewState.SELECT:
            return self._handle_select(key, character)
        if self.state in (ViewState.PATH, ViewState.BRANCH):
            return self._handle_text(key, character)
        if self.state in (ViewState.MERGE, ViewState.DELETE):
            return self._handle_menu(key)
        return None

    def _handle_select(self, key: str, character: Optional[str]) -> Optional[OperationTask]:
        count = len(self.items)
        if key in ("up", "left"):
            self.index = (self.index - 1) % count
            return None
        if key in ("down", "right"):
            self.index = (self.index + 1) % count
            return None

        selected = self.selected
        if key == "enter":
            if selected.is_create:
                self.path_input = ""
                self.state = ViewState.PATH
                return None
            return self._dispatch(lambda: self._switch(selected.value))

        if character and character.lower() in ("m", "d") and not selected.is_create:
            self.menu_index = 0
            self.state = ViewState.MERGE if character.lower() == "m" else ViewState.DELETE
        return None

    def _handle_text(self, key: str, character: Optional[str]) -> Optional[OperationTask]:
        buffer = self.path_input if self.state == ViewState.PATH else self.branch_input

        if key == "enter":
            if self.state == ViewState.PATH:
                return self._submit_path()
            return self._submit_branch()
        if key in ("backspace", "delete"):
            buffer = buffer[:-1]
        elif character and character.isprintable():
            buffer += character
        else:
            return None

        if self.state == ViewState.PATH:
            self.path_input = buffer
        else:
            self.branch_input = buffer
        return None

    def _submit_path(self) -> None:
        value = self.path_input.strip()
        self.path_input = value
        if not is_valid_worktree_path(value):
            self.error = f"Invalid worktree path: {value}"
            self.state = ViewState.ERROR
            return None
        self.default_branch = default_branch_for_path(value)
        self.branch_input = self.default_branch
        self.state = ViewState.BRANCH
        return None

    def _submit_branch(self) -> OperationTask:
        path = self.path_input
        branch = self.branch_input.strip() or self.default_branch or path
        return self._dispatch(lambda: self._switch(path, branch))

    def _handle_menu(self, key: str) -> Optional[OperationTask]:
        options = self.menu_options
        if key == "escape":
            self.state = ViewState.SELECT
            return None
        if key in ("up", "left"):
            self.menu_index = (self.menu_index - 1) % len(options)
            return None
        if key in ("down", "right"):
            self.menu_index = (self.menu_index + 1) % len(options)
            return None
        if key != "enter":
            return None

        selected = self.selected
        choice = options[self.menu_index].value
        if choice == "back" or selected is None or selected.is_create:
            self.state = ViewState.SELECT
            return None

        if self.state == ViewState.MERGE:
            self.state = ViewState.MERGING
            return self._dispatch(lambda: self._merge(selected.value, choice))

        self.state = ViewState.DELETING
        if choice == "worktree":
            return self._dispatch(lambda: self._remove(selected))
        return self._dispatch(lambda: self._delete_branch(selected.value, choice == "force"))

    # Operations (run in a worker thread)

    def _switch(self, name_or_path: str, branch: Optional[str] = None) -> str:
        result = self.yard.ensure_and_enter(name_or_path, branch)
        if self.cd_mode:
            return f'cd "{result.path}"'
        if result.created:
            return f"Created and switched to worktree: {result.path}"
        return f"Switched to worktree: {result.path}"

    def _merge(self, name_or_path: str, choice: str) -> str:
        result = self.yard.merge(name_or_path, squash=choice == "squash", no_ff=choice == "no-ff")
        return f"Merged {result.merged_branch} into {result.base_branch}."

    def _remove(self, row: WorktreeRow) -> str:
        self.yard.remove(row.value, force=False)
        return f"Removed worktree: {row.name}."

    def _delete_branch(self, name_or_path: str, force_branch: bool) -> str:
        result = self.yard.delete_branch(name_or_path, force_branch=force_branch)
        return f"Removed worktree and deleted branch: {result.branch_name}."

    def _dispatch(self, operation: Callable[[], str]) -> OperationTask:
        self.busy = True

        async def task() -> None:
            try:
                message = await asyncio.to_thread(operation)
            except Exception as e:
                logger.error(f"Operation failed: {e}", exc_info=True)
                self._fail(e)
            else:
                self.output = message
                self.state = ViewState.DONE
            finally:
                self.busy = False

        return task

    def _fail(self, error: Exception) -> None:
        self.error = str(error) or error.__class__.__name__
        self.state = ViewState.ERROR
