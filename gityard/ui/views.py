"""Rendering of the interactive switcher, one rich renderable per state."""

from typing import Dict, List

from rich.console import Group, RenderableType
from rich.text import Text

from gityard.constants import COLORS, COLUMNS, SYMBOL_SELECTED, SYMBOL_UNSELECTED
from gityard.formatters import column_widths, pad_cell
from gityard.models.worktree import WorktreeRow
from gityard.ui.controller import MenuOption, SwitchController, ViewState

CELL_GAP = "  "
MENU_HINT = "Press Enter to confirm, Esc to cancel."


def _status_cell(row: WorktreeRow, width: int) -> Text:
    """Changes cell, colored per count when it fits the column."""
    if row.status_counts is None:
        return Text(pad_cell(row.status, width))

    counts = row.status_counts
    parts = [
        (f"staged:{counts.staged}", COLORS["staged"]),
        (f"unstaged:{counts.unstaged}", COLORS["unstaged"]),
        (f"untracked:{counts.untracked}", COLORS["untracked"]),
    ]
    return _colored_cell(parts, width)


def _diff_cell(row: WorktreeRow, width: int) -> Text:
    if row.diff_counts is None:
        return Text(pad_cell(row.diff, width))

    parts = [
        (f"+{row.diff_counts.added}", COLORS["added"]),
        (f"-{row.diff_counts.deleted}", COLORS["deleted"]),
    ]
    return _colored_cell(parts, width)


def _colored_cell(parts, width: int) -> Text:
    full = " ".join(label for label, _ in parts)
    if len(full) > width:
        return Text(pad_cell(full, width))

    text = Text()
    for position, (label, style) in enumerate(parts):
        if position:
            text.append(" ")
        text.append(label, style=style)
    text.append(" " * (width - len(full)))
    return text


def _header_line(widths: Dict[str, int]) -> Text:
    cells = [pad_cell(col.label, widths[col.key]) for col in COLUMNS]
    return Text(SYMBOL_UNSELECTED + CELL_GAP.join(cells), style=COLORS["hint"])


def _row_line(row: WorktreeRow, widths: Dict[str, int], is_selected: bool) -> Text:
    if is_selected:
        row_style = COLORS["selected"]
    elif row.is_current:
        row_style = COLORS["current"]
    else:
        row_style = ""

    prefix = SYMBOL_SELECTED if is_selected else SYMBOL_UNSELECTED
    left = CELL_GAP.join(
        [
            pad_cell(row.name, widths["name"]),
            pad_cell(row.branch, widths["branch"]),
            pad_cell(row.age, widths["age"]),
        ]
    )

    line = Text(prefix + left + CELL_GAP, style=row_style)
    line.append_text(_status_cell(row, widths["status"]))
    line.append(CELL_GAP)
    line.append_text(_diff_cell(row, widths["diff"]))
    return line


def _menu(title: str, options: List[MenuOption], index: int) -> Group:
    lines = [Text(title)]
    for position, option in enumerate(options):
        if position == index:
            lines.append(Text(SYMBOL_SELECTED + option.label, style=COLORS["menu_selected"]))
        else:
            lines.append(Text(SYMBOL_UNSELECTED + option.label))
    lines.append(Text(MENU_HINT, style=COLORS["hint"]))
    return Group(*lines)


def _text_input(label: str, value: str, placeholder: str) -> Group:
    if value:
        entry = Text(f"> {value}")
    else:
        entry = Text("> ")
        entry.append(placeholder, style=COLORS["hint"])
    return Group(Text(label), entry)


def _worktree_list(controller: SwitchController) -> Group:
    items = controller.items
    widths = column_widths(items)
    selected_index = controller.index % len(items)

    lines = [Text("Available worktrees:"), _header_line(widths)]
    for position, row in enumerate(items):
        lines.append(_row_line(row, widths, position == selected_index))
    lines.append(
        Text(
            "Use arrow keys and press Enter. "
            f"Press m to merge into {controller.base_label}, d to delete a branch.",
            style=COLORS["hint"],
        )
    )
    return Group(*lines)


def render_view(controller: SwitchController) -> RenderableType:
    """
    Render the controller's current state.

    Args:
        controller: Switcher state

    Returns:
        A rich renderable; rendering never changes the controller
    """
    state = controller.state

    if state == ViewState.LOADING:
        return Text("Loading worktrees...")
    if state == ViewState.ERROR:
        return Text(controller.error or "Unknown error", style=COLORS["error"])
    if state == ViewState.DONE:
        return Text(controller.output or "Done.")
    if state == ViewState.PATH:
        return _text_input(
            "Enter worktree path (e.g., ./my-feature)", controller.path_input, "./my-feature"
        )
    if state == ViewState.BRANCH:
        view = _text_input(
            "Enter branch name (optional, defaults to path)",
            controller.branch_input,
            controller.default_branch or "branch-name",
        )
        if controller.busy:
            return Group(view, Text("Creating worktree...", style=COLORS["hint"]))
        return view
    if state == ViewState.MERGING:
        return Text(f"Merging into {controller.base_label}...")
    if state == ViewState.DELETING:
        return Text("Deleting worktree...")
    if state == ViewState.MERGE:
        return _menu("Merge target:", controller.menu_options, controller.menu_index)
    if state == ViewState.DELETE:
        return _menu("Delete branch:", controller.menu_options, controller.menu_index)

    view = _worktree_list(controller)
    if controller.busy:
        return Group(view, Text("Switching...", style=COLORS["hint"]))
    return view
