"""Interactive TUI for gityard using Textual."""

from typing import Optional

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Footer, Header, Static

from .__version__ import __version__
from .logging_config import get_logger
from .ui.controller import OperationTask, SwitchController, ViewOutcome
from .ui.views import render_view

logger = get_logger(__name__)

CANCELLED = ViewOutcome("Operation cancelled by user", is_error=True)


class GityardApp(App[ViewOutcome]):
    """Hosts the worktree switcher and exits with its final outcome."""

    TITLE = "gityard"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    #view-container {
        height: 1fr;
        padding: 1 2;
    }

    #view {
        width: auto;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, controller: SwitchController):
        super().__init__()
        self.controller = controller

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Header(show_clock=False, icon="")
        with ScrollableContainer(id="view-container"):
            yield Static(id="view")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_view()
        self.load_worktrees()  # @work decorator handles Worker creation

    @work(exclusive=True, thread=False)
    async def load_worktrees(self) -> None:
        """Load worktree rows in the background."""
        await self.controller.load()
        self._refresh_view()

    @work(exclusive=False, thread=False, group="operation")
    async def run_operation(self, task: OperationTask) -> None:
        """Run a dispatched operation to completion (never cancelled)."""
        self._refresh_view()
        await task()
        self._refresh_view()

    def on_key(self, event: events.Key) -> None:
        """Forward keypresses to the controller."""
        character: Optional[str] = event.character if event.is_printable else None
        task = self.controller.handle_key(event.key, character)
        event.stop()
        if task is not None:
            self.run_operation(task)
        else:
            self._refresh_view()

    def _refresh_view(self) -> None:
        self.query_one("#view", Static).update(render_view(self.controller))
        if self.controller.is_finished:
            logger.debug(f"Interactive session finished in state {self.controller.state.value}")
            self.exit(self.controller.outcome)

    async def action_quit(self) -> None:
        """Quit without running anything."""
        self.exit(CANCELLED)
