"""Interactive view for gityard.

The switcher is split into a state machine (controller) and a pure function
rendering that state (views); gityard.tui hosts both in a textual app.
"""

from .controller import SwitchController, ViewOutcome, ViewState
from .views import render_view

__all__ = ["SwitchController", "ViewOutcome", "ViewState", "render_view"]
