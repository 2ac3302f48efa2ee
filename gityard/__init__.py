"""
gityard - A git worktree helper
"""

import os

# GitPython checks for git at import time; a missing executable is reported
# by GitRunner as a RepositoryError instead of an ImportError
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

from .__version__ import __version__  # noqa: E402
from .core import Gityard  # noqa: E402
from .cli.main import main  # noqa: E402

__all__ = ["Gityard", "main", "__version__"]
