"""Command-line argument parsing for gityard."""

import argparse
import sys
from typing import List, Optional, Sequence

from gityard.__version__ import __version__

COMMANDS = ("init", "list", "rm", "switch", "run", "merge", "delete", "help")
DEFAULT_COMMAND = "switch"

EPILOG = 'Tip: change directory with eval "$(gityard switch --cd <name>)"'


def _common_options(suppress_defaults: bool) -> argparse.ArgumentParser:
    """Options accepted before and after the sub-command.

    Sub-command copies suppress their defaults so they do not overwrite a
    flag given before the sub-command.
    """
    default = argparse.SUPPRESS if suppress_defaults else False
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("-v", "--verbose", action="store_true", default=default, help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", default=default, help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"gityard {__version__}")
    return parser


def build_parser() -> argparse.ArgumentParser:
    """Build the gityard argument parser with one sub-parser per command."""
    parser = argparse.ArgumentParser(
        prog="gityard",
        description="Git worktree helper: list, switch, create, merge and remove worktrees",
        epilog=EPILOG,
        parents=[_common_options(suppress_defaults=False)],
    )
    common = _common_options(suppress_defaults=True)
    subparsers = parser.add_subparsers(dest="command", metavar="command")

    subparsers.add_parser("init", parents=[common], help="Create gityard.json with default scripts")
    subparsers.add_parser("list", parents=[common], help="List worktrees with their changes")
    subparsers.add_parser("help", parents=[common], help="Show usage")

    rm = subparsers.add_parser("rm", parents=[common], help="Remove a worktree")
    rm.add_argument("name", help="Worktree name or path")
    rm.add_argument("--force", action="store_true", help="Remove even with modified or untracked files")

    switch = subparsers.add_parser(
        "switch", parents=[common], help="Switch to a worktree, creating it if needed (default)"
    )
    switch.add_argument("name", nargs="?", help="Worktree name or path (interactive when omitted)")
    switch.add_argument("branch", nargs="?", help="Branch for a new worktree (defaults to the path)")
    switch.add_argument("--cd", action="store_true", help='Print a cd "<path>" line for shell eval')

    run = subparsers.add_parser("run", parents=[common], help="Run a gityard.json script in a worktree")
    run.add_argument("worktree", help="Worktree name or path")
    run.add_argument("script", help="Script name from gityard.json")

    merge = subparsers.add_parser("merge", parents=[common], help="Merge a worktree's branch into the base branch")
    merge.add_argument("name", help="Worktree name or path")
    merge.add_argument("--squash", action="store_true", help="Squash merge")
    merge.add_argument("--no-ff", dest="no_ff", action="store_true", help="Merge with a merge commit")
    merge.add_argument("--base", dest="base_branch", help="Base branch (default: baseBranch from gityard.json, then master)")

    delete = subparsers.add_parser("delete", parents=[common], help="Remove a worktree and delete its branch")
    delete.add_argument("name", help="Worktree name or path")
    delete.add_argument("--force", action="store_true", help="Remove the worktree even with local changes")
    delete.add_argument(
        "--force-branch", dest="force_branch", action="store_true", help="Delete the branch with -D"
    )

    return parser


def normalize_argv(argv: Sequence[str]) -> List[str]:
    """Insert the default command when no known sub-command is given.

    `gityard`, `gityard my-feature` and `gityard --cd my-feature` all mean
    `gityard switch ...`.
    """
    argv = list(argv)
    for token in argv:
        if token in ("-h", "--help", "--version"):
            return argv
        if not token.startswith("-"):
            if token in COMMANDS:
                return argv
            break
    return [DEFAULT_COMMAND, *argv]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    if argv is None:
        argv = sys.argv[1:]
    return build_parser().parse_args(normalize_argv(argv))
