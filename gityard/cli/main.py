"""Command-line entry point for gityard"""

import os
import sys
from argparse import Namespace
from typing import Callable, Dict, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from gityard.config import Settings
from gityard.constants import HELP_TEXT
from gityard.core import Gityard
from gityard.exceptions import DirtyWorktreeError, UsageError
from gityard.logging_config import get_log_file, get_logger, setup_logging
from gityard.cli.args import parse_args

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def print_plain(line: str) -> None:
    """Print a line meant for shell eval, without markup or wrapping."""
    console.print(line, markup=False, highlight=False, soft_wrap=True)


def cmd_help(yard: Gityard, args: Namespace) -> int:
    console.print(HELP_TEXT, markup=False, highlight=False)
    return 0


def cmd_init(yard: Gityard, args: Namespace) -> int:
    path = yard.init_config()
    console.print(f"[green]Created {path} with default scripts[/green]")
    return 0


def cmd_list(yard: Gityard, args: Namespace) -> int:
    repo_root = yard.resolve_root()
    records = yard.list_worktrees(repo_root)
    config = yard.load_config(repo_root)
    base_branch = yard.resolve_base_branch(repo_root=repo_root, config=config)
    rows = yard.display_service.build_rows(records, repo_root, config, base_branch)
    yard.display_service.display_worktree_table(records, rows)
    return 0


def cmd_rm(yard: Gityard, args: Namespace) -> int:
    try:
        record = yard.remove(args.name, force=args.force)
    except DirtyWorktreeError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        err_console.print("[yellow]Tip: use --force to remove it anyway.[/yellow]")
        return 1
    console.print(f"[green]Removed worktree: {escape(record.path)}[/green]")
    return 0


def cmd_switch(yard: Gityard, args: Namespace) -> int:
    if args.name:
        result = yard.ensure_and_enter(args.name, args.branch)
        if args.cd:
            print_plain(f'cd "{result.path}"')
            return 0
        if result.created:
            console.print(f"[green]Created and switched to worktree: [cyan]{escape(result.path)}[/cyan][/green]")
        else:
            console.print(f"[green]Switched to worktree: [cyan]{escape(result.path)}[/cyan][/green]")
        console.print(f"[dim]To change directory, run: cd {escape(result.path)}[/dim]")
        console.print(f'[dim]Or auto-cd: eval "$(gityard switch --cd {args.name})"[/dim]')
        return 0

    if not sys.stdin.isatty():
        raise UsageError("Interactive switch needs a terminal; pass a worktree name instead")

    # Imported lazily so non-interactive commands never load textual
    from gityard.tui import CANCELLED, GityardApp
    from gityard.ui.controller import SwitchController

    controller = SwitchController(yard, cd_mode=args.cd)
    outcome = GityardApp(controller).run() or controller.outcome or CANCELLED

    if outcome.is_error:
        err_console.print(f"[red]Error: {escape(outcome.message)}[/red]")
    elif args.cd:
        print_plain(outcome.message)
    else:
        console.print(outcome.message, markup=False)
    return outcome.exit_code


def cmd_run(yard: Gityard, args: Namespace) -> int:
    console.print(f"[blue]Running script '[bold]{args.script}[/bold]' in worktree '[cyan]{args.worktree}[/cyan]'...[/blue]")
    yard.run_script(args.worktree, args.script)
    console.print(f"[green]Executed script '[bold]{args.script}[/bold]' in worktree '[cyan]{args.worktree}[/cyan]'[/green]")
    return 0


def cmd_merge(yard: Gityard, args: Namespace) -> int:
    result = yard.merge(args.name, squash=args.squash, no_ff=args.no_ff, base_branch=args.base_branch)
    console.print(f"[green]Merged {result.merged_branch} into {result.base_branch}.[/green]")
    return 0


def cmd_delete(yard: Gityard, args: Namespace) -> int:
    result = yard.delete_branch(args.name, force_branch=args.force_branch, force=args.force)
    console.print(f"[green]Removed worktree and deleted branch: {result.branch_name}.[/green]")
    return 0


COMMAND_HANDLERS: Dict[str, Callable[[Gityard, Namespace], int]] = {
    "help": cmd_help,
    "init": cmd_init,
    "list": cmd_list,
    "rm": cmd_rm,
    "switch": cmd_switch,
    "run": cmd_run,
    "merge": cmd_merge,
    "delete": cmd_delete,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    debug = False
    try:
        parsed_args = parse_args(argv)
        debug = parsed_args.debug

        # The interactive view owns the terminal, so logs only go to the file
        tui_mode = parsed_args.command == "switch" and not parsed_args.name
        setup_logging(verbose=parsed_args.verbose, debug=debug, tui_mode=tui_mode)

        settings = Settings(
            verbose=parsed_args.verbose,
            debug=debug,
            base_branch=getattr(parsed_args, "base_branch", None),
        )

        if debug:
            err_console.print("[yellow]Debug mode enabled[/yellow]")
            err_console.print(f"[yellow]Logging to {get_log_file()}[/yellow]")
            for key, value in settings.to_dict().items():
                err_console.print(f"  {key}: {value}")

        yard = Gityard(os.getcwd(), settings)
        logger.debug(f"Running command '{parsed_args.command}' from {yard.start_dir}")
        return COMMAND_HANDLERS[parsed_args.command](yard, parsed_args)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]", highlight=False)
        if debug:
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
