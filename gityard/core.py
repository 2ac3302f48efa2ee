"""Core functionality for gityard"""

import os
import shutil
from typing import List, Optional

from gityard.config import ProjectConfig, Settings, init_config, load_config
from gityard.constants import DEFAULT_REMOTE
from gityard.exceptions import (
    DirtyWorktreeError,
    InvalidPathError,
    NotFoundError,
    PathCollisionError,
    ProtectedWorktreeError,
    RepositoryError,
    ScriptNotFoundError,
    UsageError,
)
from gityard.logging_config import get_logger
from gityard.models.worktree import DeleteResult, MergeResult, SwitchResult, WorktreeRecord
from gityard.services.display_service import DisplayService
from gityard.services.git import BranchQueries, GitOperations, GitRunner, WorktreeService
from gityard.services.script_service import ScriptService
from gityard.services.worktree_validation_service import (
    WorktreeValidationService,
    is_valid_worktree_path,
    same_path,
)

logger = get_logger(__name__)

# Marker git prints when `worktree remove` refuses a worktree with local changes
DIRTY_WORKTREE_MARKER = "modified or untracked files"


def default_branch_name(path: str) -> str:
    """Branch name used for a new worktree when none is given.

    Relative paths keep their segments ("feature/x" becomes "feature/x"),
    minus a leading "./"; absolute paths use their final segment.
    """
    if os.path.isabs(path):
        return os.path.basename(path.rstrip("/")) or path
    if path.startswith("./"):
        path = path[2:]
    return path.rstrip("/") or path


class Gityard:
    """Main class for managing the worktrees of a repository."""

    def __init__(
        self,
        start_dir: Optional[str] = None,
        settings: Optional[Settings] = None,
        runner: Optional[GitRunner] = None,
    ):
        """Initialize Gityard.

        Args:
            start_dir: Directory gityard was started from (defaults to the cwd)
            settings: Run-time settings built from CLI arguments
            runner: Git runner (a default one is created when omitted)
        """
        self.start_dir = os.path.abspath(start_dir or os.getcwd())
        self.settings = settings or Settings()
        self.runner = runner or GitRunner(self.start_dir)

        self.worktree_service = WorktreeService(self.runner)
        self.branch_queries = BranchQueries(self.runner)
        self.git_operations = GitOperations(self.runner)
        self.script_service = ScriptService(self.runner)
        self.display_service = DisplayService(self.branch_queries, verbose=self.settings.verbose)

    # Lookups

    def resolve_root(self) -> str:
        return self.worktree_service.resolve_root(self.start_dir)

    def list_worktrees(self, repo_root: Optional[str] = None) -> List[WorktreeRecord]:
        return self.worktree_service.list_worktrees(repo_root or self.resolve_root())

    def find_worktree(
        self, name_or_path: str, records: List[WorktreeRecord]
    ) -> Optional[WorktreeRecord]:
        """Find a worktree by full path, short name, or a path relative to the start dir."""
        record = WorktreeValidationService.find_worktree(records, name_or_path)
        if record is not None or not is_valid_worktree_path(name_or_path):
            return record

        target = os.path.join(self.start_dir, name_or_path)
        for candidate in records:
            if same_path(candidate.path, target):
                return candidate
        return None

    def _require_worktree(self, name_or_path: str, records: List[WorktreeRecord]) -> WorktreeRecord:
        if not name_or_path or not name_or_path.strip():
            raise UsageError("A worktree name or path is required")
        record = self.find_worktree(name_or_path, records)
        if record is None:
            raise NotFoundError("Worktree", name_or_path)
        return record

    def load_config(self, directory: Optional[str] = None) -> Optional[ProjectConfig]:
        return load_config(directory or self.resolve_root())

    def resolve_base_branch(
        self,
        preferred: Optional[str] = None,
        repo_root: Optional[str] = None,
        config: Optional[ProjectConfig] = None,
    ) -> Optional[str]:
        """Resolve the integration branch that merge and delete guard against.

        Args:
            preferred: Branch to try first (defaults to settings, then gityard.json, then "master")
            repo_root: Repository root, resolved when omitted
            config: Loaded gityard.json, loaded from the root when omitted

        Returns:
            The first existing branch among the preferred one, origin/HEAD,
            "main" and "master", or None
        """
        repo_root = repo_root or self.resolve_root()
        if preferred is None:
            if config is None:
                config = self.load_config(repo_root)
            preferred = self.settings.preferred_base_branch(config)
        return self.branch_queries.resolve_base_branch(preferred, repo_root)

    # Operations

    def ensure_and_enter(self, name_or_path: str, branch: Optional[str] = None) -> SwitchResult:
        """
        Switch to a worktree, creating it when no worktree matches.

        Args:
            name_or_path: Existing worktree name/path, or the path of a new one
            branch: Branch for a new worktree (defaults to a name derived from the path)

        Returns:
            SwitchResult with the worktree path and whether it was created

        Raises:
            UsageError: If the name matches the bare repository entry
            InvalidPathError: If the new path is empty or climbs out with ".."
            PathCollisionError: If the new path already exists on disk
            RepositoryError: If git cannot create the worktree
        """
        repo_root = self.resolve_root()
        records = self.list_worktrees(repo_root)

        existing = self.find_worktree(name_or_path, records) if name_or_path else None
        if existing is not None:
            if not existing.is_switch_target:
                raise UsageError(f"Cannot switch to a bare repository record: {existing.path}")
            logger.info(f"Switching to existing worktree {existing.path}")
            return SwitchResult(path=existing.path, created=False)

        if not is_valid_worktree_path(name_or_path):
            raise InvalidPathError(name_or_path)

        target = os.path.normpath(os.path.join(self.start_dir, name_or_path))
        if os.path.lexists(target):
            raise PathCollisionError(target)

        branch_name = branch.strip() if branch and branch.strip() else default_branch_name(name_or_path)

        if self.branch_queries.branch_exists_locally(branch_name, repo_root):
            args = [target, branch_name]
        elif self.branch_queries.branch_exists_remotely(branch_name, repo_root):
            args = ["--track", "-b", branch_name, target, f"{DEFAULT_REMOTE}/{branch_name}"]
        else:
            args = ["-b", branch_name, target]
        self.worktree_service.add_worktree(args, repo_root)

        config = self.load_config(repo_root)
        if config and config.hooks.on_create:
            logger.info(f"Running onCreate hooks in {target}")
            self.script_service.run_hooks(config.hooks.on_create, target, config)

        return SwitchResult(path=target, created=True)

    def remove(self, name_or_path: str, force: bool = False) -> WorktreeRecord:
        """
        Remove a worktree and its directory.

        onRemove hooks run in the worktree before it is removed.

        Returns:
            The removed worktree

        Raises:
            NotFoundError: If no worktree matches
            DirtyWorktreeError: If the worktree has changes and force is not set
            RepositoryError: If git refuses the removal for another reason
        """
        repo_root = self.resolve_root()
        records = self.list_worktrees(repo_root)
        record = self._require_worktree(name_or_path, records)

        config = self.load_config(repo_root)
        if config and config.hooks.on_remove:
            logger.info(f"Running onRemove hooks in {record.path}")
            self.script_service.run_hooks(config.hooks.on_remove, record.path, config)

        result = self.worktree_service.remove_worktree(record.path, repo_root, force=force)
        if not result.ok:
            if DIRTY_WORKTREE_MARKER in result.stderr:
                raise DirtyWorktreeError(
                    f"Worktree has modified or untracked files: {record.path}", path=record.path
                )
            raise RepositoryError.command_failed("Failed to remove worktree", result.stderr)

        self._cleanup_worktree_dir(record.path, repo_root)
        return record

    def _cleanup_worktree_dir(self, path: str, repo_root: str) -> None:
        """Delete a removed worktree's directory if git left it behind."""
        resolved = os.path.realpath(path)
        if same_path(resolved, repo_root) or resolved == os.path.abspath(os.sep):
            return
        if not os.path.isdir(resolved):
            return
        logger.debug(f"Deleting leftover worktree directory {resolved}")
        shutil.rmtree(resolved, ignore_errors=True)

    def delete_branch(
        self, name_or_path: str, force_branch: bool = False, force: bool = False
    ) -> DeleteResult:
        """
        Remove a worktree and delete its branch.

        Args:
            name_or_path: Worktree name or path
            force_branch: Delete with `git branch -D` instead of `-d`
            force: Remove the worktree even if it has local changes

        Raises:
            ProtectedWorktreeError: For the main worktree, a detached or bare
                worktree, or the base branch (whatever the force flags)
            RepositoryError: If the branch cannot be deleted
        """
        repo_root = self.resolve_root()
        records = self.list_worktrees(repo_root)
        record = self._require_worktree(name_or_path, records)

        config = self.load_config(repo_root)
        base_branch = self.resolve_base_branch(repo_root=repo_root, config=config)
        if base_branch is None:
            base_branch = self.settings.preferred_base_branch(config)

        # The listing puts the main worktree first, even when run from a linked one
        main_path = records[0].path if records else repo_root
        reason = WorktreeValidationService.deletion_block_reason(record, main_path, base_branch)
        if reason:
            raise ProtectedWorktreeError(reason)
        if same_path(record.path, repo_root):
            raise ProtectedWorktreeError("Cannot delete the worktree you are in.")

        self.remove(record.path, force=force)

        if self.branch_queries.branch_exists_locally(record.branch_name, repo_root):
            self.git_operations.delete_branch(record.branch_name, repo_root, force=force_branch)
        else:
            logger.debug(f"Branch {record.branch_name} no longer exists locally")

        return DeleteResult(branch_name=record.branch_name)

    def merge(
        self,
        name_or_path: str,
        squash: bool = False,
        no_ff: bool = False,
        base_branch: Optional[str] = None,
    ) -> MergeResult:
        """
        Merge a worktree's branch into the base branch.

        Exactly one of squash and no_ff must be set. The merge happens in the
        worktree that has the base branch checked out (the main worktree
        otherwise), which must be clean.

        Raises:
            UsageError: Wrong strategy flags, a detached/bare source, or a
                source already on the base branch
            NotFoundError: If the worktree or base branch does not exist
            DirtyWorktreeError: If the base worktree has changes
            MergeFailedError: If checkout or merge fails
        """
        if squash and no_ff:
            raise UsageError("Specify only one merge strategy: --squash or --no-ff")
        if not squash and not no_ff:
            raise UsageError("Specify a merge strategy: --squash or --no-ff")

        repo_root = self.resolve_root()
        records = self.list_worktrees(repo_root)
        record = self._require_worktree(name_or_path, records)
        if not record.is_on_branch:
            raise UsageError("Cannot merge from a detached or bare worktree.")

        if base_branch:
            if not self.branch_queries.branch_exists_locally(base_branch, repo_root):
                raise NotFoundError("Base branch", base_branch)
            base = base_branch
        else:
            config = self.load_config(repo_root)
            preferred = self.settings.preferred_base_branch(config)
            base = self.branch_queries.resolve_base_branch(preferred, repo_root)
            if base is None:
                raise NotFoundError("Base branch", preferred)

        if record.branch_name == base:
            raise UsageError(f"Worktree is already on {base}.")

        base_path = repo_root
        for candidate in records:
            if candidate.is_on_branch and candidate.branch_name == base:
                base_path = candidate.path
                break

        status = self.branch_queries.get_status_counts(base_path)
        if not status.is_clean:
            raise DirtyWorktreeError(
                "Base worktree has uncommitted changes. Commit or stash first.", path=base_path
            )

        if self.branch_queries.get_current_branch(base_path) != base:
            self.git_operations.checkout(base, base_path)
        self.git_operations.merge(record.branch_name, base_path, squash=squash, no_ff=no_ff)

        return MergeResult(base_branch=base, merged_branch=record.branch_name)

    def run_script(self, worktree: str, script_name: str) -> None:
        """
        Run a gityard.json script inside a worktree.

        The worktree's own gityard.json is used when it has one, otherwise the
        repository root's.

        Raises:
            NotFoundError: If the worktree does not exist
            ScriptNotFoundError: If no configuration defines the script
            ScriptExecutionError: If a command exits non-zero
        """
        repo_root = self.resolve_root()
        records = self.list_worktrees(repo_root)
        record = self._require_worktree(worktree, records)

        config = load_config(record.path)
        if config is None and not same_path(record.path, repo_root):
            config = load_config(repo_root)

        commands = config.get_script(script_name) if config else None
        if commands is None:
            raise ScriptNotFoundError(script_name)

        logger.info(f"Running script '{script_name}' in {record.path}")
        self.script_service.run_commands(commands, record.path)

    def init_config(self, directory: Optional[str] = None) -> str:
        """Write a default gityard.json (in the start directory by default)."""
        return str(init_config(directory or self.start_dir))
