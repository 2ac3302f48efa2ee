"""Custom exceptions for gityard"""

from enum import Enum
from typing import Optional


class GityardError(Exception):
    """Base exception for all gityard errors."""
    pass


class RepositoryErrorKind(Enum):
    """Distinguished causes of a RepositoryError."""
    NOT_A_REPOSITORY = "not_a_repository"
    TOOL_UNAVAILABLE = "tool_unavailable"
    COMMAND_FAILED = "command_failed"


class RepositoryError(GityardError):
    """Exception raised when git cannot be used against the repository."""

    def __init__(
        self,
        kind: RepositoryErrorKind,
        message: Optional[str] = None,
        stderr: Optional[str] = None,
    ):
        self.kind = kind
        self.stderr = stderr

        if message is None:
            if kind == RepositoryErrorKind.NOT_A_REPOSITORY:
                message = "Not a git repository"
            elif kind == RepositoryErrorKind.TOOL_UNAVAILABLE:
                message = "Git is not installed or not accessible. Please install Git first."
            else:
                message = f"Git command failed: {stderr or 'Unknown error'}"
        self.message = message

        super().__init__(message)

    @classmethod
    def not_a_repository(cls, path: Optional[str] = None) -> "RepositoryError":
        message = f"Not a git repository: {path}" if path else None
        return cls(RepositoryErrorKind.NOT_A_REPOSITORY, message)

    @classmethod
    def command_failed(cls, action: str, stderr: str) -> "RepositoryError":
        return cls(
            RepositoryErrorKind.COMMAND_FAILED,
            f"{action}: {stderr or 'Unknown error'}",
            stderr=stderr,
        )


class InvalidPathError(GityardError):
    """Exception raised for an unusable worktree path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Invalid worktree path: {path}")


class PathCollisionError(GityardError):
    """Exception raised when a new worktree would overwrite an existing path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path already exists: {path}")


class NotFoundError(GityardError):
    """Exception raised when a worktree or branch lookup misses."""

    def __init__(self, what: str, name: str):
        self.what = what
        self.name = name
        super().__init__(f"{what} not found: {name}")


class DirtyWorktreeError(GityardError):
    """Exception raised when a worktree has uncommitted or untracked content."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ProtectedWorktreeError(GityardError):
    """Exception raised when attempting to delete a protected worktree or branch."""
    pass


class ScriptNotFoundError(GityardError):
    """Exception raised when a script is missing from gityard.json."""

    def __init__(self, script_name: str):
        self.script_name = script_name
        super().__init__(f"Script not found: {script_name}")


class ScriptExecutionError(GityardError):
    """Exception raised when a script command exits non-zero."""

    def __init__(
        self,
        command: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr

        if stderr:
            error_msg = f"Script execution failed: {stderr}"
        else:
            error_msg = f"Script execution failed with exit code {exit_code}"

        super().__init__(error_msg)


class MergeFailedError(GityardError):
    """Exception raised when checkout or merge of the base branch fails."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        self.stderr = stderr
        super().__init__(message)


class UsageError(GityardError):
    """Exception raised for a missing argument or merge strategy."""
    pass


class ConfigError(GityardError):
    """Exception raised for a malformed or conflicting gityard.json."""
    pass
