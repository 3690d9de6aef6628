"""Exception hierarchy for lazystatus."""

from __future__ import annotations

from pathlib import Path


class LazyStatusError(Exception):
    """Base error for all custom exceptions."""


class GitCommandError(LazyStatusError):
    """Raised when a git invocation fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str | None = None):
        message = "Git command failed"
        if command:
            message = f"Git command failed: {' '.join(command)}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""


class RepositoryNotFound(LazyStatusError):
    """Raised when no usable repository with a working tree owns ``path``."""

    def __init__(self, path: Path, reason: str = "not a git repository"):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
