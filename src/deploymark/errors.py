"""Exceptions raised by deploymark."""

from __future__ import annotations


class DeploymarkError(Exception):
    """Base class for all deploymark errors."""


class InvalidTagError(DeploymarkError):
    """A marker tag name was empty or otherwise unusable."""


class GitCommandError(DeploymarkError):
    """A git command failed, timed out, or could not be started."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
        message: str | None = None,
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if message is None:
            rendered = " ".join(command)
            message = f"{rendered} exited with status {returncode}"
            if stderr:
                message = f"{message}: {stderr}"
        super().__init__(message)


class CurrentBranchError(GitCommandError):
    """The current branch or ref could not be determined."""
