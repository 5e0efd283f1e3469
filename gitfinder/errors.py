from __future__ import annotations

from typing import Optional


class GitFinderError(Exception):
    """Base class for lookup failures."""

    user_message = "An error occurred. Please try again."

    def __init__(self, message: str, *, handle: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.handle = handle
        self.status = status


class NotFound(GitFinderError):
    """The requested handle does not exist."""

    user_message = "User not found!"


class TransientError(GitFinderError):
    """Network or service failure on a GitHub call."""


class PartialFailure(GitFinderError):
    """A dependent fetch failed after the profile was loaded."""

    def __init__(self, message: str, *, resource: str, handle: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message, handle=handle, status=status)
        self.resource = resource
