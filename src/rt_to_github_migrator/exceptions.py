"""
Custom exception classes for the RT to GitHub migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class ConfigurationError(MigrationError):
    """Raised when a required credential or identifier is missing. Fatal."""


class TicketFetchError(MigrationError):
    """Raised when an RT ticket cannot be retrieved."""

    def __init__(self, ticket_id: int, reason: str) -> None:
        super().__init__(f"Problem getting RT #{ticket_id}: {reason}")
        self.ticket_id: int = ticket_id
        self.reason: str = reason


class IssueCreationError(MigrationError):
    """Raised when the GitHub issue for a ticket cannot be created."""


class CommentCreationError(MigrationError):
    """Raised when a comment cannot be added to a GitHub issue."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int | None = status


class BackReferenceError(MigrationError):
    """Raised when the back-reference comment cannot be written to RT."""
