"""Protocols defining the contracts for the source and target trackers.

The migration architecture separates concerns into three components:

1. SourceTracker: reads tickets from RT and writes the back-reference comment
2. TargetTracker: lists and creates issues and comments on GitHub
3. Migrator: plans the run and replays each ticket onto the target

This separation allows testing the migrator in isolation with fake
trackers, and keeps RT and GitHub API quirks inside their adapters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import CreatedIssue, IssuePayload, Ticket


class SourceTracker(Protocol):
    """Protocol for the ticket system tickets are migrated from.

    Implementations raise an exception (any subclass of Exception) on
    failure; the source reader translates it into TicketFetchError or
    BackReferenceError.
    """

    def search(self, queue: str, statuses: tuple[str, ...]) -> list[int]:
        """Return ids of the tickets in queue whose status is one of statuses."""
        ...

    def fetch(self, ticket_id: int) -> Ticket:
        """Return the ticket with its custom fields and ordered transactions."""
        ...

    def comment(self, ticket_id: int, message: str) -> None:
        """Append a message to the ticket's history."""
        ...


class TargetTracker(Protocol):
    """Protocol for the issue system tickets are migrated to."""

    def list_open_issues(self, page: int) -> tuple[list[str], bool]:
        """Return the titles of one page of open issues and whether another page follows.

        Pages are numbered from 0.
        """
        ...

    def create_issue(self, payload: IssuePayload) -> CreatedIssue:
        """Create an issue, raising IssueCreationError on failure."""
        ...

    def create_comment(self, issue_number: int, body: str) -> None:
        """Add a comment to an issue, raising CommentCreationError on failure."""
        ...
