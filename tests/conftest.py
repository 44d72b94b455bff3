"""
Pytest configuration and fixtures.

The fakes below stand in for RT and GitHub behind the SourceTracker and
TargetTracker protocols, recording every call the migrator makes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from rt_to_github_migrator.exceptions import CommentCreationError, IssueCreationError
from rt_to_github_migrator.models import CreatedIssue, Ticket, Transaction
from rt_to_github_migrator.rt_utils import RTError, RTNotFoundError

if TYPE_CHECKING:
    from rt_to_github_migrator.models import IssuePayload


def make_ticket(
    ticket_id: int,
    subject: str,
    contents: list[str],
    custom_fields: dict[str, str] | None = None,
) -> Ticket:
    """Ticket whose n-th transaction is created by user<n> on day n of January 2020."""
    transactions = [
        Transaction(creator=f"user{n}", created=f"2020-01-{n + 1:02d} 10:00:00", content=content)
        for n, content in enumerate(contents)
    ]
    return Ticket(id=ticket_id, subject=subject, custom_fields=custom_fields or {}, transactions=transactions)


class FakeRT:
    """In-memory RT: tickets by id, ticket ids by queue, recorded comments."""

    def __init__(
        self,
        tickets: list[Ticket] | None = None,
        queues: dict[str, list[int]] | None = None,
        *,
        fail_comments: bool = False,
    ) -> None:
        self.tickets: dict[int, Ticket] = {ticket.id: ticket for ticket in tickets or []}
        self.queues: dict[str, list[int]] = queues or {}
        self.fail_comments: bool = fail_comments
        self.searches: list[tuple[str, tuple[str, ...]]] = []
        self.fetched: list[int] = []
        self.comments: list[tuple[int, str]] = []

    def search(self, queue: str, statuses: tuple[str, ...]) -> list[int]:
        self.searches.append((queue, statuses))
        return list(self.queues.get(queue, []))

    def fetch(self, ticket_id: int) -> Ticket:
        self.fetched.append(ticket_id)
        if ticket_id not in self.tickets:
            msg = f"Ticket {ticket_id} does not exist."
            raise RTNotFoundError(msg, status=404)
        return self.tickets[ticket_id]

    def comment(self, ticket_id: int, message: str) -> None:
        if self.fail_comments:
            msg = "RT responded with 500 Internal Server Error"
            raise RTError(msg, status=500)
        self.comments.append((ticket_id, message))


class FakeGitHub:
    """In-memory GitHub repository paginating its open issues."""

    def __init__(
        self,
        titles: list[str] | None = None,
        *,
        page_size: int = 30,
        fail_issue_ids: set[int] | None = None,
        fail_comment_marker: str | None = None,
    ) -> None:
        self.open_titles: list[str] = list(titles or [])
        self.page_size: int = page_size
        self.fail_issue_ids: set[int] = fail_issue_ids or set()
        self.fail_comment_marker: str | None = fail_comment_marker
        self.pages_requested: list[int] = []
        self.created_issues: list[IssuePayload] = []
        self.issue_attempts: list[IssuePayload] = []
        self.comments: list[tuple[int, str]] = []
        self.comment_attempts: list[tuple[int, str]] = []

    def list_open_issues(self, page: int) -> tuple[list[str], bool]:
        self.pages_requested.append(page)
        start = page * self.page_size
        return self.open_titles[start : start + self.page_size], start + self.page_size < len(self.open_titles)

    def create_issue(self, payload: IssuePayload) -> CreatedIssue:
        self.issue_attempts.append(payload)
        if any(payload.title.endswith(f"#{ticket_id}]") for ticket_id in self.fail_issue_ids):
            msg = f"Failed to create issue '{payload.title}': 502 Bad Gateway"
            raise IssueCreationError(msg)
        self.created_issues.append(payload)
        self.open_titles.append(payload.title)
        number = len(self.created_issues)
        return CreatedIssue(number=number, url=f"https://github.com/owner/repo/issues/{number}")

    def create_comment(self, issue_number: int, body: str) -> None:
        self.comment_attempts.append((issue_number, body))
        if self.fail_comment_marker and self.fail_comment_marker in body:
            msg = f"Failed to comment on issue #{issue_number}: 422 Validation Failed"
            raise CommentCreationError(msg, status=422)
        self.comments.append((issue_number, body))


@pytest.fixture
def fake_rt() -> FakeRT:
    return FakeRT()


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()
