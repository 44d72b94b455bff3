"""Data models exchanged between the RT reader, the GitHub adapter and the migrator.

These models are intentionally simple: the migrator never talks to RT or
GitHub objects directly, only to the normalized records below.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Final

# RT REST 1.0 reports this in place of the content of a transaction that
# carries no user-visible text (status changes, owner changes, ...).
NO_CONTENT: Final[str] = "This transaction appears to have no content"


@dataclass
class Transaction:
    """One entry of a ticket's history."""

    creator: str
    created: str
    content: str

    @property
    def has_content(self) -> bool:
        return self.content.strip() != NO_CONTENT


@dataclass
class Ticket:
    """An RT ticket with its ordered transaction history.

    The first transaction is the description transaction; it supplies the
    issue body and is never replayed as a comment.
    """

    id: int
    subject: str
    custom_fields: dict[str, str] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    queue: str = ""


@dataclass
class IssuePayload:
    """Everything needed to create the GitHub issue for one ticket."""

    title: str
    body: str
    labels: list[str] = field(default_factory=list)


@dataclass
class CreatedIssue:
    """Identifiers of an issue after GitHub accepted it."""

    number: int
    url: str


class TicketState(enum.Enum):
    """States a ticket passes through while being migrated."""

    FETCHING = "fetching"
    BUILDING = "building"
    DRY_RUN_REPORT = "dry_run_report"
    CREATING = "creating"
    REPLAYING = "replaying"
    BACK_REFERENCING = "back_referencing"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TicketResult:
    """Outcome of migrating a single ticket."""

    ticket_id: int
    state: TicketState = TicketState.FETCHING
    subject: str = ""
    issue: CreatedIssue | None = None
    payload: IssuePayload | None = None
    comments_created: int = 0
    comments_failed: int = 0
    comments_skipped: int = 0
    comment_sizes: list[int] = field(default_factory=list)
    back_referenced: bool = False
    error: str | None = None


@dataclass
class MigrationReport:
    """Result of a migration run."""

    dry_run: bool
    planned: list[int] = field(default_factory=list)
    results: list[TicketResult] = field(default_factory=list)

    def count(self, state: TicketState) -> int:
        return sum(1 for result in self.results if result.state is state)

    @property
    def failed_ids(self) -> list[int]:
        return [result.ticket_id for result in self.results if result.state is TicketState.FAILED]

    @property
    def statistics(self) -> dict[str, int]:
        return {
            "planned": len(self.planned),
            "migrated": self.count(TicketState.DONE),
            "dry_run": self.count(TicketState.DRY_RUN_REPORT),
            "skipped": self.count(TicketState.SKIPPED),
            "failed": self.count(TicketState.FAILED),
            "comments_created": sum(r.comments_created for r in self.results),
            "comments_failed": sum(r.comments_failed for r in self.results),
        }
