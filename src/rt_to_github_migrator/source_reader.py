"""Read candidate tickets and their history from the source tracker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import BackReferenceError, TicketFetchError
from .rt_utils import ACTIVE_STATUSES

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from .models import Ticket, Transaction
    from .protocols import SourceTracker

logger: logging.Logger = logging.getLogger(__name__)


class SourceReader:
    """Wraps a SourceTracker with the error policy the migrator relies on."""

    def __init__(self, tracker: SourceTracker, *, statuses: tuple[str, ...] = ACTIVE_STATUSES) -> None:
        self.tracker: SourceTracker = tracker
        self.statuses: tuple[str, ...] = statuses

    def list_candidate_ids(
        self,
        queues: Sequence[str] | None = None,
        ids: Sequence[int] | None = None,
    ) -> list[int]:
        """Ticket ids to consider for migration.

        Explicit ids are returned as given, without asking the tracker.
        Otherwise every queue is searched for active tickets and the results
        are concatenated in queue order; a ticket found in two queues is
        listed twice.
        """
        if ids:
            return list(ids)

        candidates: list[int] = []
        for queue in queues or []:
            found = self.tracker.search(queue, self.statuses)
            logger.info(f"{len(found)} active tickets in RT queue {queue}")
            candidates.extend(found)
        return candidates

    def fetch_ticket(self, ticket_id: int) -> Ticket:
        """Retrieve a ticket, raising TicketFetchError on any failure."""
        try:
            return self.tracker.fetch(ticket_id)
        except Exception as e:  # noqa: BLE001 - any tracker or transport failure skips the ticket
            raise TicketFetchError(ticket_id, str(e)) from e

    @staticmethod
    def fetch_transactions(ticket: Ticket) -> Iterator[Transaction]:
        """Single-pass iterator over the ticket's transactions, oldest first."""
        return iter(ticket.transactions)

    def append_correspondence(self, ticket_id: int, message: str) -> None:
        try:
            self.tracker.comment(ticket_id, message)
        except Exception as e:  # noqa: BLE001
            msg = f"Failed to comment on RT #{ticket_id}: {e}"
            raise BackReferenceError(msg) from e
