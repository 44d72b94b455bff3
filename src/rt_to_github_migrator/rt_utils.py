"""
Request Tracker (RT) access through the ``rt`` REST 1.0 client.

The client returns tickets and history entries as plain dictionaries keyed by
RT's field names (``Subject``, ``CF.{Severity}``, ``Content`` ...); this module
turns them into Ticket and Transaction records.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Final

import requests
import rt.exceptions
import rt.rest1

from .exceptions import MigrationError
from .models import Ticket, Transaction

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_RT_SERVER: Final[str] = "https://rt.cpan.org/"
ACTIVE_STATUSES: Final[tuple[str, ...]] = ("new", "open", "stalled")

_CUSTOM_FIELD_PREFIXES: Final[tuple[tuple[str, str], ...]] = (("CF.{", "}"), ("CF-", ""))


class RTError(MigrationError):
    """Raised when RT rejects a request or cannot be reached."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int | None = status


class RTNotFoundError(RTError):
    """The requested ticket does not exist or is not visible to the user."""


def rest_url(server: str) -> str:
    """REST 1.0 endpoint of an RT server."""
    return f"{server.rstrip('/')}/REST/1.0/"


def custom_fields(record: dict[str, Any]) -> dict[str, str]:
    """Extract ``CF.{Name}: value`` entries from a ticket record."""
    fields: dict[str, str] = {}
    for key, value in record.items():
        for prefix, suffix in _CUSTOM_FIELD_PREFIXES:
            if key.startswith(prefix) and key.endswith(suffix) and len(key) > len(prefix) + len(suffix):
                name = key[len(prefix) : len(key) - len(suffix)]
                fields[name] = ", ".join(value) if isinstance(value, list) else str(value or "")
                break
    return fields


def ticket_query(queue: str, statuses: tuple[str, ...] = ACTIVE_STATUSES) -> str:
    """TicketSQL selecting the tickets of a queue in one of the given statuses."""
    escaped = queue.replace("\\", "\\\\").replace("'", "\\'")
    status_clause = " or ".join(f"Status = '{status}'" for status in statuses)
    return f"Queue = '{escaped}' and ( {status_clause} )"


def _ticket_number(value: Any) -> int:
    # Search results carry ids as "ticket/42"
    return int(str(value).rsplit("/", 1)[-1])


class RTClient:
    """SourceTracker backed by an ``rt.rest1.Rt`` session."""

    def __init__(
        self,
        server: str,
        username: str,
        password: str,
        *,
        tracker: rt.rest1.Rt | None = None,
    ) -> None:
        self.server: str = server.rstrip("/")
        self.username: str = username
        self._tracker: rt.rest1.Rt = tracker or rt.rest1.Rt(
            rest_url(server), default_login=username, default_password=password
        )
        self._logged_in: bool = False

    def login(self) -> None:
        """Open an RT session; the client keeps the session cookie."""
        try:
            logged_in = self._tracker.login()
        except (rt.exceptions.RtError, requests.RequestException) as e:
            msg = f"Couldn't log into RT: {e}"
            raise RTError(msg) from e
        if not logged_in:
            msg = f"Couldn't log into RT at {self.server} as {self.username}"
            raise RTError(msg, status=401)
        self._logged_in = True
        logger.debug(f"Logged into RT at {self.server} as {self.username}")

    def _call(self, action: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        if not self._logged_in:
            self.login()
        try:
            return func(*args, **kwargs)
        except (rt.exceptions.RtError, requests.RequestException) as e:
            msg = f"RT {action} failed: {e}"
            raise RTError(msg) from e

    def search(self, queue: str, statuses: tuple[str, ...] = ACTIVE_STATUSES) -> list[int]:
        """Return ids of the tickets in queue whose status is one of statuses."""
        results = self._call(
            f"search of queue {queue}",
            self._tracker.search,
            Queue=rt.rest1.ALL_QUEUES,
            raw_query=ticket_query(queue, statuses),
            order="id",
            Format="i",
        )
        return [_ticket_number(entry["id"]) for entry in results or []]

    def show(self, ticket_id: int) -> dict[str, Any]:
        record = self._call(f"show of ticket {ticket_id}", self._tracker.get_ticket, ticket_id)
        if not record:
            msg = f"Ticket {ticket_id} does not exist"
            raise RTNotFoundError(msg, status=404)
        return record

    def history(self, ticket_id: int) -> list[dict[str, Any]]:
        """Full history of a ticket, oldest transaction first."""
        entries = self._call(f"history of ticket {ticket_id}", self._tracker.get_history, ticket_id)
        if entries is None:
            msg = f"RT returned no history for ticket {ticket_id}"
            raise RTError(msg)
        return sorted(entries, key=lambda entry: int(entry["id"]) if str(entry.get("id", "")).isdigit() else 0)

    def fetch(self, ticket_id: int) -> Ticket:
        """Retrieve a ticket with its custom fields and transactions."""
        record = self.show(ticket_id)
        transactions = [
            Transaction(
                creator=entry.get("Creator", ""),
                created=entry.get("Created", ""),
                content=entry.get("Content", ""),
            )
            for entry in self.history(ticket_id)
        ]
        return Ticket(
            id=ticket_id,
            subject=record.get("Subject", ""),
            custom_fields=custom_fields(record),
            transactions=transactions,
            queue=record.get("Queue", ""),
        )

    def comment(self, ticket_id: int, message: str) -> None:
        """Add a comment to a ticket."""
        if not self._call(f"comment on ticket {ticket_id}", self._tracker.comment, ticket_id, text=message):
            msg = f"RT did not record the comment on #{ticket_id}"
            raise RTError(msg)
