"""Build GitHub issue titles, bodies, labels and comments from RT ticket data."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from .models import IssuePayload
from .utils import indent, to_text

if TYPE_CHECKING:
    from .models import Ticket, Transaction

MIGRATED_LABEL: Final[str] = "Migrated From RT"
DEFAULT_RT_TAG: Final[str] = "rt.cpan.org"
DESCRIPTION_MARGIN: Final[str] = "    "

_SEVERITY_FIELD = re.compile(r"severity", re.IGNORECASE)


def format_title(subject: str, ticket_id: int, tag: str = DEFAULT_RT_TAG) -> str:
    """Append the back-reference tag to a ticket subject.

    Examples:
        >>> format_title("Crash on save", 42)
        'Crash on save [rt.cpan.org #42]'
    """
    return f"{subject} [{tag} #{ticket_id}]"


def tag_pattern(tag: str = DEFAULT_RT_TAG) -> re.Pattern[str]:
    """Regex matching the back-reference tag produced by format_title()."""
    return re.compile(rf"\[{re.escape(tag)} #(\d+)\]")


def parse_source_id(title: str, tag: str = DEFAULT_RT_TAG) -> int | None:
    """Extract the RT ticket id from an issue title, or None if untagged.

    The last tag wins, so a subject that itself quotes another ticket's tag
    still maps to the ticket the issue was created for.
    """
    matches = tag_pattern(tag).findall(title)
    if not matches:
        return None
    return int(matches[-1])


def ticket_url(rt_server: str, ticket_id: int) -> str:
    return f"{rt_server.rstrip('/')}/Ticket/Display.html?id={ticket_id}"


def build_labels(custom_fields: dict[str, str]) -> list[str]:
    """Migrated label plus the value of every non-empty severity custom field."""
    labels = [MIGRATED_LABEL]
    for name, value in custom_fields.items():
        if _SEVERITY_FIELD.search(name) and value and value.strip():
            labels.append(value.strip())
    return labels


def build_issue_body(ticket_id: int, description: str, rt_server: str) -> str:
    """Deep link to the RT ticket followed by the indented description.

    Args:
        ticket_id: RT ticket id
        description: Content of the ticket's first transaction
        rt_server: Base URL of the RT instance

    Returns:
        Complete issue body for GitHub
    """
    return f"{ticket_url(rt_server, ticket_id)}\n\n{indent(to_text(description), DESCRIPTION_MARGIN)}"


def build_comment_body(transaction: Transaction) -> str:
    return to_text(f"{transaction.creator} - {transaction.created}\n\n{transaction.content}")


def build_issue_payload(
    ticket: Ticket,
    description: Transaction | None,
    *,
    rt_server: str,
    tag: str = DEFAULT_RT_TAG,
) -> IssuePayload:
    """Assemble the issue payload for a ticket.

    A ticket without any transaction gets an issue with only the deep link.
    """
    return IssuePayload(
        title=to_text(format_title(ticket.subject, ticket.id, tag)),
        body=build_issue_body(ticket.id, description.content if description else "", rt_server),
        labels=build_labels(ticket.custom_fields),
    )


def build_back_reference_message(issue_url: str) -> str:
    return (
        f"This issue has been copied to: {issue_url}"
        " please take all future correspondence there.\n"
        " This ticket will remain open but please do not reply here.\n"
        " This ticket will be closed when the github issue is dealt with."
    )
