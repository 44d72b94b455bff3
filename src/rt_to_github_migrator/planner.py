"""Work out which tickets a run has to migrate, and in which order."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def plan(candidate_ids: Iterable[int], already_migrated: set[int]) -> list[int]:
    """Candidate ids without an issue yet, each once, in ascending order.

    Examples:
        >>> plan([7, 3, 42, 3, 9], {9})
        [3, 7, 42]
    """
    return sorted({ticket_id for ticket_id in candidate_ids if ticket_id not in already_migrated})
