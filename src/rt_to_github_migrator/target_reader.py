"""Find out which tickets already have an issue on the target tracker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .issue_builder import DEFAULT_RT_TAG, parse_source_id

if TYPE_CHECKING:
    from .protocols import TargetTracker

logger: logging.Logger = logging.getLogger(__name__)


def list_open_issue_source_ids(target: TargetTracker, tag: str = DEFAULT_RT_TAG) -> set[int]:
    """Ids of all RT tickets that have an open issue tagged with them.

    Every page of open issues is visited; stopping after the first one would
    re-migrate every ticket whose issue sits on a later page.
    """
    migrated: set[int] = set()
    page = 0
    total = 0
    while True:
        titles, has_next = target.list_open_issues(page)
        total += len(titles)
        for title in titles:
            source_id = parse_source_id(title, tag)
            if source_id is not None:
                migrated.add(source_id)
        if not has_next:
            break
        page += 1

    logger.info(f"{len(migrated)} of {total} open GitHub issues were migrated from RT")
    return migrated
