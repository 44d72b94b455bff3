"""
Main migration class for RT to GitHub migration.

Each planned ticket goes through

    FETCHING -> BUILDING -> DRY_RUN_REPORT
    FETCHING -> BUILDING -> CREATING -> REPLAYING -> [BACK_REFERENCING] -> DONE

or ends in SKIPPED or FAILED. Nothing that goes wrong for one ticket or one
comment stops the run: failures are logged with enough context to redo the
failed unit by hand and the next ticket is processed.
"""

from __future__ import annotations

import logging
import pprint
import time
from dataclasses import asdict
from typing import TYPE_CHECKING, Final

from .exceptions import BackReferenceError, CommentCreationError, IssueCreationError, TicketFetchError
from .issue_builder import DEFAULT_RT_TAG, build_back_reference_message, build_comment_body, build_issue_payload
from .models import MigrationReport, TicketResult, TicketState
from .planner import plan
from .rt_utils import DEFAULT_RT_SERVER
from .target_reader import list_open_issue_source_ids

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from .models import CreatedIssue, Transaction
    from .protocols import TargetTracker
    from .source_reader import SourceReader

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

POST_CREATE_DELAY_SECONDS: Final[float] = 5.0
FIRST_COMMENT_RETRIES: Final[int] = 2

# GitHub answers 404/410 for an issue that has not reached its read replicas yet
_NOT_YET_VISIBLE: Final[frozenset[int]] = frozenset({404, 410})


class RTToGitHubMigrator:
    """Migrates RT tickets into GitHub issues, one ticket at a time."""

    def __init__(
        self,
        source: SourceReader,
        target: TargetTracker,
        *,
        rt_server: str = DEFAULT_RT_SERVER,
        rt_tag: str = DEFAULT_RT_TAG,
        dry_run: bool = False,
        back_reference: bool = False,
        post_create_delay: float = POST_CREATE_DELAY_SECONDS,
        first_comment_retries: int = FIRST_COMMENT_RETRIES,
    ) -> None:
        self.source: SourceReader = source
        self.target: TargetTracker = target
        self.rt_server: str = rt_server
        self.rt_tag: str = rt_tag
        self.dry_run: bool = dry_run
        self.back_reference: bool = back_reference
        self.post_create_delay: float = post_create_delay
        self.first_comment_retries: int = first_comment_retries

        logger.info(
            f"Initialized migrator for {rt_server} -> GitHub"
            f" (dry run: {dry_run}, comment back: {back_reference})"
        )

    def migrate(
        self,
        *,
        queues: Sequence[str] | None = None,
        ids: Sequence[int] | None = None,
    ) -> MigrationReport:
        """Plan the run and migrate every planned ticket in order."""
        already_migrated = list_open_issue_source_ids(self.target, self.rt_tag)
        logger.info(f"{len(already_migrated)} existing issues on github")

        candidates = self.source.list_candidate_ids(queues, ids)
        logger.info(f"{len(candidates)} issues on RT")

        planned = plan(candidates, already_migrated)
        if len(set(candidates)) != len(candidates):
            logger.info("Duplicate ticket ids in the candidate list were migrated once")

        report = MigrationReport(dry_run=self.dry_run, planned=planned)
        for ticket_id in planned:
            report.results.append(self.migrate_ticket(ticket_id, already_migrated))

        logger.info(f"Run finished: {report.statistics}")
        return report

    def migrate_ticket(self, ticket_id: int, already_migrated: set[int] | frozenset[int] = frozenset()) -> TicketResult:
        """Migrate a single ticket and return its terminal state."""
        result = TicketResult(ticket_id=ticket_id)

        if ticket_id in already_migrated:
            logger.warning(f"ticket #{ticket_id} already on github")
            result.state = TicketState.SKIPPED
            return result

        # FETCHING
        try:
            ticket = self.source.fetch_ticket(ticket_id)
        except TicketFetchError as e:
            logger.error(str(e))  # noqa: TRY400
            result.state = TicketState.FAILED
            result.error = str(e)
            return result
        result.subject = ticket.subject
        logger.debug(f"Fetched RT #{ticket_id} from queue {ticket.queue} with {len(ticket.transactions)} transactions")

        # BUILDING
        result.state = TicketState.BUILDING
        transactions = self.source.fetch_transactions(ticket)
        description = next(transactions, None)
        if description is None:
            logger.warning(f"RT #{ticket_id} has no transactions, creating an issue without description")
        payload = build_issue_payload(ticket, description, rt_server=self.rt_server, tag=self.rt_tag)
        result.payload = payload

        if self.dry_run:
            self._report_dry_run(result, transactions)
            return result

        # CREATING
        result.state = TicketState.CREATING
        try:
            issue = self.target.create_issue(payload)
        except IssueCreationError as e:
            logger.error(  # noqa: TRY400
                f"Could not create GitHub issue for RT #{ticket_id} ({ticket.subject}): {e}\n"
                f"Labels: {payload.labels}\n"
                f"Description:\n{payload.body}"
            )
            result.state = TicketState.FAILED
            result.error = str(e)
            return result
        result.issue = issue
        logger.info(f"Created issue #{issue.number} for RT #{ticket_id}: {issue.url}")

        # REPLAYING
        result.state = TicketState.REPLAYING
        self._replay_comments(result, issue, transactions)

        # BACK_REFERENCING
        if self.back_reference:
            result.state = TicketState.BACK_REFERENCING
            try:
                self.source.append_correspondence(ticket_id, build_back_reference_message(issue.url))
                result.back_referenced = True
            except BackReferenceError as e:
                logger.warning(f"Could not write back-reference on RT #{ticket_id}: {e}")

        result.state = TicketState.DONE
        logger.info(f"ticket #{ticket_id} ({ticket.subject}) copied to github")
        return result

    def _replay_comments(self, result: TicketResult, issue: CreatedIssue, transactions: Iterator[Transaction]) -> None:
        """Create one comment per remaining transaction that has content."""
        first = True
        for transaction in transactions:
            if not transaction.has_content:
                result.comments_skipped += 1
                continue

            body = build_comment_body(transaction)
            try:
                if first:
                    # The new issue may not be visible to the comments API yet
                    time.sleep(self.post_create_delay)
                    self._create_first_comment(issue.number, body)
                else:
                    self.target.create_comment(issue.number, body)
            except CommentCreationError as e:
                logger.error(  # noqa: TRY400
                    f"Could not migrate comment of RT #{result.ticket_id} to issue #{issue.number}: {e}\n"
                    f"Content:\n{body}"
                )
                result.comments_failed += 1
            else:
                result.comments_created += 1
                logger.debug(f"Migrated comment by {transaction.creator} on RT #{result.ticket_id}")
            first = False

    def _create_first_comment(self, issue_number: int, body: str) -> None:
        """Create the first comment, backing off while GitHub cannot see the issue yet."""
        delay = self.post_create_delay
        for attempt in range(self.first_comment_retries + 1):
            try:
                self.target.create_comment(issue_number, body)
            except CommentCreationError as e:
                if e.status not in _NOT_YET_VISIBLE or attempt == self.first_comment_retries:
                    raise
                delay = max(delay * 2, 1.0)
                logger.debug(f"Issue #{issue_number} not visible yet, retrying comment in {delay}s")
                time.sleep(delay)
            else:
                return

    def _report_dry_run(self, result: TicketResult, transactions: Iterator[Transaction]) -> None:
        """Show what would be created for a ticket without touching either tracker."""
        assert result.payload is not None
        print(pprint.pformat(asdict(result.payload), sort_dicts=False))

        for transaction in transactions:
            if not transaction.has_content:
                result.comments_skipped += 1
                continue
            size = len(build_comment_body(transaction).encode("utf-8"))
            result.comment_sizes.append(size)
            logger.info(f"RT #{result.ticket_id}: would add comment by {transaction.creator} ({size} bytes)")

        result.state = TicketState.DRY_RUN_REPORT
        logger.info(
            f"Dry run: RT #{result.ticket_id} would become '{result.payload.title}'"
            f" with {len(result.comment_sizes)} comments"
        )
