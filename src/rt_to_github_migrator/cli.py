"""
Command-line interface for the RT to GitHub migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import github_utils as ghu
from .config import Settings, resolve_settings
from .exceptions import MigrationError
from .issue_builder import DEFAULT_RT_TAG
from .migrator import POST_CREATE_DELAY_SECONDS, RTToGitHubMigrator
from .models import MigrationReport
from .rt_utils import DEFAULT_RT_SERVER, RTClient
from .source_reader import SourceReader
from .utils import setup_logging

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Copy tickets from RT (rt.cpan.org) to GitHub issues")

    _ = parser.add_argument(
        "--id",
        "-i",
        type=int,
        action="append",
        help="RT ticket id to migrate. Can be specified multiple times.",
    )
    _ = parser.add_argument(
        "--rt-dist",
        "-r",
        action="append",
        help="RT dist (queue) to migrate active tickets from. Can be specified multiple times.",
    )
    _ = parser.add_argument(
        "--dry-run", "-d", action="store_true", help="Dry run mode, dump the migration data without creating anything"
    )
    _ = parser.add_argument(
        "--comment-back",
        "-c",
        action="store_true",
        help="Comment on each migrated RT ticket with the URL of its GitHub issue",
    )
    _ = parser.add_argument(
        "--non-interactive", "-n", action="store_true", help="Never prompt; fail if a credential is missing"
    )
    _ = parser.add_argument("--github-repo", help="GitHub repository path (owner/repo)")
    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: GITHUB_TOKEN or git config)"
    )
    _ = parser.add_argument("--rt-server", default=DEFAULT_RT_SERVER, help=f"RT base URL (default: {DEFAULT_RT_SERVER})")
    _ = parser.add_argument(
        "--rt-tag", default=DEFAULT_RT_TAG, help=f"Tag used in issue titles, [TAG #id] (default: {DEFAULT_RT_TAG})"
    )
    _ = parser.add_argument(
        "--post-create-delay",
        type=float,
        default=POST_CREATE_DELAY_SECONDS,
        help=f"Seconds to wait after creating an issue before adding comments (default: {POST_CREATE_DELAY_SECONDS})",
    )
    _ = parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Show progress (-v) or debug output (-vv)"
    )

    return parser.parse_args(argv)


def build_migrator(settings: Settings) -> RTToGitHubMigrator:
    """Create the tracker adapters and the migrator for resolved settings."""
    rt_client = RTClient(settings.rt_server, settings.rt_user, settings.rt_password)
    github_client = ghu.get_client(settings.github_token, per_page=settings.page_size)
    github_repo = ghu.get_repo(github_client, settings.github_repo)

    return RTToGitHubMigrator(
        SourceReader(rt_client),
        ghu.GitHubTarget(github_repo, page_size=settings.page_size),
        rt_server=settings.rt_server,
        rt_tag=settings.rt_tag,
        dry_run=settings.dry_run,
        back_reference=settings.back_reference,
        post_create_delay=settings.post_create_delay,
    )


def _print_report(report: MigrationReport) -> None:
    """Print a summary of the run."""
    title = "Dry run summary" if report.dry_run else "Migration summary"
    print(f"\n{title}")
    print("=" * len(title))
    for key, value in report.statistics.items():
        print(f"  {key}: {value}")

    if report.failed_ids:
        errors = {result.ticket_id: result.error for result in report.results}
        print("\nFailed tickets (see migration.log for details):")
        for ticket_id in report.failed_ids:
            print(f"  - RT #{ticket_id}: {errors[ticket_id]}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbosity: int = args.verbose
    setup_logging(verbosity=verbosity)

    try:
        settings = resolve_settings(args)
        migrator = build_migrator(settings)
        report = migrator.migrate(queues=settings.queues, ids=settings.ids)
    except MigrationError as e:
        logger.error(f"Migration aborted: {e}")  # noqa: TRY400
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted; re-run to resume with the first ticket not yet on GitHub")
        sys.exit(130)
    except Exception:
        logger.exception("Migration failed")
        sys.exit(1)

    _print_report(report)
    sys.exit(0)
