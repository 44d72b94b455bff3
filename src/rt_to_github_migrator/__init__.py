"""
RT to GitHub Migration Tool

Copies open tickets from Request Tracker (rt.cpan.org) to GitHub issues,
keeping the original description and correspondence as comments and never
creating a second issue for a ticket across runs.
"""

from __future__ import annotations

from .cli import main
from .exceptions import (
    BackReferenceError,
    CommentCreationError,
    ConfigurationError,
    IssueCreationError,
    MigrationError,
    TicketFetchError,
)
from .migrator import RTToGitHubMigrator
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "BackReferenceError",
    "CommentCreationError",
    "ConfigurationError",
    "IssueCreationError",
    "MigrationError",
    "RTToGitHubMigrator",
    "TicketFetchError",
    "main",
    "setup_logging",
]
