from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

import requests
from github import Auth, Github, GithubException, UnknownObjectException

from .exceptions import CommentCreationError, IssueCreationError, MigrationError
from .models import CreatedIssue

if TYPE_CHECKING:
    from github.Repository import Repository

    from .models import IssuePayload

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE: Final[int] = 30


def get_client(token: str | None = None, *, per_page: int = DEFAULT_PAGE_SIZE) -> Github:
    """Get a GitHub client using the token."""
    auth = Auth.Token(token) if token else None
    return Github(auth=auth, per_page=per_page)


def _validate_repo_path(repo_path: str) -> str:
    repo_path = repo_path.strip()
    if repo_path.count("/") != 1:
        msg = f"Invalid GitHub repository path '{repo_path}'. Expected format: 'owner/repository'"
        raise MigrationError(msg)
    owner, name = repo_path.split("/")
    if not owner or not name:
        msg = f"Invalid GitHub repository path '{repo_path}'. Both owner and repository name must be non-empty"
        raise MigrationError(msg)
    return repo_path


def _describe(error: Exception) -> str:
    if isinstance(error, GithubException):
        return f"{error.status} {error.data}"
    return f"{type(error).__name__}: {error}"


def get_repo(client: Github, repo_path: str) -> Repository:
    """Look up the target repository; it must already exist."""
    repo_path = _validate_repo_path(repo_path)
    try:
        return client.get_repo(repo_path)
    except UnknownObjectException as e:
        msg = f"GitHub repository {repo_path} not found or not accessible"
        raise MigrationError(msg) from e
    except (GithubException, requests.RequestException) as e:
        msg = f"Error accessing repository {repo_path}: {e}"
        raise MigrationError(msg) from e


class GitHubTarget:
    """TargetTracker backed by a PyGithub repository."""

    def __init__(self, repo: Repository, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.repo: Repository = repo
        self.page_size: int = page_size

    def list_open_issues(self, page: int) -> tuple[list[str], bool]:
        """Titles of one page of open issues (pull requests excluded).

        GitHub sends no total with a page, so a full page is taken to mean
        another one may follow; the next, empty page ends the listing.
        """
        try:
            issues = self.repo.get_issues(state="open").get_page(page)
        except (GithubException, requests.RequestException) as e:
            msg = f"Failed to list open issues (page {page}): {e}"
            raise MigrationError(msg) from e
        titles = [issue.title for issue in issues if issue.pull_request is None]
        return titles, len(issues) >= self.page_size

    def create_issue(self, payload: IssuePayload) -> CreatedIssue:
        try:
            issue = self.repo.create_issue(title=payload.title, body=payload.body, labels=payload.labels)
        except (GithubException, requests.RequestException) as e:
            msg = f"Failed to create issue '{payload.title}': {_describe(e)}"
            raise IssueCreationError(msg) from e
        logger.debug(f"Created issue #{issue.number}: {issue.title}")
        return CreatedIssue(number=issue.number, url=issue.html_url)

    def create_comment(self, issue_number: int, body: str) -> None:
        try:
            self.repo.get_issue(issue_number).create_comment(body)
        except GithubException as e:
            msg = f"Failed to comment on issue #{issue_number}: {_describe(e)}"
            raise CommentCreationError(msg, status=e.status) from e
        except requests.RequestException as e:
            msg = f"Failed to comment on issue #{issue_number}: {_describe(e)}"
            raise CommentCreationError(msg) from e
