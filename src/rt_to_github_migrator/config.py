"""
Resolve credentials and identifiers once at startup.

Every value comes from the command line first, then from the environment or
the usual config files (``~/.pause``, ``dist.ini``, git config, the ``pass``
password store) and finally from an interactive prompt. With
``non_interactive`` set, anything still missing is a ConfigurationError.
"""

from __future__ import annotations

import getpass
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

from . import utils
from .exceptions import ConfigurationError
from .github_utils import DEFAULT_PAGE_SIZE
from .issue_builder import DEFAULT_RT_TAG
from .migrator import POST_CREATE_DELAY_SECONDS

if TYPE_CHECKING:
    import argparse
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

_GITHUB_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_RT_USER_ENV_VAR: Final[str] = "RT_USER"
_RT_PASSWORD_ENV_VAR: Final[str] = "RT_PASSWORD"  # noqa: S105

_DIST_NAME = re.compile(r"name\s*=\s*(\S+)")


@dataclass
class Settings:
    """Everything a run needs, resolved before any tracker is contacted."""

    rt_server: str
    rt_user: str
    rt_password: str
    github_token: str
    github_repo: str
    queues: list[str] = field(default_factory=list)
    ids: list[int] = field(default_factory=list)
    rt_tag: str = DEFAULT_RT_TAG
    dry_run: bool = False
    back_reference: bool = False
    post_create_delay: float = POST_CREATE_DELAY_SECONDS
    page_size: int = DEFAULT_PAGE_SIZE


def read_pause_rc(path: Path | None = None) -> dict[str, str]:
    """Read PAUSE credentials (``user NAME`` / ``password SECRET``) from ~/.pause."""
    path = path or Path.home() / ".pause"
    if not path.exists():
        return {}
    words = path.read_text(encoding="utf-8").split()
    return dict(zip(words[::2], words[1::2], strict=False))


def read_dist_name(path: Path | None = None) -> str | None:
    """Distribution name from the first line of a Dist::Zilla dist.ini."""
    path = path or Path("dist.ini")
    if not path.exists():
        return None
    with path.open(encoding="utf-8") as f:
        first = f.readline()
    match = _DIST_NAME.search(first)
    return match.group(1) if match else None


def get_github_token(pass_path: str | None = None) -> str | None:
    """Get GitHub token from pass path, env var GITHUB_TOKEN, or git config github.token."""
    if pass_path:
        try:
            return utils.get_pass_value(pass_path)
        except utils.PassError as e:
            msg = f"Could not read GitHub token from pass: {e}"
            raise ConfigurationError(msg) from e

    token = os.environ.get(_GITHUB_TOKEN_ENV_VAR)
    if token:
        return token

    return utils.git_config("github.token")


class Prompter:
    """Asks the operator for missing values, or refuses to when non-interactive."""

    def __init__(
        self,
        *,
        interactive: bool,
        ask: Callable[[str], str] = input,
        ask_secret: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self.interactive: bool = interactive
        self._ask: Callable[[str], str] = ask
        self._ask_secret: Callable[[str], str] = ask_secret

    def value(self, label: str, default: str | None = None, *, secret: bool = False) -> str:
        if not self.interactive:
            if default:
                return default
            msg = f"Missing {label} (running non-interactively)"
            raise ConfigurationError(msg)

        if secret:
            answer = self._ask_secret(f"{label}: ") if not default else default
        else:
            answer = self._ask(f"{label} [{default}]: " if default else f"{label}: ").strip() or (default or "")
        if not answer:
            msg = f"Missing {label}"
            raise ConfigurationError(msg)
        return answer


def resolve_settings(args: argparse.Namespace, prompter: Prompter | None = None) -> Settings:
    """Build Settings from parsed arguments, the environment and prompts."""
    prompter = prompter or Prompter(interactive=not args.non_interactive)

    pause = read_pause_rc()
    rt_user = prompter.value("PAUSE ID", os.environ.get(_RT_USER_ENV_VAR) or pause.get("user"))
    rt_password = prompter.value(
        "PAUSE password", os.environ.get(_RT_PASSWORD_ENV_VAR) or pause.get("password"), secret=True
    )

    ids: list[int] = args.id or []
    queues: list[str] = args.rt_dist or []
    if not ids and not queues:
        queues = [prompter.value("RT dist name", read_dist_name())]

    github_token = prompter.value("github token", get_github_token(args.github_pass_token), secret=True)

    github_repo: str | None = args.github_repo
    if not github_repo:
        owner = prompter.value("repo owner", utils.git_config("github.user"))
        name = prompter.value("repo name", Path.cwd().name)
        github_repo = f"{owner}/{name}"

    settings = Settings(
        rt_server=args.rt_server,
        rt_user=rt_user,
        rt_password=rt_password,
        github_token=github_token,
        github_repo=github_repo,
        queues=queues,
        ids=ids,
        rt_tag=args.rt_tag,
        dry_run=args.dry_run,
        back_reference=args.comment_back,
        post_create_delay=args.post_create_delay,
    )
    logger.debug(
        f"Resolved settings: RT {settings.rt_server} as {settings.rt_user}, GitHub {settings.github_repo},"
        f" queues {settings.queues}, ids {settings.ids}"
    )
    return settings

