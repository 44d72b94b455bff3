"""
Utility functions for the RT to GitHub migration tool.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import unicodedata
from subprocess import CompletedProcess


class PassError(Exception):
    """Base class for pass-related errors."""


class InvalidPassPathError(PassError):
    """Raised when the pass path does not exist in the password store."""


def setup_logging(*, verbosity: int = 0) -> None:
    """Configure logging for the migration process.

    The console shows warnings by default, INFO with -v and DEBUG with -vv.
    The log file always receives everything.
    """
    console = logging.StreamHandler()
    if verbosity >= 2:
        console.setLevel(logging.DEBUG)
    elif verbosity == 1:
        console.setLevel(logging.INFO)
    else:
        console.setLevel(logging.WARNING)

    logfile = logging.FileHandler("migration.log", mode="a")
    logfile.setLevel(logging.DEBUG)

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[console, logfile],
    )


def to_text(value: str | bytes | None) -> str:
    """Normalize text going into GitHub issue and comment bodies.

    Bytes are decoded as UTF-8 (undecodable sequences replaced) and the
    result is NFC-normalized, so issue bodies and comment bodies always end
    up in the same encoding.
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return unicodedata.normalize("NFC", value)


def indent(text: str, margin: str = "    ") -> str:
    """Prefix every line of text with margin, including empty ones."""
    return "\n".join(margin + line for line in text.split("\n"))


def _validate_pass_path(pass_path: str) -> None:
    if not re.fullmatch(r"(?:[A-Za-z0-9_-]+)(?:/[A-Za-z0-9_-]+)*", pass_path):
        msg = f"Invalid pass path: {pass_path}"
        raise ValueError(msg)


def get_pass_value(pass_path: str) -> str:
    """Get value from pass utility at specified path."""
    _validate_pass_path(pass_path)

    try:
        result: CompletedProcess[str] = subprocess.run(  # noqa: S603
            ["pass", pass_path], capture_output=True, text=True, check=True, env=os.environ.copy()
        )
    except FileNotFoundError as e:
        msg = "The pass utility is not installed"
        raise PassError(msg) from e
    except subprocess.CalledProcessError as e:
        if "not in the password store" in e.stderr.lower():
            msg = f"Pass path '{pass_path}' not found or invalid."
            raise InvalidPassPathError(msg) from e
        msg = (
            f"Failed to get value from pass at '{pass_path}'.\n"
            f"Error: {e.stderr.strip()}\n"
            f"Return code: {e.returncode}"
        )
        raise PassError(msg) from e

    return result.stdout.strip()


def git_config(key: str) -> str | None:
    """Return the value of a git config key, or None when it is unset."""
    try:
        result = subprocess.run(  # noqa: S603
            ["git", "config", "--get", key], capture_output=True, text=True, check=False  # noqa: S607
        )
    except OSError:
        return None
    value = result.stdout.strip()
    return value or None
