"""Subprocess wrappers for git, and terminal output helpers."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

_RULE = "─" * 60


def git(*args: str, check: bool = True, cwd: Path | None = None) -> str:
    """Run ``git *args`` in ``cwd`` and return its stripped stdout.

    Set ``check`` to False for lookups that may legitimately fail, such
    as describing a repository without tags; their stdout is then empty.
    """
    logger.debug("git %s (in %s)", " ".join(args), cwd or ".")
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, check=check, cwd=cwd
    )
    return result.stdout.strip()


def git_streamed(*args: str, cwd: Path | None = None) -> None:
    """Run ``git *args`` with output going straight to the terminal.

    Used for commands that may run hooks (commit, tag), so their output
    stays visible. Raises CalledProcessError on a non-zero exit.
    """
    logger.debug("git %s (in %s)", " ".join(args), cwd or ".")
    subprocess.run(["git", *args], check=True, cwd=cwd)


def step(msg: str) -> None:
    """Announce a bump phase between two horizontal rules."""
    print("", _RULE, msg, _RULE, sep="\n")
