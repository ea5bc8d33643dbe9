"""Shell and git utilities.

Thin wrappers around subprocess calls for running git and the package
manager, plus output formatting helpers.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

import click

logger = logging.getLogger(__name__)


def git(
    *args: str, cwd: Path | None = None, check: bool = True, strip: bool = True
) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "diff", "--name-only").
        cwd: Directory to run git in. Defaults to the current directory.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., ref lookup).
        strip: If False, return stdout untouched (for NUL-separated output
               whose entries may start or end with whitespace).

    Returns:
        Stdout from the git command, stripped unless `strip` is False.

    Raises:
        subprocess.CalledProcessError: On non-zero exit when `check` is set.
    """
    logger.debug("git %s", " ".join(args))
    result = subprocess.run(
        ["git", *args],
        capture_output=True,
        encoding="utf-8",
        errors="surrogateescape",
        check=check,
        cwd=cwd,
    )
    return result.stdout.strip() if strip else result.stdout


def run(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run an arbitrary command, capturing output.

    Never raises on a non-zero exit; callers inspect `returncode` and turn
    failures into their own errors.
    """
    logger.debug("%s", " ".join(args))
    return subprocess.run(args, capture_output=True, text=True, cwd=cwd)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of a bump run in terminal output.
    """
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def echo(msg: str = "") -> None:
    click.echo(msg)
