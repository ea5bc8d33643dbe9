"""Git-backed diff provider.

Lists the files that changed since the previous release so they can be
mapped to packages.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .errors import RefNotFound, RepositoryError
from .graph import is_within, normalize_path
from .shell import git

logger = logging.getLogger(__name__)


class GitDiffProvider:
    """Changed-file lookup for the git repository containing a workspace.

    Paths are returned absolute, joined onto the resolved workspace root, so
    they compare directly against package roots. Changes outside the
    workspace root are not reported: no package can own them.
    """

    def __init__(self, workspace_root: Path) -> None:
        self.workspace_root = Path(workspace_root).resolve()
        self._toplevel: Path | None = None

    def toplevel(self) -> Path:
        """Root of the git working tree.

        Raises:
            RepositoryError: If git fails or the workspace lies outside the
                working tree.
        """
        if self._toplevel is not None:
            return self._toplevel

        try:
            out = git("rev-parse", "--show-toplevel", cwd=self.workspace_root)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RepositoryError(
                f"Failed to get git toplevel directory for {self.workspace_root}: "
                f"{_stderr(exc)}"
            ) from exc

        toplevel = normalize_path(out)
        if not is_within(self.workspace_root, toplevel):
            raise RepositoryError(
                f"Workspace root {self.workspace_root} is not inside git "
                f"toplevel {toplevel}"
            )
        self._toplevel = toplevel
        return toplevel

    def changed_paths(self, old_ref: str) -> list[Path]:
        """Files changed between `old_ref` and the working tree.

        Renames are reported on both sides so a file moved out of a package
        still counts as a change to that package.

        Raises:
            RefNotFound: If `old_ref` does not resolve to a commit.
            RepositoryError: For any other git failure.
        """
        self.toplevel()

        resolved = git(
            "rev-parse",
            "--verify",
            "--quiet",
            f"{old_ref}^{{commit}}",
            cwd=self.workspace_root,
            check=False,
        )
        if not resolved:
            raise RefNotFound(f"Git reference {old_ref!r} does not exist")

        try:
            out = git(
                "diff",
                "--name-only",
                "-z",
                "--no-renames",
                "--relative",
                old_ref,
                cwd=self.workspace_root,
                strip=False,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RepositoryError(
                f"Failed to get changed files from git: {_stderr(exc)}"
            ) from exc

        # -z: NUL-separated and never C-quoted, whatever the file name holds
        paths = [self.workspace_root / name for name in out.split("\0") if name]
        logger.debug("%d files changed since %s", len(paths), old_ref)
        return paths


def _stderr(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError) and exc.stderr:
        return str(exc.stderr).strip()
    return str(exc)
