"""Map changed file paths to the workspace package that owns them."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .graph import PackageGraph, normalize_path

logger = logging.getLogger(__name__)


def classify(
    path: str | os.PathLike[str],
    graph: PackageGraph,
    *,
    base: Path | None = None,
) -> str | None:
    """Return the name of the package owning `path`, or None.

    The owner is the package whose root is the longest path-segment prefix
    of the normalized path, so a file inside a nested package belongs to the
    nested package rather than to the one around it. A path equal to a
    package root belongs to that package.

    Paths owned by no package (the workspace manifest, CI config, ...) yield
    None; they never force a bump on their own.

    Args:
        path: Changed file path, absolute or relative to `base`.
        graph: Workspace graph providing package roots.
        base: Directory that relative paths are relative to.
    """
    p = normalize_path(path, base)
    # Walking up from the path itself finds the innermost root first
    for candidate in (p, *p.parents):
        owner = graph.owner_of_root(candidate)
        if owner is not None:
            return owner
    return None


def classify_all(
    paths: Iterable[str | os.PathLike[str]],
    graph: PackageGraph,
    *,
    base: Path | None = None,
) -> dict[str, frozenset[str]]:
    """Group changed paths by owning package.

    Returns:
        Map of package name → changed paths it owns. Packages owning no
        changed path are absent; unowned paths are dropped.
    """
    owned: dict[str, set[str]] = {}
    for path in paths:
        owner = classify(path, graph, base=base)
        if owner is None:
            logger.debug("%s: not owned by any package, ignored", path)
            continue
        logger.debug("%s: owned by %s", path, owner)
        owned.setdefault(owner, set()).add(str(path))
    return {name: frozenset(files) for name, files in owned.items()}
