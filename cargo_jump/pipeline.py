"""Bump pipeline: discover → diff → resolve → write.

This module orchestrates a cargo-jump run:
1. Discover all packages in the workspace and build the package graph
2. Detect which packages changed since the old tag (or take all of them)
3. Propagate to every transitive dependent of a changed package
4. Write the new version into each affected manifest (unless dry-run)
5. Refresh the lockfile once if anything was written

Everything up to step 4 is validation: if it fails, no file has been
touched. Failures in step 4 are per package and collected into the result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .affected import resolve
from .classify import classify_all
from .errors import WriteError
from .graph import PackageGraph
from .models import (
    AffectedSet,
    BumpTarget,
    Ecosystem,
    Outcome,
    PackageInfo,
    PackageOutcome,
    RunConfig,
    RunResult,
)
from .shell import echo, step
from .vcs import GitDiffProvider
from .versions import validate_version
from .workspace import detect_workspace

logger = logging.getLogger(__name__)


class Workspace(Protocol):
    """Source of package metadata, and of the writer for its manifests."""

    ecosystem: Ecosystem
    root: Path

    def list_packages(self) -> Sequence[PackageInfo]: ...

    def writer(self) -> VersionWriter: ...

    def refresh_lockfile(self) -> None: ...


class VersionWriter(Protocol):
    def apply_version(self, root_path: Path, new_version: str) -> None: ...


class DiffProvider(Protocol):
    def changed_paths(self, old_ref: str) -> Sequence[str | Path]: ...


def discover_packages(workspace: Workspace, config: RunConfig) -> PackageGraph:
    """Read the workspace members and build the package graph.

    Raises:
        WorkspaceError: If the metadata cannot be read.
        ConfigurationError: If the members violate a graph invariant.
    """
    step(f"Discovering {workspace.ecosystem.value} workspace packages")

    graph = PackageGraph.build(
        workspace.list_packages(),
        allow_nested_roots=config.allow_nested_roots,
    )

    for name in graph.topo_order():
        info = graph.get(name)
        deps = sorted(info.dependency_names)
        arrow = f" → [{', '.join(deps)}]" if deps else ""
        echo(f"  {name} ({info.root_path}){arrow}")

    return graph


def detect_changes(
    graph: PackageGraph,
    old_tag: str | None,
    diff: DiffProvider,
    base: Path | None = None,
) -> set[str]:
    """Determine which packages changed directly.

    Without an old tag every package counts as changed. Otherwise each file
    changed since the tag is attributed to the package owning it; files
    outside every package are ignored. Relative paths are taken relative
    to `base`.

    Raises:
        GitError: If the changed files cannot be listed.
    """
    step("Detecting changes")

    if old_tag is None:
        logger.warning("old tag not provided, considering all packages as changed")
        echo("  No old tag: all packages marked changed")
        return set(graph.all_names())

    owned = classify_all(diff.changed_paths(old_tag), graph, base=base)
    for name in sorted(owned):
        echo(f"  {name}: {len(owned[name])} file(s) changed since {old_tag}")
    return set(owned)


def plan_targets(
    graph: PackageGraph, affected: AffectedSet, new_version: str
) -> list[BumpTarget]:
    """One BumpTarget per affected package, sorted by package name."""
    return [
        BumpTarget(
            name=name,
            version=new_version,
            root_path=graph.get(name).root_path,
            classification=affected.classification_of(name),
        )
        for name in sorted(affected.names)
    ]


def apply_targets(
    targets: Sequence[BumpTarget],
    writer: VersionWriter,
    *,
    dry_run: bool,
) -> list[PackageOutcome]:
    """Write every target's version, or just report it under dry-run.

    A failed write does not stop the loop and nothing is rolled back;
    the failure is recorded in that package's outcome.
    """
    step("Dry run: not updating manifests" if dry_run else "Updating manifests")

    outcomes: list[PackageOutcome] = []
    for target in targets:
        outcome = PackageOutcome(
            name=target.name,
            version=target.version,
            classification=target.classification,
            outcome=Outcome.WOULD_WRITE,
        )
        if not dry_run:
            try:
                writer.apply_version(target.root_path, target.version)
            except WriteError as exc:
                logger.error("%s: %s", target.name, exc)
                outcome = outcome.model_copy(
                    update={"outcome": Outcome.FAILED, "error": str(exc)}
                )
            else:
                logger.info(
                    "Set version of package '%s' to '%s'", target.name, target.version
                )
                outcome = outcome.model_copy(update={"outcome": Outcome.WRITTEN})
        outcomes.append(outcome)
    return outcomes


def format_report(result: RunResult) -> list[str]:
    """Render a run result as terminal lines, one per affected package."""
    lines: list[str] = []
    for o in result.outcomes:
        kind = o.classification.value
        reason = result.affected.reasons.get(o.name)
        if reason:
            kind = f"{kind}, depends on {reason}"
        line = f"  {o.name} → {o.version} ({kind}): {o.outcome.value}"
        if o.error:
            line += f" [{o.error}]"
        lines.append(line)

    if result.failed:
        lines.append("")
        lines.append(
            f"{len(result.failed)} of {len(result.outcomes)} package(s) failed: "
            + ", ".join(o.name for o in result.failed)
        )
    if result.lockfile_error:
        lines.append("")
        lines.append(f"Lockfile not updated: {result.lockfile_error}")
    return lines


def run_bump(
    config: RunConfig,
    *,
    workspace: Workspace | None = None,
    diff: DiffProvider | None = None,
) -> RunResult:
    """Execute a full bump run.

    Args:
        config: Run configuration.
        workspace: Package metadata source. Detected from
            `config.workspace_root` when not given.
        diff: Changed-file source. A git provider for the workspace root is
            used when not given; it is only consulted if `config.old_tag`
            is set.

    Returns:
        RunResult with one outcome per affected package.

    Raises:
        ConfigurationError, WorkspaceError, GitError: Before any write.
    """
    if workspace is None:
        workspace = detect_workspace(config.workspace_root)
    if diff is None:
        diff = GitDiffProvider(workspace.root)

    # Phase 1: validate and plan
    validate_version(config.new_version, workspace.ecosystem)
    graph = discover_packages(workspace, config)
    direct = detect_changes(graph, config.old_tag, diff, base=workspace.root)
    affected = resolve(direct, graph)

    for name in sorted(affected.transitive):
        logger.debug("%s: affected (depends on %s)", name, affected.reasons[name])

    result = RunResult(config=config, affected=affected)
    if not affected.names:
        echo("\nNo affected packages found.")
        return result

    result.targets = plan_targets(graph, affected, config.new_version)

    # Phase 2: act
    result.outcomes = apply_targets(
        result.targets, workspace.writer(), dry_run=config.dry_run
    )

    written = any(o.outcome is Outcome.WRITTEN for o in result.outcomes)
    if written and config.update_lockfile:
        step("Updating lockfile")
        try:
            workspace.refresh_lockfile()
        except WriteError as exc:
            logger.error("%s", exc)
            result.lockfile_error = str(exc)

    return result
