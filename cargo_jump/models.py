"""Data models for cargo-jump.

These Pydantic models represent the core data structures passed between
the workspace readers, the graph, the resolver and the bump pipeline.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Ecosystem(str, Enum):
    """Kind of workspace being bumped."""

    CARGO = "cargo"
    UV = "uv"


class Classification(str, Enum):
    """Why a package is in the affected set."""

    DIRECT = "direct"
    TRANSITIVE = "transitive"


class Outcome(str, Enum):
    """What happened to a package's manifest during a run."""

    WRITTEN = "written"
    WOULD_WRITE = "would-write"
    FAILED = "failed"


class PackageInfo(BaseModel):
    """Metadata for a single package in the workspace.

    Attributes:
        name: Package name, unique within the workspace.
        root_path: Directory holding the package's manifest and sources.
        dependency_names: Names of other workspace members this package
            depends on. Registry deps are not tracked here since they never
            take part in version propagation.
        manifest_path: Path to the package manifest, when known.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    root_path: Path
    dependency_names: frozenset[str] = Field(default_factory=frozenset)
    manifest_path: Path | None = None


class AffectedSet(BaseModel):
    """Packages that need a version bump.

    Attributes:
        direct: Packages owning at least one changed file.
        transitive: Dependents (direct or indirect) of a direct package that
            are not direct themselves.
        reasons: Map of transitive package → the package it was reached from.
    """

    model_config = ConfigDict(frozen=True)

    direct: frozenset[str] = Field(default_factory=frozenset)
    transitive: frozenset[str] = Field(default_factory=frozenset)
    reasons: dict[str, str] = Field(default_factory=dict)

    @property
    def names(self) -> frozenset[str]:
        return self.direct | self.transitive

    def classification_of(self, name: str) -> Classification:
        if name in self.direct:
            return Classification.DIRECT
        if name in self.transitive:
            return Classification.TRANSITIVE
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return name in self.direct or name in self.transitive

    def __len__(self) -> int:
        return len(self.direct) + len(self.transitive)


class BumpTarget(BaseModel):
    """A single manifest write: set `version` on the package at `root_path`."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    root_path: Path
    classification: Classification


class PackageOutcome(BaseModel):
    """Result of processing one BumpTarget."""

    name: str
    version: str
    classification: Classification
    outcome: Outcome
    error: str | None = None


class RunConfig(BaseModel):
    """Everything a single bump run needs to know.

    Attributes:
        new_version: Version string written to every affected package.
        old_tag: Git reference of the previous release. When None every
            package in the workspace is bumped.
        dry_run: Compute and report, but never touch a manifest.
        workspace_root: Directory holding the workspace's root manifest.
        allow_nested_roots: Accept packages rooted inside other packages.
        update_lockfile: Refresh the workspace lockfile after writing.
    """

    model_config = ConfigDict(frozen=True)

    new_version: str
    old_tag: str | None = None
    dry_run: bool = False
    workspace_root: Path = Field(default_factory=Path.cwd)
    allow_nested_roots: bool = True
    update_lockfile: bool = True

    @field_validator("new_version")
    @classmethod
    def _non_empty_version(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("new version must not be empty")
        return value

    @field_validator("old_tag")
    @classmethod
    def _non_empty_tag(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("old tag must not be empty when given")
        return value


class RunResult(BaseModel):
    """Report of a bump run, one outcome per affected package."""

    config: RunConfig
    affected: AffectedSet
    targets: list[BumpTarget] = Field(default_factory=list)
    outcomes: list[PackageOutcome] = Field(default_factory=list)
    lockfile_error: str | None = None

    @property
    def failed(self) -> list[PackageOutcome]:
        return [o for o in self.outcomes if o.outcome is Outcome.FAILED]

    @property
    def succeeded(self) -> list[PackageOutcome]:
        return [o for o in self.outcomes if o.outcome is not Outcome.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed and self.lockfile_error is None
