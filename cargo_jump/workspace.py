"""Workspace discovery.

Reads the list of workspace members, their directories and their
intra-workspace dependencies. Two kinds of workspace are supported: Cargo
workspaces (through `cargo metadata`) and uv workspaces (by reading
pyproject.toml files directly).
"""

from __future__ import annotations

import glob
import json
import logging
from pathlib import Path

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .errors import ManifestParseError, WorkspaceNotFound, WriteError
from .graph import normalize_path
from .manifest import CargoManifestWriter, ManifestWriter, PyprojectManifestWriter
from .models import Ecosystem, PackageInfo
from .shell import run
from .toml import (
    get_dependency_strings,
    get_project_name,
    get_workspace_excludes,
    get_workspace_member_globs,
    has_uv_workspace,
    load_manifest,
)

logger = logging.getLogger(__name__)

# Dependency kinds that end up in a published crate's requirements
_CARGO_EDGE_KINDS = {None, "normal", "build"}


class CargoWorkspace:
    """Cargo workspace rooted at the directory holding the root Cargo.toml."""

    ecosystem = Ecosystem.CARGO

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def list_packages(self) -> list[PackageInfo]:
        """Workspace members as reported by `cargo metadata`.

        Only path dependencies on other members are kept. Dev-dependencies
        are skipped: they may legally form cycles and are stripped from
        published crates.

        Raises:
            WorkspaceNotFound: If there is no Cargo.toml at the root.
            ManifestParseError: If cargo fails or prints unexpected output.
        """
        manifest = self.root / "Cargo.toml"
        if not manifest.is_file():
            raise WorkspaceNotFound(f"No Cargo.toml found in {self.root}")

        try:
            result = run(
                "cargo",
                "metadata",
                "--format-version",
                "1",
                "--no-deps",
                "--manifest-path",
                str(manifest),
                cwd=self.root,
            )
        except OSError as exc:
            raise ManifestParseError(f"Cannot run cargo metadata: {exc}") from exc
        if result.returncode != 0:
            raise ManifestParseError(
                f"cargo metadata failed: {result.stderr.strip()}"
            )

        try:
            metadata = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise ManifestParseError(
                f"cargo metadata printed invalid JSON: {exc}"
            ) from exc

        return parse_cargo_metadata(metadata)

    def writer(self) -> ManifestWriter:
        return CargoManifestWriter()

    def refresh_lockfile(self) -> None:
        """Bring Cargo.lock in line with the new versions.

        Raises:
            WriteError: If `cargo fetch` fails.
        """
        try:
            result = run("cargo", "fetch", cwd=self.root)
        except OSError as exc:
            raise WriteError(f"Cannot run cargo fetch: {exc}") from exc
        if result.returncode != 0:
            raise WriteError(f"cargo fetch failed: {result.stderr.strip()}")


def parse_cargo_metadata(metadata: dict) -> list[PackageInfo]:
    """Turn `cargo metadata --no-deps` output into PackageInfo records.

    Raises:
        ManifestParseError: If required keys are missing.
    """
    try:
        member_ids = set(metadata["workspace_members"])
        members = [p for p in metadata["packages"] if p["id"] in member_ids]
        member_names = {p["name"] for p in members}

        packages: list[PackageInfo] = []
        for pkg in members:
            manifest_path = Path(pkg["manifest_path"])
            deps: set[str] = set()
            for dep in pkg.get("dependencies", []):
                # Registry and git deps carry a source; path deps do not
                if dep.get("source") is not None:
                    continue
                if dep.get("kind") not in _CARGO_EDGE_KINDS:
                    continue
                if dep["name"] in member_names and dep["name"] != pkg["name"]:
                    deps.add(dep["name"])
            packages.append(
                PackageInfo(
                    name=pkg["name"],
                    root_path=normalize_path(manifest_path.parent),
                    dependency_names=frozenset(deps),
                    manifest_path=manifest_path,
                )
            )
    except (KeyError, TypeError) as exc:
        raise ManifestParseError(f"Unexpected cargo metadata layout: {exc}") from exc

    for info in packages:
        logger.debug(
            "%s (%s) → %s", info.name, info.root_path, sorted(info.dependency_names)
        )
    return packages


class UvWorkspace:
    """uv workspace rooted at the directory holding the root pyproject.toml."""

    ecosystem = Ecosystem.UV

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def list_packages(self) -> list[PackageInfo]:
        """Scan the workspace and discover all packages.

        Reads [tool.uv.workspace].members from the root pyproject.toml to
        find package directories, then extracts name and internal deps from
        each package's pyproject.toml. A root pyproject.toml with a [project]
        table is itself a member.

        Raises:
            WorkspaceNotFound: If the root has no uv workspace.
            ManifestParseError: If a manifest cannot be read or parsed.
        """
        root_manifest = self.root / "pyproject.toml"
        if not root_manifest.is_file():
            raise WorkspaceNotFound(f"No pyproject.toml found in {self.root}")
        root_doc = load_manifest(root_manifest)
        if not has_uv_workspace(root_doc):
            raise WorkspaceNotFound(
                f"No [tool.uv.workspace] defined in {root_manifest}"
            )

        excluded: set[Path] = set()
        for pattern in get_workspace_excludes(root_doc):
            excluded.update(Path(m) for m in glob.glob(str(self.root / pattern)))

        # Expand globs to find all package directories
        member_dirs: list[Path] = []
        if "project" in root_doc:
            member_dirs.append(self.root)
        for pattern in get_workspace_member_globs(root_doc):
            for match in sorted(glob.glob(str(self.root / pattern))):
                p = Path(match)
                if p in excluded or p in member_dirs:
                    continue
                if (p / "pyproject.toml").is_file():
                    member_dirs.append(p)

        # First pass: collect basic info from each package
        names: dict[Path, str] = {}
        raw_deps: dict[Path, list[str]] = {}
        for d in member_dirs:
            doc = root_doc if d == self.root else load_manifest(d / "pyproject.toml")
            names[d] = get_project_name(doc, d.name)
            raw_deps[d] = get_dependency_strings(doc)

        # Second pass: keep only deps naming other workspace members
        workspace_names = set(names.values())
        packages: list[PackageInfo] = []
        for d in member_dirs:
            name = names[d]
            deps: set[str] = set()
            for dep_str in raw_deps[d]:
                dep_name = dep_canonical_name(dep_str)
                if dep_name in workspace_names and dep_name != name:
                    deps.add(dep_name)
            packages.append(
                PackageInfo(
                    name=name,
                    root_path=normalize_path(d),
                    dependency_names=frozenset(deps),
                    manifest_path=d / "pyproject.toml",
                )
            )
        return packages

    def writer(self) -> ManifestWriter:
        return PyprojectManifestWriter()

    def refresh_lockfile(self) -> None:
        """Re-lock so uv.lock records the new versions.

        Raises:
            WriteError: If `uv lock` fails.
        """
        try:
            result = run("uv", "lock", cwd=self.root)
        except OSError as exc:
            raise WriteError(f"Cannot run uv lock: {exc}") from exc
        if result.returncode != 0:
            raise WriteError(f"uv lock failed: {result.stderr.strip()}")


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"

    Raises:
        ManifestParseError: If the string is not valid PEP 508.
    """
    try:
        return canonicalize_name(Requirement(dep_str).name)
    except InvalidRequirement as exc:
        raise ManifestParseError(f"Invalid dependency {dep_str!r}: {exc}") from exc


def detect_workspace(root: Path) -> CargoWorkspace | UvWorkspace:
    """Pick the workspace reader matching the manifest found at `root`.

    A Cargo.toml wins over a pyproject.toml when both exist.

    Raises:
        WorkspaceNotFound: If neither kind of workspace is present.
        ManifestParseError: If the root pyproject.toml cannot be read.
    """
    root = Path(root)
    if (root / "Cargo.toml").is_file():
        return CargoWorkspace(root)
    pyproject = root / "pyproject.toml"
    if pyproject.is_file() and has_uv_workspace(load_manifest(pyproject)):
        return UvWorkspace(root)
    raise WorkspaceNotFound(
        f"No Cargo workspace or uv workspace found in {root.absolute()}"
    )
