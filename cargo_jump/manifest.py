"""Manifest version rewriting.

Each writer updates exactly one field, the package version, in one manifest
file. Everything else in the file, comments and formatting included, is left
as it was.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .errors import CargoJumpError, WriteError
from .toml import load_manifest, save_manifest


class ManifestWriter:
    """Base writer; subclasses say where the version lives."""

    manifest_name: str = ""

    def apply_version(self, root_path: Path, new_version: str) -> None:
        """Set the package version in the manifest under `root_path`.

        Raises:
            WriteError: If the manifest is missing, unparsable, has no
                writable version field, or cannot be saved.
        """
        path = Path(root_path) / self.manifest_name
        try:
            doc = load_manifest(path)
        except CargoJumpError as exc:
            raise WriteError(str(exc)) from exc

        container = self._version_container(doc, path)
        container["version"] = new_version

        try:
            save_manifest(path, doc)
        except OSError as exc:
            raise WriteError(f"Cannot write {path}: {exc}") from exc

    def _version_container(self, doc: Any, path: Path) -> Any:
        raise NotImplementedError


class CargoManifestWriter(ManifestWriter):
    """Writes [package].version in Cargo.toml."""

    manifest_name = "Cargo.toml"

    def _version_container(self, doc: Any, path: Path) -> Any:
        package = doc.get("package")
        if not isinstance(package, dict):
            raise WriteError(f"{path}: missing [package]")
        version = package.get("version")
        if version is None:
            raise WriteError(f"{path}: missing package.version")
        # version.workspace = true
        if isinstance(version, dict):
            raise WriteError(
                f"{path}: package.version is inherited from the workspace; "
                "set [workspace.package].version instead"
            )
        return package


class PyprojectManifestWriter(ManifestWriter):
    """Writes [project].version in pyproject.toml.

    Like Cargo.toml, the version must already be declared statically; a
    missing or dynamic version is never added.
    """

    manifest_name = "pyproject.toml"

    def _version_container(self, doc: Any, path: Path) -> Any:
        project = doc.get("project")
        if not isinstance(project, dict):
            raise WriteError(f"{path}: missing [project]")
        if "version" in project.get("dynamic", []):
            raise WriteError(
                f"{path}: project.version is dynamic and cannot be set"
            )
        if "version" not in project:
            raise WriteError(f"{path}: missing project.version")
        return project
