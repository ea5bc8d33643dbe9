"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying manifests.
This keeps a version bump a one-line diff.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from packaging.utils import canonicalize_name
from tomlkit.exceptions import TOMLKitError

from .errors import ManifestParseError


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML manifest (Cargo.toml or pyproject.toml).

    Returns a TOMLDocument that preserves formatting when modified and saved.

    Raises:
        ManifestParseError: If the file cannot be read, is not UTF-8, or is
            not valid TOML.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestParseError(f"Cannot read {path}: {exc}") from exc
    try:
        return tomlkit.parse(text)
    except TOMLKitError as exc:
        raise ManifestParseError(f"Cannot parse {path}: {exc}") from exc


def save_manifest(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) for consistent comparison.

    Args:
        doc: Parsed pyproject.toml document.
        fallback: Value to use if name is not specified.
    """
    return canonicalize_name(doc.get("project", {}).get("name", fallback))


def get_dependency_strings(doc: tomlkit.TOMLDocument) -> list[str]:
    """Collect the published dependency strings from a pyproject.toml.

    Gathers dependencies from:
    - [project].dependencies (main runtime deps)
    - [project].optional-dependencies.* (extras)

    [dependency-groups] are development-only and never end up in a built
    package's metadata, so they are not collected.

    Returns raw PEP 508 strings like "requests>=2.0" or "pkg[extra]~=1.0".
    """
    project = doc.get("project", {})
    deps: list[str] = [str(d) for d in project.get("dependencies", [])]
    for group_deps in project.get("optional-dependencies", {}).values():
        deps.extend(str(d) for d in group_deps)
    return deps


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [tool.uv.workspace].

    These patterns (e.g., "packages/*", "libs/*") define which directories
    contain workspace packages. Returns an empty list if none are defined.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    return [str(m) for m in members or []]


def get_workspace_excludes(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract [tool.uv.workspace].exclude glob patterns."""
    exclude = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("exclude")
    return [str(e) for e in exclude or []]


def has_uv_workspace(doc: tomlkit.TOMLDocument) -> bool:
    return "workspace" in doc.get("tool", {}).get("uv", {})
