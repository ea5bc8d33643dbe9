"""Tests for cargo_jump.toml."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from cargo_jump.errors import ManifestParseError
from cargo_jump.toml import (
    get_dependency_strings,
    get_project_name,
    get_workspace_excludes,
    get_workspace_member_globs,
    has_uv_workspace,
    load_manifest,
    save_manifest,
)


@pytest.fixture
def sample_doc() -> tomlkit.TOMLDocument:
    return tomlkit.parse(
        """\
[project]
name = "My_Package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[project.optional-dependencies]
docs = ["sphinx>=7.0"]

[dependency-groups]
test = ["hypothesis>=6.0"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
exclude = ["packages/legacy"]
"""
    )


class TestLoadSaveManifest:
    def test_round_trip_preserves_comments(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "x"  # the crate\nversion = "0.1.0"\n')

        doc = load_manifest(path)
        doc["package"]["version"] = "0.2.0"
        save_manifest(path, doc)

        assert path.read_text() == (
            '[package]\nname = "x"  # the crate\nversion = "0.2.0"\n'
        )

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\nname = 1\n")
        with pytest.raises(ManifestParseError, match="Cannot parse"):
            load_manifest(path)

    def test_not_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_bytes(b'[package]\nname = "\xff"\n')
        with pytest.raises(ManifestParseError, match="Cannot read"):
            load_manifest(path)

    def test_unreadable(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.mkdir()
        with pytest.raises(ManifestParseError, match="Cannot read"):
            load_manifest(path)


class TestGetProjectName:
    def test_normalizes_name(self, sample_doc: tomlkit.TOMLDocument) -> None:
        assert get_project_name(sample_doc, "fallback") == "my-package"

    def test_returns_fallback_when_no_project(self) -> None:
        assert get_project_name(tomlkit.parse(""), "Fall_Back") == "fall-back"


class TestGetDependencyStrings:
    def test_runtime_and_optional_only(self, sample_doc: tomlkit.TOMLDocument) -> None:
        assert get_dependency_strings(sample_doc) == [
            "click>=8.0",
            "pydantic>=2.0",
            "sphinx>=7.0",
        ]

    def test_no_project(self) -> None:
        assert get_dependency_strings(tomlkit.parse("")) == []


class TestWorkspaceTables:
    def test_member_globs(self, sample_doc: tomlkit.TOMLDocument) -> None:
        assert get_workspace_member_globs(sample_doc) == ["packages/*", "libs/*"]
        assert get_workspace_excludes(sample_doc) == ["packages/legacy"]
        assert has_uv_workspace(sample_doc)

    def test_no_workspace(self) -> None:
        doc = tomlkit.parse('[project]\nname = "x"\n')
        assert get_workspace_member_globs(doc) == []
        assert get_workspace_excludes(doc) == []
        assert not has_uv_workspace(doc)
