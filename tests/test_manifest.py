"""Tests for cargo_jump.manifest."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargo_jump.errors import WriteError
from cargo_jump.manifest import CargoManifestWriter, PyprojectManifestWriter


class TestCargoManifestWriter:
    def test_updates_version(self, cargo_workspace: Path) -> None:
        crate = cargo_workspace / "crates" / "core"
        CargoManifestWriter().apply_version(crate, "0.2.0")
        content = (crate / "Cargo.toml").read_text()
        assert 'version = "0.2.0" # keep in sync' in content

    def test_only_version_field_changes(self, cargo_workspace: Path) -> None:
        crate = cargo_workspace / "crates" / "util"
        before = (crate / "Cargo.toml").read_text()
        CargoManifestWriter().apply_version(crate, "0.2.0")
        after = (crate / "Cargo.toml").read_text()
        assert after == before.replace(
            'version = "0.1.0" # keep', 'version = "0.2.0" # keep'
        )
        # dependency requirement is left alone
        assert 'core = { path = "../core", version = "0.1.0" }' in after

    def test_inherited_version_rejected(self, tmp_path: Path) -> None:
        content = '[package]\nname = "x"\nversion.workspace = true\n'
        (tmp_path / "Cargo.toml").write_text(content)
        with pytest.raises(WriteError, match="inherited"):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")
        assert (tmp_path / "Cargo.toml").read_text() == content

    def test_inline_inherited_version_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text(
            '[package]\nname = "x"\nversion = { workspace = true }\n'
        )
        with pytest.raises(WriteError, match="inherited"):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")

    def test_missing_package_table(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text('[workspace]\nmembers = []\n')
        with pytest.raises(WriteError, match=r"missing \[package\]"):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")

    def test_missing_version(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text('[package]\nname = "x"\n')
        with pytest.raises(WriteError, match="missing package.version"):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(WriteError, match="Cannot read"):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text("[package\n")
        with pytest.raises(WriteError):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")

    def test_not_utf8(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_bytes(
            b'[package]\nname = "x"\nversion = "0.1.0"\n# \xff\n'
        )
        with pytest.raises(WriteError, match="Cannot read"):
            CargoManifestWriter().apply_version(tmp_path, "1.0.0")


class TestPyprojectManifestWriter:
    def test_updates_version(self, uv_workspace: Path) -> None:
        pkg_dir = uv_workspace / "packages" / "b"
        PyprojectManifestWriter().apply_version(pkg_dir, "2.0.0")
        content = (pkg_dir / "pyproject.toml").read_text()
        assert 'version = "2.0.0"' in content
        assert '"Pkg_A>=1.0"' in content

    def test_dynamic_version_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\ndynamic = ["version"]\n'
        )
        with pytest.raises(WriteError, match="dynamic"):
            PyprojectManifestWriter().apply_version(tmp_path, "1.0.0")

    def test_missing_version(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        with pytest.raises(WriteError, match="missing project.version"):
            PyprojectManifestWriter().apply_version(tmp_path, "1.0.0")
        assert "version" not in (tmp_path / "pyproject.toml").read_text()

    def test_missing_project_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.uv]\n")
        with pytest.raises(WriteError, match=r"missing \[project\]"):
            PyprojectManifestWriter().apply_version(tmp_path, "1.0.0")
