"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from cargo_jump.errors import WriteError
from cargo_jump.graph import PackageGraph
from cargo_jump.models import Ecosystem, PackageInfo


def pkg(name: str, root: str, *deps: str) -> PackageInfo:
    return PackageInfo(name=name, root_path=Path(root), dependency_names=frozenset(deps))


class FakeWriter:
    """Records apply_version calls; fails for names listed in `fail`."""

    def __init__(self, fail: Sequence[str] = ()) -> None:
        self.fail = set(fail)
        self.calls: list[tuple[Path, str]] = []

    def apply_version(self, root_path: Path, new_version: str) -> None:
        self.calls.append((root_path, new_version))
        if root_path.name in self.fail:
            raise WriteError(f"cannot write {root_path}")


class FakeWorkspace:
    def __init__(
        self,
        packages: Sequence[PackageInfo],
        *,
        root: Path = Path("/ws"),
        writer: FakeWriter | None = None,
        lockfile_error: str | None = None,
    ) -> None:
        self.ecosystem = Ecosystem.CARGO
        self.root = root
        self.packages = list(packages)
        self.fake_writer = writer or FakeWriter()
        self.lockfile_error = lockfile_error
        self.lockfile_refreshed = 0

    def list_packages(self) -> list[PackageInfo]:
        return self.packages

    def writer(self) -> FakeWriter:
        return self.fake_writer

    def refresh_lockfile(self) -> None:
        self.lockfile_refreshed += 1
        if self.lockfile_error:
            raise WriteError(self.lockfile_error)


class FakeDiff:
    def __init__(self, paths: Sequence[str]) -> None:
        self.paths = list(paths)
        self.calls: list[str] = []

    def changed_paths(self, old_ref: str) -> list[str]:
        self.calls.append(old_ref)
        return self.paths


@pytest.fixture
def chain_packages() -> list[PackageInfo]:
    """core ← util ← cli, each under /ws/crates."""
    return [
        pkg("core", "/ws/crates/core"),
        pkg("util", "/ws/crates/util", "core"),
        pkg("cli", "/ws/crates/cli", "util"),
    ]


@pytest.fixture
def chain_graph(chain_packages: list[PackageInfo]) -> PackageGraph:
    return PackageGraph.build(chain_packages)


@pytest.fixture
def diamond_graph() -> PackageGraph:
    """Diamond: top depends on left and right, both depend on bottom."""
    return PackageGraph.build(
        [
            pkg("bottom", "/ws/bottom"),
            pkg("left", "/ws/left", "bottom"),
            pkg("right", "/ws/right", "bottom"),
            pkg("top", "/ws/top", "left", "right"),
        ]
    )


@pytest.fixture
def cargo_workspace(tmp_path: Path) -> Path:
    """A Cargo workspace on disk with core ← util ← cli."""
    (tmp_path / "Cargo.toml").write_text(
        '[workspace]\nmembers = ["crates/*"]\nresolver = "2"\n'
    )
    manifests = {
        "core": "",
        "util": 'core = { path = "../core", version = "0.1.0" }\n',
        "cli": 'util = { path = "../util", version = "0.1.0" }\n',
    }
    for name, deps in manifests.items():
        crate = tmp_path / "crates" / name
        crate.mkdir(parents=True)
        (crate / "Cargo.toml").write_text(
            f"[package]\n"
            f'name = "{name}"\n'
            f'version = "0.1.0" # keep in sync\n'
            f'edition = "2021"\n'
            f"\n[dependencies]\n{deps}"
        )
    return tmp_path


@pytest.fixture
def uv_workspace(tmp_path: Path) -> Path:
    """A uv workspace on disk with pkg-a ← pkg-b, and pkg-c standalone."""
    (tmp_path / "pyproject.toml").write_text(
        '[tool.uv.workspace]\nmembers = ["packages/*"]\nexclude = ["packages/scratch"]\n'
    )
    members = {
        "a": 'dependencies = ["requests>=2.0"]',
        "b": 'dependencies = ["Pkg_A>=1.0", "click"]',
        "c": "dependencies = []\n\n[dependency-groups]\ndev = [\"pkg-b\"]",
    }
    for suffix, deps in members.items():
        d = tmp_path / "packages" / suffix
        d.mkdir(parents=True)
        (d / "pyproject.toml").write_text(
            f'[project]\nname = "pkg-{suffix}"\nversion = "1.0.0"\n{deps}\n'
        )
    scratch = tmp_path / "packages" / "scratch"
    scratch.mkdir()
    (scratch / "pyproject.toml").write_text('[project]\nname = "scratch"\n')
    return tmp_path
