"""Workspace package graph.

Holds every workspace package plus a precomputed reverse-dependency index so
"who depends on X" is a dict lookup. Packages refer to each other by name
only; the graph is the single owner of the records and is read-only once
built.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from .errors import AmbiguousRoot, DependencyCycle, DuplicateName, UnknownDependency
from .models import PackageInfo


def normalize_path(path: str | os.PathLike[str], base: Path | None = None) -> Path:
    """Lexically normalize a path, joining it onto `base` if it is relative.

    `.` and `..` segments are collapsed without touching the filesystem, so
    deleted files (which is what a diff often reports) normalize fine.
    """
    p = Path(path)
    if base is not None and not p.is_absolute():
        p = base / p
    return Path(os.path.normpath(p))


def is_within(path: Path, root: Path) -> bool:
    """True if `root` is a path-segment prefix of `path` (or equal to it).

    Compares whole segments, so `/ws/ab` is not within `/ws/a`.
    """
    return path == root or root in path.parents


def topo_sort(packages: Mapping[str, PackageInfo]) -> list[str]:
    """Topologically sort packages by their internal dependencies.

    Uses Kahn's algorithm to produce an order where dependencies come before
    dependents. Ties are broken alphabetically for deterministic output.

    Raises:
        DependencyCycle: If the dependency relation has a cycle.

    Example:
        If A depends on B, and B depends on C:
        topo_sort({A, B, C}) → [C, B, A]
    """
    in_degree = {n: 0 for n in packages}
    reverse_deps: dict[str, list[str]] = {n: [] for n in packages}

    for name, info in packages.items():
        for dep in info.dependency_names:
            if dep in packages:
                in_degree[name] += 1
                reverse_deps[dep].append(name)

    queue = sorted(n for n, d in in_degree.items() if d == 0)
    order: list[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependent in sorted(reverse_deps[node]):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(packages):
        remaining = sorted(set(packages) - set(order))
        raise DependencyCycle(
            f"Dependency cycle detected involving: {', '.join(remaining)}"
        )

    return order


class PackageGraph:
    """Immutable package/dependency graph for one workspace.

    Build it with `PackageGraph.build()`, which validates the invariants the
    rest of the tool relies on: unique names, non-overlapping roots, known
    dependency names and an acyclic dependency relation.
    """

    def __init__(
        self,
        packages: Mapping[str, PackageInfo],
        dependents: Mapping[str, frozenset[str]],
        order: list[str],
    ) -> None:
        self._packages = MappingProxyType(dict(packages))
        self._dependents = MappingProxyType(dict(dependents))
        self._roots = MappingProxyType(
            {info.root_path: name for name, info in packages.items()}
        )
        self._order = tuple(order)

    @classmethod
    def build(
        cls,
        packages: Iterable[PackageInfo],
        *,
        allow_nested_roots: bool = True,
    ) -> PackageGraph:
        """Validate `packages` and build the graph.

        Args:
            packages: Workspace members, in any order.
            allow_nested_roots: Accept a package rooted inside another
                package's directory. Paths are then attributed to the
                innermost package. Identical roots are always rejected.

        Raises:
            DuplicateName: Two packages share a name.
            AmbiguousRoot: Two packages share a root, or one root contains
                another and `allow_nested_roots` is False.
            UnknownDependency: A dependency name is not a workspace member.
            DependencyCycle: The dependency relation has a cycle.
        """
        by_name: dict[str, PackageInfo] = {}
        for info in packages:
            if info.name in by_name:
                raise DuplicateName(f"Duplicate package name: {info.name}")
            by_name[info.name] = info.model_copy(
                update={"root_path": normalize_path(info.root_path)}
            )

        _check_roots(by_name.values(), allow_nested_roots)

        dependents: dict[str, set[str]] = {n: set() for n in by_name}
        for name, info in by_name.items():
            for dep in info.dependency_names:
                if dep not in by_name:
                    raise UnknownDependency(
                        f"Package {name} depends on unknown workspace member {dep}"
                    )
                dependents[dep].add(name)

        order = topo_sort(by_name)
        return cls(
            by_name,
            {n: frozenset(d) for n, d in dependents.items()},
            order,
        )

    def dependents_of(self, name: str) -> frozenset[str]:
        """Packages that declare `name` as a dependency."""
        return self._dependents[name]

    def dependencies_of(self, name: str) -> frozenset[str]:
        return self._packages[name].dependency_names

    def all_names(self) -> frozenset[str]:
        return frozenset(self._packages)

    def get(self, name: str) -> PackageInfo:
        return self._packages[name]

    def owner_of_root(self, path: Path) -> str | None:
        """Name of the package rooted exactly at `path`, if any."""
        return self._roots.get(path)

    def topo_order(self) -> list[str]:
        """Package names with dependencies before dependents."""
        return list(self._order)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._packages))


def _check_roots(packages: Iterable[PackageInfo], allow_nested: bool) -> None:
    seen: dict[Path, str] = {}
    for info in packages:
        other = seen.get(info.root_path)
        if other is not None:
            raise AmbiguousRoot(
                f"Packages {other} and {info.name} share root {info.root_path}"
            )
        seen[info.root_path] = info.name

    if allow_nested:
        return

    roots = sorted(seen)
    for outer in roots:
        for inner in roots:
            if inner != outer and is_within(inner, outer):
                raise AmbiguousRoot(
                    f"Package {seen[inner]} ({inner}) is nested inside "
                    f"package {seen[outer]} ({outer})"
                )
