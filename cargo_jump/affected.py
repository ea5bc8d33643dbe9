"""Affected-set resolution.

A version bump on package P changes what every dependent of P points at, so
the dependents have to be bumped in the same run to keep internal version
requirements consistent. This module computes that closure.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from .errors import ConfigurationError
from .graph import PackageGraph
from .models import AffectedSet


def resolve(directly_changed: Iterable[str], graph: PackageGraph) -> AffectedSet:
    """Compute the set of packages to bump.

    Breadth-first walk over the reverse-dependency index, seeded with the
    directly changed packages. The result is the smallest set containing the
    seeds and closed under "dependents of a member are members".

    Args:
        directly_changed: Names of packages owning a changed file.
        graph: Workspace graph.

    Returns:
        AffectedSet with the seeds as `direct` and everything reached from
        them as `transitive`.

    Raises:
        ConfigurationError: If a seed is not a workspace member.
    """
    direct = set(directly_changed)
    unknown = direct - graph.all_names()
    if unknown:
        raise ConfigurationError(
            f"Unknown packages in change set: {', '.join(sorted(unknown))}"
        )

    seen = set(direct)
    reasons: dict[str, str] = {}
    # Sorted seeds and neighbours keep `reasons` stable between runs
    queue = deque(sorted(direct))
    while queue:
        node = queue.popleft()
        for dependent in sorted(graph.dependents_of(node)):
            if dependent not in seen:
                seen.add(dependent)
                reasons[dependent] = node
                queue.append(dependent)

    return AffectedSet(
        direct=frozenset(direct),
        transitive=frozenset(seen - direct),
        reasons=reasons,
    )
