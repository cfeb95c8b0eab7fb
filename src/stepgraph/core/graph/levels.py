"""Grouping of ordered steps into concurrency levels."""

from typing import Dict, List, Sequence

from stepgraph.core.graph.validation import DependencyGraph


def compute_levels(graph: DependencyGraph, order: Sequence[str]) -> List[List[str]]:
    """Partition ``order`` into levels of mutually independent steps.

    Level 0 holds the steps without dependencies; a step's level is one more
    than the highest level among its dependencies. Two steps in the same level
    never depend on each other, directly or transitively, so a level can run
    concurrently once every earlier level has finished.

    Within a level, steps keep their relative position in ``order``.

    Args:
        graph: Validated, acyclic dependency graph
        order: Topological order over the same graph

    Returns:
        List of levels, lowest first
    """
    depth: Dict[str, int] = {}

    def level_of(step: str) -> int:
        if step in depth:
            return depth[step]
        deps = graph.get(step, ())
        level = 1 + max((level_of(dep) for dep in deps), default=-1)
        depth[step] = level
        return level

    levels: List[List[str]] = []
    for step in order:
        level = level_of(step)
        while len(levels) <= level:
            levels.append([])
        levels[level].append(step)

    return levels
