"""Deterministic topological ordering of dependency graphs."""

from typing import List

from stepgraph.core.errors import CycleError
from stepgraph.core.graph.validation import DependencyGraph


def topological_sort(graph: DependencyGraph, graph_name: str = "base") -> List[str]:
    """Order the steps of ``graph`` so every dependency precedes its dependents.

    Depth-first post-order: a step is appended only after all of its
    dependencies. Roots are taken in the graph's insertion order and each
    dependency list in its declared order, so the same graph always yields the
    same sequence.

    Args:
        graph: Mapping of step name to the names it depends on
        graph_name: Reported in the CycleError ("base" or a flow name)

    Returns:
        Step names in execution order

    Raises:
        CycleError: If a cycle is found while sorting
    """
    order: List[str] = []
    visited = set()
    on_stack = set()

    for root in graph:
        if root in visited:
            continue
        on_stack.add(root)
        stack = [(root, iter(graph.get(root, ())))]
        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep in on_stack:
                    raise CycleError(graph_name, dep)
                if dep not in visited:
                    on_stack.add(dep)
                    stack.append((dep, iter(graph.get(dep, ()))))
                    break
            else:
                stack.pop()
                on_stack.discard(node)
                visited.add(node)
                order.append(node)

    return order
