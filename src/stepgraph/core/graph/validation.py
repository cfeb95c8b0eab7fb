"""Structural validation for dependency graphs.

A dependency graph maps each step name to the ordered list of step names it
depends on. The same checks apply to the main workflow graph and to the
flow-local graph of every flow:

1. every dependency resolves to a known step
2. the graph is acyclic
3. for flows, every dependency is itself a member of the flow

Validation never mutates its input and always returns the same verdict for
an unchanged graph.
"""

from typing import Iterable, Mapping, Optional, Sequence, TYPE_CHECKING

from stepgraph.core.errors import (
    CycleError,
    FlowScopeError,
    MissingDependencyError,
    UnknownStepInFlowError,
)
from stepgraph.core.logging import LogComponent, get_logger, log_verbose

if TYPE_CHECKING:
    from stepgraph.core.workflow.flow import FlowDefinition

logger = get_logger(LogComponent.GRAPH)

DependencyGraph = Mapping[str, Sequence[str]]


def _find_cycle(graph: DependencyGraph, roots: Iterable[str]) -> Optional[str]:
    """Return a node closing a cycle reachable from ``roots``, or None.

    Depth-first walk with an explicit stack. ``on_stack`` holds the nodes of
    the current path, ``visited`` the nodes whose subtree is fully explored;
    reaching a node that is still on the path is a back-edge.
    """
    visited = set()
    on_stack = set()

    for root in roots:
        if root in visited:
            continue
        on_stack.add(root)
        stack = [(root, iter(graph.get(root, ())))]
        while stack:
            node, deps = stack[-1]
            for dep in deps:
                if dep in on_stack:
                    return dep
                if dep not in visited:
                    on_stack.add(dep)
                    stack.append((dep, iter(graph.get(dep, ()))))
                    break
            else:
                stack.pop()
                on_stack.discard(node)
                visited.add(node)
    return None


def has_circular_dependency(graph: DependencyGraph, start: Optional[str] = None) -> bool:
    """Check a graph for cycles, from ``start`` only or from every node."""
    roots = [start] if start is not None else list(graph)
    return _find_cycle(graph, roots) is not None


def validate_acyclic(graph: DependencyGraph, graph_name: str = "base") -> None:
    """Raise CycleError if ``graph`` contains a cycle.

    Every node is tried as a root, so disconnected components are checked too.
    """
    node = _find_cycle(graph, list(graph))
    if node is not None:
        logger.error(f"Cycle detected in {graph_name} graph at step '{node}'")
        raise CycleError(graph_name, node)


def validate_references(
    graph: DependencyGraph,
    known_names: Iterable[str],
    flow: Optional[str] = None,
) -> None:
    """Raise MissingDependencyError for the first dependency not in ``known_names``."""
    known = set(known_names)
    for step, deps in graph.items():
        for dep in deps:
            if dep not in known:
                raise MissingDependencyError(step, dep, flow=flow)


def validate_flow_scope(flow_name: str, graph: DependencyGraph) -> None:
    """Raise FlowScopeError if a flow step depends on a step outside the flow."""
    for step, deps in graph.items():
        for dep in deps:
            if dep not in graph:
                raise FlowScopeError(flow_name, step, dep)


def validate(dependency_graph: DependencyGraph) -> None:
    """Validate the main workflow graph.

    Raises:
        MissingDependencyError: If a dependency is not a declared step
        CycleError: If the graph is cyclic
    """
    validate_references(dependency_graph, dependency_graph.keys())
    validate_acyclic(dependency_graph)
    log_verbose(logger, f"Validated workflow graph with {len(dependency_graph)} steps")


def validate_flow(flow: "FlowDefinition", dependency_graph: DependencyGraph) -> None:
    """Validate a flow definition against the main workflow graph.

    Raises:
        UnknownStepInFlowError: If the flow acts on a step that does not exist
        MissingDependencyError: If a flow dependency does not exist
        FlowScopeError: If a flow dependency is not part of the flow
        CycleError: If the flow-local graph is cyclic
    """
    flow_graph = flow.graph
    for step in flow_graph:
        if step not in dependency_graph:
            raise UnknownStepInFlowError(flow.name, step)
    validate_references(flow_graph, dependency_graph.keys(), flow=flow.name)
    validate_flow_scope(flow.name, flow_graph)
    validate_acyclic(flow_graph, graph_name=flow.name)
    log_verbose(logger, f"Validated flow '{flow.name}' with {len(flow_graph)} steps")


def validate_workflow(
    dependency_graph: DependencyGraph,
    flows: Iterable["FlowDefinition"] = (),
) -> None:
    """Validate the main graph, then each flow against it."""
    validate(dependency_graph)
    for flow in flows:
        validate_flow(flow, dependency_graph)
