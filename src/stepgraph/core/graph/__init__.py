"""Graph package initialization.

Exposes validation, ordering and level scheduling for dependency graphs.
"""

from stepgraph.core.graph.validation import (
    DependencyGraph,
    has_circular_dependency,
    validate,
    validate_acyclic,
    validate_flow,
    validate_flow_scope,
    validate_references,
    validate_workflow,
)
from stepgraph.core.graph.sorting import topological_sort
from stepgraph.core.graph.levels import compute_levels

__all__ = [
    "DependencyGraph",

    # Validation
    "validate",
    "validate_flow",
    "validate_workflow",
    "validate_acyclic",
    "validate_references",
    "validate_flow_scope",
    "has_circular_dependency",

    # Ordering
    "topological_sort",
    "compute_levels",
]
