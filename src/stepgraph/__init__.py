"""stepgraph - dependency-graph workflows with blocking and concurrent execution."""

from stepgraph.core import (
    WorkflowBuilder,
    WorkflowInstance,
    WorkflowConfig,
    configure_logging,
    get_logger,
    LogLevel,
    LogComponent,
)
from stepgraph.core.errors import (
    WorkflowError,
    DefinitionError,
    DuplicateStepError,
    DuplicateFlowStepError,
    DuplicateFlowError,
    MissingDependencyError,
    UnknownStepError,
    UnknownStepInFlowError,
    FlowScopeError,
    CycleError,
    ExecutionError,
    ModeViolationError,
    UnknownFlowError,
)
from stepgraph.core.graph import (
    compute_levels,
    has_circular_dependency,
    topological_sort,
    validate,
    validate_flow,
)
from stepgraph.core.workflow import ExecutionKind, ExecutionResult, is_awaitable

__all__ = [
    'WorkflowBuilder',
    'WorkflowInstance',
    'WorkflowConfig',
    'ExecutionKind',
    'ExecutionResult',
    'configure_logging',
    'get_logger',
    'LogLevel',
    'LogComponent',

    # Graph helpers
    'validate',
    'validate_flow',
    'has_circular_dependency',
    'topological_sort',
    'compute_levels',
    'is_awaitable',

    # Errors
    'WorkflowError',
    'DefinitionError',
    'DuplicateStepError',
    'DuplicateFlowStepError',
    'DuplicateFlowError',
    'MissingDependencyError',
    'UnknownStepError',
    'UnknownStepInFlowError',
    'FlowScopeError',
    'CycleError',
    'ExecutionError',
    'ModeViolationError',
    'UnknownFlowError',
]
