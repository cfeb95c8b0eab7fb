"""Workflow package initialization.

Exposes steps, flows, run state, the execution engine and the builders.
"""

from stepgraph.core.workflow.step import Step, is_awaitable
from stepgraph.core.workflow.flow import (
    BUILD_FLOW_NAME,
    ExecutionKind,
    FlowDefinition,
    FlowRegistry,
    FlowStep,
)
from stepgraph.core.workflow.state import ExecutionResult, RunState, StepStatus
from stepgraph.core.workflow.base import WorkflowInstance
from stepgraph.core.workflow.builder import FlowBuilder, WorkflowBuilder

__all__ = [
    # Core classes
    "Step",
    "FlowStep",
    "FlowDefinition",
    "FlowRegistry",
    "ExecutionKind",
    "WorkflowInstance",
    "RunState",
    "StepStatus",
    "ExecutionResult",

    # Builders
    "WorkflowBuilder",
    "FlowBuilder",

    # Helpers
    "BUILD_FLOW_NAME",
    "is_awaitable",
]
