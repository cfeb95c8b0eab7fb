"""Flow definitions and the flow registry.

A flow re-traverses a subset of a workflow's steps with its own dependency
edges and one action per step. Actions receive the step's current container
value and the results produced earlier in the same run:

    def summarize(container, context):
        return container.describe(context["load"])

Flows never write containers. The one exception is the build flow, which is
synthesized from the workflow's steps and runs each real implementation to
(re)populate the containers.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional

from pydantic import BaseModel, Field

from stepgraph.core.errors import DuplicateFlowError, DuplicateFlowStepError, UnknownFlowError
from stepgraph.core.workflow.step import FlowAction, Step

BUILD_FLOW_NAME = "__build__"


class ExecutionKind(str, Enum):
    """How the engine treats each step of a flow."""
    BUILD = "build"          # Run the step implementation and write its container
    USER_FLOW = "user_flow"  # Run the flow action against the current container


class FlowStep(BaseModel):
    """One step of a flow: its flow-local dependencies and action."""
    name: str
    dependencies: List[str] = Field(default_factory=list)
    action: Optional[FlowAction] = None

    class Config:
        frozen = True

    def run(self, container: Any, context: Dict[str, Any]) -> Any:
        """Invoke the action; the result may be an awaitable."""
        return self.action(container, context)


class FlowDefinition(BaseModel):
    """
    Named flow over a subset of workflow steps.

    Attributes:
        name: Flow name used with execute / execute_async
        kind: BUILD for the synthesized build flow, USER_FLOW otherwise
        steps: Flow steps in declaration order
    """
    name: str
    kind: ExecutionKind = Field(default=ExecutionKind.USER_FLOW)
    steps: Dict[str, FlowStep] = Field(default_factory=dict)

    @property
    def graph(self) -> Dict[str, List[str]]:
        """Flow-local dependency graph, in step declaration order."""
        return {name: list(step.dependencies) for name, step in self.steps.items()}

    @property
    def is_build(self) -> bool:
        return self.kind == ExecutionKind.BUILD

    def add_step(self, step: FlowStep) -> None:
        """Add a step to the flow.

        Raises:
            DuplicateFlowStepError: If the step is already part of the flow
        """
        if step.name in self.steps:
            raise DuplicateFlowStepError(self.name, step.name)
        self.steps[step.name] = step


class FlowRegistry:
    """Registry of user-declared flows."""

    def __init__(self) -> None:
        self._flows: Dict[str, FlowDefinition] = {}

    def define(self, name: str) -> FlowDefinition:
        """Register a new, empty flow and return it.

        Raises:
            DuplicateFlowError: If a flow with this name already exists
        """
        if name in self._flows:
            raise DuplicateFlowError(name)
        flow = FlowDefinition(name=name)
        self._flows[name] = flow
        return flow

    def get(self, name: str) -> FlowDefinition:
        """Look up a flow by name.

        Raises:
            UnknownFlowError: If no flow with this name was declared
        """
        try:
            return self._flows[name]
        except KeyError:
            raise UnknownFlowError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._flows

    def __iter__(self) -> Iterator[str]:
        return iter(self._flows)

    def __len__(self) -> int:
        return len(self._flows)

    def as_dict(self) -> Dict[str, FlowDefinition]:
        return dict(self._flows)

    def copy(self) -> "FlowRegistry":
        """Copy the registry and its flows, detached from later additions."""
        registry = FlowRegistry()
        for name, flow in self._flows.items():
            registry._flows[name] = FlowDefinition(
                name=flow.name, kind=flow.kind, steps=dict(flow.steps)
            )
        return registry

    @staticmethod
    def build_flow(steps: Mapping[str, Step]) -> FlowDefinition:
        """Synthesize the build flow over every step of the workflow.

        Its graph is the workflow's dependency graph and it carries no actions:
        the engine runs each step's implementation instead.
        """
        return FlowDefinition(
            name=BUILD_FLOW_NAME,
            kind=ExecutionKind.BUILD,
            steps={
                name: FlowStep(name=name, dependencies=list(step.dependencies))
                for name, step in steps.items()
            },
        )
