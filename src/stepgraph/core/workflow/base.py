"""Workflow instance and execution engine.

A WorkflowInstance owns the container store of a built workflow and runs
flows against it in one of two modes:

1. Blocking (``execute``): steps run one at a time in topological order.
   Any step or action returning an awaitable aborts the run.
2. Concurrent (``execute_async``): steps are grouped into levels; each level
   is dispatched with ``asyncio.gather`` and fully settled before the next
   level starts.

Example:
    ```python
    workflow = (
        WorkflowBuilder()
        .add_step("a", [], lambda deps: "a-data")
        .add_step("b", ["a"], lambda deps: f"b-{deps['a']}")
        .build()
    )
    workflow.containers  # {"a": "a-data", "b": "b-a-data"}

    result = await workflow.execute_async("report")
    ```
"""

from types import MappingProxyType
from typing import Dict, Any, List, Mapping, Optional, Tuple
import asyncio
import logging
from pydantic import BaseModel, Field, PrivateAttr

from stepgraph.core.config import WorkflowConfig
from stepgraph.core.errors import ExecutionError, ModeViolationError
from stepgraph.core.graph import compute_levels, topological_sort, validate_workflow
from stepgraph.core.logging import (
    LogComponent,
    LogLevel,
    VerbosityLevel,
    get_logger,
    log_state,
    log_step,
    log_verbose,
)
from stepgraph.core.workflow.flow import FlowDefinition, FlowRegistry
from stepgraph.core.workflow.state import ExecutionResult, RunState, StepStatus
from stepgraph.core.workflow.step import Step, discard_awaitable, is_awaitable


class WorkflowInstance(BaseModel):
    """A built workflow: steps, flows and the container store.

    Attributes:
        steps: Step declarations by name, in declaration order
        containers: Latest value computed by each step. Only the build flow
            writes this mapping; values are handed out by reference.
        config: Naming and logging configuration

    Flows are passed to the constructor as a FlowRegistry, copied, validated
    and exposed read-only through ``flows``.
    """
    steps: Dict[str, Step] = Field(default_factory=dict)
    containers: Dict[str, Any] = Field(default_factory=dict)
    config: WorkflowConfig = Field(default_factory=WorkflowConfig)
    _flows: FlowRegistry = PrivateAttr()
    _logger: logging.Logger = PrivateAttr()
    _build_flow: FlowDefinition = PrivateAttr()

    class Config:
        arbitrary_types_allowed = True

    def __init__(self, flows: Optional[FlowRegistry] = None, **data):
        super().__init__(**data)
        self._flows = flows.copy() if flows is not None else FlowRegistry()
        self._logger = get_logger(LogComponent.ENGINE)
        self.validate()
        self._build_flow = FlowRegistry.build_flow(self.steps)

    @property
    def flows(self) -> Mapping[str, FlowDefinition]:
        """Read-only view of the declared flows; edits never reach the instance."""
        return MappingProxyType(self._flows.copy().as_dict())

    @property
    def dependencies(self) -> Dict[str, List[str]]:
        """The workflow's dependency graph."""
        return {name: list(step.dependencies) for name, step in self.steps.items()}

    def validate(self) -> None:
        """Validate the dependency graph and every flow against it.

        Raises:
            DefinitionError: If the workflow or any flow is malformed
        """
        validate_workflow(self.dependencies, self._flows.as_dict().values())

    def execute(self, flow_name: str) -> ExecutionResult:
        """Run a flow in blocking mode.

        Args:
            flow_name: Name of a declared flow

        Returns:
            ExecutionResult holding each step's action result

        Raises:
            UnknownFlowError: If the flow was not declared
            ModeViolationError: If a step action returns an awaitable
            ExecutionError: If a step action raises
        """
        return self._run_blocking(self._flows.get(flow_name), operation="execute")

    async def execute_async(self, flow_name: str) -> ExecutionResult:
        """Run a flow with independent steps executed concurrently.

        Raises:
            UnknownFlowError: If the flow was not declared
            ExecutionError: If a step action raises
        """
        return await self._run_concurrent(self._flows.get(flow_name))

    def refresh(self) -> None:
        """Recompute every container in blocking mode.

        Containers are overwritten one at a time as their steps complete; if a
        step fails, earlier containers keep their new values and later ones
        keep their previous values.
        """
        self._refresh(operation="refresh")

    async def refresh_async(self) -> None:
        """Recompute every container, running independent steps concurrently."""
        await self._run_concurrent(self._build_flow)

    def _refresh(self, operation: str) -> None:
        self._run_blocking(self._build_flow, operation=operation)

    def _run_blocking(self, flow: FlowDefinition, operation: str) -> ExecutionResult:
        state = self._start_run(flow)

        for step_name in self._execution_order(flow):
            state.mark_status(step_name, StepStatus.RUNNING)
            try:
                result = self._invoke(flow, step_name, state)
            except Exception as e:
                raise self._fail(state, step_name, e) from e

            if is_awaitable(result):
                discard_awaitable(result)
                error = ModeViolationError(step_name, flow.name, operation=operation)
                state.add_error(step_name, str(error))
                self._logger.error(f"{flow.name}: {error}")
                raise error

            if flow.is_build:
                self.containers[step_name] = result
            state.record(step_name, result)
            self._log_transition(f"{flow.name}: step '{step_name}' completed")

        return self._finish(state)

    async def _run_concurrent(self, flow: FlowDefinition) -> ExecutionResult:
        state = self._start_run(flow)
        state.levels = compute_levels(flow.graph, self._execution_order(flow))

        for index, level in enumerate(state.levels):
            self._log_transition(f"{flow.name}: dispatching level {index} {level}")
            outcomes = await asyncio.gather(
                *(self._run_step_async(flow, step_name, state) for step_name in level),
                return_exceptions=True,
            )

            failure = None
            for step_name, outcome in zip(level, outcomes):
                # Anything but a (succeeded, value) pair escaped the step,
                # e.g. cancellation.
                if not isinstance(outcome, tuple):
                    raise outcome
                succeeded, value = outcome
                if succeeded:
                    state.record(step_name, value)
                    self._log_transition(f"{flow.name}: step '{step_name}' completed")
                elif failure is None:
                    failure = value
            if failure is not None:
                raise failure

        return self._finish(state)

    async def _run_step_async(
        self, flow: FlowDefinition, step_name: str, state: RunState
    ) -> Tuple[bool, Any]:
        # Results are recorded only after the whole level settles, so every
        # step of a level sees the same context.
        state.mark_status(step_name, StepStatus.RUNNING)
        try:
            result = self._invoke(flow, step_name, state)
            if is_awaitable(result):
                result = await result
        except Exception as e:
            error = self._fail(state, step_name, e)
            error.__cause__ = e
            return False, error

        if flow.is_build:
            self.containers[step_name] = result
        return True, result

    def _invoke(self, flow: FlowDefinition, step_name: str, state: RunState) -> Any:
        """Call the step implementation (build flow) or the flow action."""
        if flow.is_build:
            return self.steps[step_name].run(self.containers)

        if step_name not in self.containers:
            raise LookupError(f'Container for step "{step_name}" has not been built')
        return flow.steps[step_name].run(self.containers[step_name], state.snapshot_context())

    def _execution_order(self, flow: FlowDefinition) -> List[str]:
        graph_name = "base" if flow.is_build else flow.name
        return topological_sort(flow.graph, graph_name=graph_name)

    def _start_run(self, flow: FlowDefinition) -> RunState:
        self._log(
            VerbosityLevel.INFO,
            f"Starting {flow.kind.value} '{flow.name}' of {self.config.name} "
            f"({len(flow.steps)} steps)",
        )
        return RunState(flow=flow.name, kind=flow.kind)

    def _finish(self, state: RunState) -> ExecutionResult:
        result = state.complete()
        self._log(
            VerbosityLevel.INFO,
            f"Finished '{state.flow}' of {self.config.name} in {state.duration:.3f}s",
        )
        if self.config.logging.show_results:
            log_state(self._logger, result.results, prefix=f"{state.flow}.")
        return result

    def _fail(self, state: RunState, step_name: str, error: Exception) -> ExecutionError:
        state.add_error(step_name, str(error))
        message = f"{state.flow}: step '{step_name}' failed: {error}"
        running = state.get_running_steps()
        if running:
            message += f" (level siblings still running: {sorted(running)})"
        self._logger.error(message)
        return ExecutionError(step_name, error, flow=state.flow)

    def _log_transition(self, message: str) -> None:
        logging_config = self.config.logging
        if logging_config.show_transitions:
            if LogLevel.STEP >= logging_config.log_level:
                log_step(self._logger, message)
        elif VerbosityLevel.VERBOSE >= logging_config.log_level:
            log_verbose(self._logger, message)

    def _log(self, level: int, message: str) -> None:
        """Log ``message`` unless it is below the configured verbosity."""
        if level >= self.config.logging.log_level:
            self._logger.log(level, message)
