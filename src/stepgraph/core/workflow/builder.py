"""Builders for declaring workflows and flows.

Steps and flows are declared on a WorkflowBuilder, either through chained
calls or decorators, then ``build()`` / ``build_async()`` validates the
declarations and runs every step once to populate the containers.

Example (chained):
    ```python
    workflow = (
        WorkflowBuilder()
        .add_step("form", [], lambda deps: load_form())
        .define_flow("save")
        .add_step("form", [], lambda form, context: form.save())
        .end_flow()
        .build()
    )
    ```

Example (decorators):
    ```python
    builder = WorkflowBuilder()

    @builder.step("source")
    def source(deps):
        return Source()

    @builder.step("processor", ["source"])
    async def processor(deps):
        return await Processor.connect(deps["source"])

    workflow = await builder.build_async()
    ```
"""

from typing import Callable, Dict, Iterable, Optional

from stepgraph.core.config import WorkflowConfig
from stepgraph.core.errors import DuplicateStepError, MissingDependencyError
from stepgraph.core.graph import validate_workflow
from stepgraph.core.logging import LogComponent, get_logger
from stepgraph.core.workflow.base import WorkflowInstance
from stepgraph.core.workflow.flow import FlowDefinition, FlowRegistry, FlowStep
from stepgraph.core.workflow.step import FlowAction, Step, StepImplementation

logger = get_logger(LogComponent.BUILDER)


class FlowBuilder:
    """Declares the steps and actions of one flow."""

    def __init__(self, workflow_builder: "WorkflowBuilder", flow: FlowDefinition):
        self._workflow_builder = workflow_builder
        self._flow = flow

    @property
    def name(self) -> str:
        return self._flow.name

    def add_step(
        self,
        step_name: str,
        dependencies: Iterable[str] = (),
        action: Optional[FlowAction] = None,
    ) -> "FlowBuilder":
        """Add a workflow step to this flow.

        Dependencies are flow-local and must name steps of this same flow;
        that, and the step's existence in the workflow, is checked at build
        time.

        Args:
            step_name: Name of a workflow step
            dependencies: Flow steps whose results this action needs
            action: Callable (container, context) -> result

        Raises:
            DuplicateFlowStepError: If the step is already part of this flow
            ValueError: If no action is given
        """
        if action is None:
            raise ValueError(f"Flow step {step_name} in flow {self.name} needs an action")
        self._flow.add_step(FlowStep(name=step_name, dependencies=list(dependencies), action=action))
        logger.debug(f"Flow '{self.name}': added step '{step_name}' after {list(dependencies)}")
        return self

    def action(self, step_name: str, dependencies: Iterable[str] = ()) -> Callable[[FlowAction], FlowAction]:
        """Decorator form of ``add_step``.

        Example:
            @flow.action("processor", ["source"])
            def process(processor, context):
                return processor.process(context["source"])
        """
        def decorator(func: FlowAction) -> FlowAction:
            self.add_step(step_name, dependencies, func)
            return func
        return decorator

    def end_flow(self) -> "WorkflowBuilder":
        """Finish the flow and return to the workflow builder."""
        return self._workflow_builder


class WorkflowBuilder:
    """Collects step and flow declarations and builds workflow instances.

    Attributes:
        config: Configuration handed to built instances
    """

    def __init__(self, config: Optional[WorkflowConfig] = None):
        self.config = config or WorkflowConfig()
        self._steps: Dict[str, Step] = {}
        self._flows = FlowRegistry()

    @property
    def steps(self) -> Dict[str, Step]:
        return dict(self._steps)

    @property
    def flows(self) -> FlowRegistry:
        return self._flows

    def add_step(
        self,
        name: str,
        dependencies: Iterable[str] = (),
        implementation: Optional[StepImplementation] = None,
    ) -> "WorkflowBuilder":
        """Declare a step.

        Args:
            name: Unique step name
            dependencies: Previously declared steps this step reads
            implementation: Callable {dependency name -> container} -> value

        Raises:
            DuplicateStepError: If the name is already declared
            MissingDependencyError: If a dependency was not declared before
            ValueError: If no implementation is given
        """
        if name in self._steps:
            raise DuplicateStepError(name)

        dependencies = list(dependencies)
        for dep in dependencies:
            if dep not in self._steps:
                raise MissingDependencyError(name, dep)

        if implementation is None:
            raise ValueError(f"Step {name} needs an implementation")

        self._steps[name] = Step(name=name, dependencies=dependencies, implementation=implementation)
        logger.debug(f"Added step '{name}' depending on {dependencies}")
        return self

    def step(
        self,
        name: str,
        dependencies: Iterable[str] = (),
    ) -> Callable[[StepImplementation], StepImplementation]:
        """Decorator form of ``add_step``."""
        def decorator(func: StepImplementation) -> StepImplementation:
            self.add_step(name, dependencies, func)
            return func
        return decorator

    def define_flow(self, name: str) -> FlowBuilder:
        """Start declaring a named flow.

        Raises:
            DuplicateFlowError: If a flow with this name already exists
        """
        flow = self._flows.define(name)
        logger.debug(f"Defined flow '{name}'")
        return FlowBuilder(self, flow)

    def validate(self) -> None:
        """Validate the declared steps and every flow without running anything.

        Raises:
            DefinitionError: If the workflow or any flow is malformed
        """
        graph = {name: list(step.dependencies) for name, step in self._steps.items()}
        validate_workflow(graph, self._flows.as_dict().values())

    def build(self) -> WorkflowInstance:
        """Validate, then run every step once in blocking mode.

        Raises:
            DefinitionError: If the declarations are invalid
            ModeViolationError: If a step implementation returns an awaitable
            ExecutionError: If a step implementation raises
        """
        workflow = self._create_instance()
        workflow._refresh(operation="build")
        logger.info(f"Built {self.config.name} with {len(self._steps)} steps")
        return workflow

    async def build_async(self) -> WorkflowInstance:
        """Validate, then run every step once with independent steps concurrent.

        Raises:
            DefinitionError: If the declarations are invalid
            ExecutionError: If a step implementation raises
        """
        workflow = self._create_instance()
        await workflow.refresh_async()
        logger.info(f"Built {self.config.name} with {len(self._steps)} steps")
        return workflow

    def _create_instance(self) -> WorkflowInstance:
        # Instances copy the flows and validate themselves on construction.
        return WorkflowInstance(
            steps=self._steps,
            flows=self._flows,
            config=self.config,
        )
