"""Error taxonomy for workflow definition and execution.

Definition errors are raised eagerly, while steps and flows are declared or
while a workflow is validated at build time. They never surface during a run.

Execution errors are raised while a flow runs: ``ExecutionError`` wraps the
failure of a step implementation or flow action, ``ModeViolationError``
reports an awaitable produced during blocking execution and
``UnknownFlowError`` reports a flow name that was never declared.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for every error raised by stepgraph."""


class DefinitionError(WorkflowError, ValueError):
    """A step, flow or dependency graph is malformed."""


class DuplicateStepError(DefinitionError):
    """A step name was declared twice."""

    def __init__(self, step: str, message: Optional[str] = None):
        self.step = step
        super().__init__(message or f'Step "{step}" already exists')


class DuplicateFlowStepError(DuplicateStepError):
    """A step was added twice to the same flow."""

    def __init__(self, flow: str, step: str):
        self.flow = flow
        super().__init__(step, f'Flow step "{step}" already exists in flow "{flow}"')


class DuplicateFlowError(DefinitionError):
    """A flow name was declared twice."""

    def __init__(self, flow: str):
        self.flow = flow
        super().__init__(f'Flow "{flow}" already exists')


class MissingDependencyError(DefinitionError):
    """A dependency names a step that does not exist."""

    def __init__(self, step: str, dependency: str, flow: Optional[str] = None):
        self.step = step
        self.dependency = dependency
        self.flow = flow
        if flow is None:
            message = f'Dependency "{dependency}" does not exist for step "{step}"'
        else:
            message = (
                f'Flow "{flow}" step "{step}" depends on "{dependency}" '
                f"which does not exist in the main workflow"
            )
        super().__init__(message)


class UnknownStepError(DefinitionError):
    """A step name does not resolve to a declared step."""

    def __init__(self, step: str, message: Optional[str] = None):
        self.step = step
        super().__init__(message or f'Step "{step}" does not exist')


class UnknownStepInFlowError(UnknownStepError):
    """A flow references a step missing from the main workflow."""

    def __init__(self, flow: str, step: str):
        self.flow = flow
        super().__init__(
            step,
            f'Flow "{flow}" references step "{step}" which does not exist in the main workflow',
        )


class FlowScopeError(DefinitionError):
    """A flow step depends on a step that is not part of the same flow."""

    def __init__(self, flow: str, step: str, dependency: str):
        self.flow = flow
        self.step = step
        self.dependency = dependency
        super().__init__(
            f'Flow "{flow}" step "{step}" depends on "{dependency}" which is not part of this flow'
        )


class CycleError(DefinitionError):
    """A dependency graph contains a cycle.

    ``graph`` is ``"base"`` for the main dependency graph or the name of the
    flow whose local graph is cyclic.
    """

    def __init__(self, graph: str = "base", node: Optional[str] = None):
        self.graph = graph
        self.node = node
        where = "workflow" if graph == "base" else f'flow "{graph}"'
        message = f"Circular dependency detected in {where}"
        if node is not None:
            message += f' at step "{node}"'
        super().__init__(message)


class ExecutionError(WorkflowError, RuntimeError):
    """A step implementation or flow action raised during a run."""

    def __init__(self, step: str, cause: BaseException, flow: Optional[str] = None):
        self.step = step
        self.flow = flow
        self.original_error = cause
        super().__init__(f'Step "{step}" failed: {cause}')


class ModeViolationError(WorkflowError, RuntimeError):
    """An awaitable was produced while executing in blocking mode."""

    def __init__(self, step: str, flow: Optional[str] = None, operation: str = "execute"):
        self.step = step
        self.flow = flow
        self.operation = operation
        subject = f'Flow action for "{step}"' if operation == "execute" else f'Step "{step}"'
        super().__init__(
            f"{subject} returned an awaitable, but {operation} requires synchronous "
            f"execution. Use {operation}_async instead."
        )


class UnknownFlowError(WorkflowError, LookupError):
    """A flow name was not declared."""

    def __init__(self, flow: str):
        self.flow = flow
        super().__init__(f'Flow "{flow}" does not exist')
