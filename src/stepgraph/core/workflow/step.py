"""Step definition for the workflow system.

A Step is a named unit of computation. It declares the steps it depends on
and an implementation that receives the container values of those
dependencies and returns the step's own container value:

    Step(
        name="report",
        dependencies=["totals"],
        implementation=lambda deps: {"total": deps["totals"]},
    )

Implementations may be plain functions or coroutine functions. Returning an
awaitable is only allowed when the workflow runs in concurrent mode.
"""

import inspect
from typing import Any, Callable, Dict, List

from pydantic import BaseModel, Field, model_validator

StepImplementation = Callable[[Dict[str, Any]], Any]
FlowAction = Callable[[Any, Dict[str, Any]], Any]


def is_awaitable(obj: Any) -> bool:
    """Return True for coroutines, futures and other awaitable objects."""
    return inspect.isawaitable(obj)


def discard_awaitable(obj: Any) -> None:
    """Close an awaitable that will never be awaited."""
    close = getattr(obj, "close", None)
    if inspect.iscoroutine(obj) and callable(close):
        close()
    elif hasattr(obj, "cancel"):
        obj.cancel()


class Step(BaseModel):
    """
    Immutable step declaration.

    Attributes:
        name: Unique step identifier
        dependencies: Names of the steps whose containers feed this step, in
            declaration order; a name listed twice is fed once
        implementation: Callable mapping {dependency name -> container value}
            to this step's container value
    """
    name: str = Field(..., description="Unique identifier for this step")
    dependencies: List[str] = Field(default_factory=list)
    implementation: StepImplementation

    class Config:
        frozen = True

    @model_validator(mode='after')
    def validate_step(self) -> 'Step':
        """Validate step configuration."""
        if not self.name:
            raise ValueError("Step must have a name")
        if self.name in self.dependencies:
            raise ValueError(f"Step {self.name} cannot depend on itself")
        return self

    def gather_inputs(self, containers: Dict[str, Any]) -> Dict[str, Any]:
        """Collect the container values of this step's dependencies."""
        return {dep: containers.get(dep) for dep in self.dependencies}

    def run(self, containers: Dict[str, Any]) -> Any:
        """Invoke the implementation; the result may be an awaitable."""
        return self.implementation(self.gather_inputs(containers))
