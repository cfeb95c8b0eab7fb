"""Run state for the workflow engine.

This module provides:
1. StepStatus: An enumeration of step execution statuses
2. RunState: Per-run bookkeeping (context, results, statuses, errors)
3. ExecutionResult: What a successful run returns to the caller
"""

from typing import Dict, Any, List, Optional, Set
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field

from stepgraph.core.workflow.flow import ExecutionKind


class StepStatus(str, Enum):
    """Step execution status within one run."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


class RunState(BaseModel):
    """
    Transient state of a single flow run.

    Attributes:
        flow: Name of the flow being run
        kind: Whether the run is the build flow or a user flow
        context: Results produced so far, visible to later steps
        results: Results collected for the caller
        status: Execution status by step name
        errors: Error messages by step name
        levels: Concurrency levels, empty for blocking runs
        started_at: Time the run started
        updated_at: Time of last state modification
        completed_at: Time the run finished successfully
    """
    flow: str
    kind: ExecutionKind = Field(default=ExecutionKind.USER_FLOW)
    context: Dict[str, Any] = Field(default_factory=dict)
    results: Dict[str, Any] = Field(default_factory=dict)
    status: Dict[str, StepStatus] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    levels: List[List[str]] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = Field(default=None)

    def mark_status(self, step: str, status: StepStatus) -> None:
        """Mark a step's execution status."""
        self.status[step] = status
        self._update_timestamp()

    def record(self, step: str, value: Any) -> None:
        """Store a completed step's result in both context and results."""
        self.context[step] = value
        self.results[step] = value
        self.mark_status(step, StepStatus.COMPLETED)

    def add_error(self, step: str, error: str) -> None:
        """Add an error message for a step."""
        self.errors[step] = error
        self.mark_status(step, StepStatus.ERROR)

    def snapshot_context(self) -> Dict[str, Any]:
        """Copy of the context handed to a step's action."""
        return dict(self.context)

    def get_running_steps(self) -> Set[str]:
        """Get currently running steps."""
        return {
            step for step, status in self.status.items()
            if status == StepStatus.RUNNING
        }

    def complete(self) -> "ExecutionResult":
        """Close the run and build the caller-facing result."""
        self.completed_at = datetime.now()
        self._update_timestamp()
        return ExecutionResult(flow=self.flow, results=dict(self.results), success=True)

    @property
    def duration(self) -> float:
        """Seconds between start and last update."""
        return (self.updated_at - self.started_at).total_seconds()

    def _update_timestamp(self) -> None:
        """Update the last modified timestamp."""
        object.__setattr__(self, "updated_at", datetime.now())


class ExecutionResult(BaseModel):
    """Results of one successful flow run."""
    flow: str
    results: Dict[str, Any] = Field(default_factory=dict)
    success: bool = Field(default=True)

    def __getitem__(self, step: str) -> Any:
        return self.results[step]
