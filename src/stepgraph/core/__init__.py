"""Core modules for stepgraph."""

from stepgraph.core.config import StepLoggingConfig, WorkflowConfig
from stepgraph.core.logging import configure_logging, get_logger, LogLevel, LogComponent
from stepgraph.core.workflow import WorkflowBuilder, WorkflowInstance

__all__ = [
    'WorkflowBuilder',
    'WorkflowInstance',
    'WorkflowConfig',
    'StepLoggingConfig',
    'configure_logging',
    'get_logger',
    'LogLevel',
    'LogComponent'
]
