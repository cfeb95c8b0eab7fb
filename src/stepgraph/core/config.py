"""Workflow configuration.

Logging behavior can be overridden through environment variables, read
whenever a StepLoggingConfig is created:

    STEPGRAPH_LOG_LEVEL         DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL
    STEPGRAPH_SHOW_TRANSITIONS  log every step completion at STEP level
    STEPGRAPH_SHOW_RESULTS      log run results at DEBUG level

Invalid values fall back to the defaults. Explicit arguments take precedence
over the environment.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stepgraph.core.logging import VerbosityLevel


class StepLoggingConfig(BaseSettings):
    """Configuration for engine logging behavior."""
    log_level: VerbosityLevel = Field(default=VerbosityLevel.INFO)
    show_transitions: bool = Field(default=False)
    show_results: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="STEPGRAPH_",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_level_name(cls, value: Any) -> Any:
        """Accept level names such as ``debug`` besides numeric levels."""
        if isinstance(value, str):
            name = value.strip().upper()
            if name in VerbosityLevel.__members__:
                return VerbosityLevel[name]
            if name.isdigit():
                return int(name)
        return value

    @field_validator("log_level", "show_transitions", "show_results", mode="wrap")
    @classmethod
    def fall_back_to_default(cls, value: Any, handler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].default


class WorkflowConfig(BaseModel):
    """
    Configuration for a workflow instance.

    Attributes:
        name: Name used in log messages
        logging: Engine logging behavior
    """
    name: str = Field(default="workflow")
    logging: StepLoggingConfig = Field(default_factory=StepLoggingConfig)

    class Config:
        validate_assignment = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Workflow name must not be empty")
        return value
