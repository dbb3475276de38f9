"""Pydantic configuration models for opqueue.

This module defines the option models accepted by queues and registries.
For loading and merging logic, see loader.py.
"""

import json
from collections.abc import Callable
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

LogSink = Callable[..., Any]


class QueueOptions(BaseModel):
    """Construction options for an OperationQueue."""

    model_config = ConfigDict(populate_by_name=True)

    shift_error: bool = Field(
        default=False,
        validation_alias=AliasChoices("shift_error", "shiftError", "ignore_error", "ignoreError"),
        description="Never pass the error as first callback argument",
    )
    debug: bool = Field(default=False, description="Trace enqueue, completion, abort and drop events")
    namespace: str | None = Field(default=None, description="Name used in traces and the queue's textual identity")
    log: LogSink | Literal[False] | None = Field(
        default=None,
        description=(
            "Trace sink; None (or omitted) selects the default queue logger, "
            "only False disables tracing output"
        ),
    )
    logerr: LogSink | Literal[False] | None = Field(
        default=None,
        description=(
            "Error sink; None (or omitted) selects the default queue logger, "
            "only False disables error reporting"
        ),
    )

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str | None) -> str | None:
        """Treat blank namespaces as unset."""
        if v is not None and not v.strip():
            return None
        return v


class OperationOptions(BaseModel):
    """Per-enqueue options.

    Unknown keys are kept and shown in the debug summary of the operation.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = Field(default=None, description="Operation name used in traces")
    shift_error: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("shift_error", "shiftError", "ignore_error", "ignoreError"),
        description="Override the queue's shift_error for this operation",
    )

    def summary(self) -> str:
        """Compact JSON rendering of the explicitly provided options."""
        return json.dumps(self.model_dump(exclude_none=True), default=str, separators=(",", ":"))


class LoggingConfig(BaseModel):
    """Configuration for logging system."""

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    directory: str | None = Field(default=None, description="Directory for log files (console only when unset)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB before rotation")
    backup_count: int = Field(default=5, description="Number of backup log files to keep")


class Config(BaseModel):
    """Root configuration for opqueue."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    queue: QueueOptions = Field(default_factory=QueueOptions, description="Default options for registry queues")
    queues: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-key option overrides, merged over the defaults",
    )

    model_config = {"extra": "allow"}
