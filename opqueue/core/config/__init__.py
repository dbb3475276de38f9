"""Configuration package for opqueue.

This package provides Pydantic option models and loading utilities.
"""

from opqueue.core.config.loader import (
    check_unexpanded_vars,
    expand_env_vars,
    load_config,
    merge_options,
)
from opqueue.core.config.models import (
    Config,
    LoggingConfig,
    OperationOptions,
    QueueOptions,
)

__all__ = [
    # Models
    "Config",
    "LoggingConfig",
    "OperationOptions",
    "QueueOptions",
    # Loaders
    "check_unexpanded_vars",
    "expand_env_vars",
    "load_config",
    "merge_options",
]
