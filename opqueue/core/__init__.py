"""Core functionality for opqueue."""

from opqueue.core.config import Config, QueueOptions, load_config
from opqueue.core.errors import (
    AbortedError,
    CallbackError,
    DroppedError,
    OperationError,
    OperationQueueError,
)
from opqueue.core.queue import Completion, OperationQueue

__all__ = [
    "Config",
    "QueueOptions",
    "load_config",
    "AbortedError",
    "CallbackError",
    "DroppedError",
    "OperationError",
    "OperationQueueError",
    "Completion",
    "OperationQueue",
]
