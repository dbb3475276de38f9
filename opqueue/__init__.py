"""opqueue: serialize asynchronous operations on a stateful object."""

from opqueue.core.config import Config, OperationOptions, QueueOptions, load_config
from opqueue.core.errors import (
    AbortedError,
    CallbackError,
    DroppedError,
    OperationError,
    OperationQueueError,
)
from opqueue.core.logging import configure_logging, setup_logging
from opqueue.core.queue import Completion, OperationQueue
from opqueue.runtime.registry import QueueRegistry

__all__ = [
    "AbortedError",
    "CallbackError",
    "Completion",
    "Config",
    "configure_logging",
    "DroppedError",
    "OperationError",
    "OperationOptions",
    "OperationQueue",
    "OperationQueueError",
    "QueueOptions",
    "QueueRegistry",
    "load_config",
    "setup_logging",
]
