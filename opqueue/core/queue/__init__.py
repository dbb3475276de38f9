"""Operation queue core.

Provides the serializing scheduler and its record/completion protocol.
"""

from opqueue.core.queue.operation import OperationQueue
from opqueue.core.queue.record import Completion, OperationRecord

__all__ = ["Completion", "OperationQueue", "OperationRecord"]
