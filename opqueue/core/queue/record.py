"""Operation records and the completion continuation handed to operations."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from opqueue.core.queue.operation import OperationQueue

Callback = Callable[..., Any]


@dataclass
class OperationRecord:
    """A queued operation waiting for, or going through, dispatch.

    ``generation`` is the queue's drop generation when the record was created;
    a mismatch at dispatch time means the record was dropped.
    """

    operation: Callable[["Completion"], Any]
    future: asyncio.Future[Any]
    generation: int
    priority: int
    name: str
    shift_error: bool
    callback: Callback | None = None
    summary: str = ""
    run_id: int | None = None
    settled: bool = False
    task: asyncio.Future[Any] | None = None


class Completion:
    """Continuation passed to a running operation.

    Call it once as ``done(err, value)``: ``done()`` or ``done(None, value)`` for
    success, ``done(err)`` for failure. Repeated calls are ignored, and calls from
    another thread are handed over to the queue's event loop.
    """

    __slots__ = ("_queue", "_record")

    def __init__(self, queue: "OperationQueue", record: OperationRecord) -> None:
        self._queue = queue
        self._record = record

    @property
    def settled(self) -> bool:
        return self._record.settled

    def __call__(self, err: Any = None, value: Any = None) -> None:
        self._queue._complete(self._record, err, value)

    def __repr__(self) -> str:
        return f"<Completion {self._record.name} run={self._record.run_id}>"
