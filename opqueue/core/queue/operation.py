"""Operation queue serializing state-mutating work on a single target object.

When the operations that can run on an object depend on that object's state,
queueing them keeps the state consistent: an operation that checks the state
before it starts is guaranteed the state stays the same until it completes,
because no other operation of the same queue runs in between.

Records move through two states:
 * pending - queued, waiting for the records ahead of it to complete
 * running - dispatched; holds the queue until its continuation is called
"""

import asyncio
import inspect
import logging
import threading
from collections import deque
from collections.abc import Callable, Mapping
from typing import Any

from opqueue.core.config.models import OperationOptions, QueueOptions
from opqueue.core.errors import (
    AbortedError,
    CallbackError,
    DroppedError,
    OperationError,
    OperationQueueError,
)
from opqueue.core.logging import default_log_sink, default_logerr_sink
from opqueue.core.queue.record import Callback, Completion, OperationRecord

logger = logging.getLogger(__name__)

Operation = Callable[[Completion], Any]


def _resolve_options(options: QueueOptions | Mapping[str, Any] | None, overrides: dict[str, Any]) -> QueueOptions:
    """Build QueueOptions from a model or mapping plus keyword overrides."""
    if options is None:
        resolved = QueueOptions()
    elif isinstance(options, QueueOptions):
        resolved = options
    else:
        resolved = QueueOptions.model_validate(dict(options))

    if overrides:
        extra = QueueOptions.model_validate(overrides)
        resolved = resolved.model_copy(update=extra.model_dump(exclude_unset=True))
    return resolved


class OperationQueue:
    """Mutual-exclusion gate over a sequence of asynchronous operations.

    An operation is a callable taking one argument, a :class:`Completion`. It
    must call that continuation exactly once when done. It may return an
    awaitable, which is then run as a task on the queue's event loop; an
    exception escaping it fails the operation.

    Every enqueue returns an :class:`asyncio.Future` settled with the operation's
    value or with an :class:`OperationQueueError`. The optional per-enqueue
    callback receives ``(err, value)``, or ``(value)`` in shift-error mode.

    The queue binds to the running event loop on first enqueue.
    """

    def __init__(self, options: QueueOptions | Mapping[str, Any] | None = None, **overrides: Any) -> None:
        """Initialize the queue.

        Args:
            options: QueueOptions or a mapping of its fields (camelCase aliases accepted).
            **overrides: Individual options taking precedence over ``options``.
        """
        opts = _resolve_options(options, overrides)

        self.busy = False  # an operation is running
        self.current = 1  # run id of the latest dispatched record

        self.aborted = False
        self.abort_error: AbortedError | None = None

        # Drop generation. Each record keeps the value it was created with and
        # compares it on dispatch, so drop() never has to touch the deque.
        self.dropped = 0
        self.drop_error: DroppedError | None = None

        self.operations: deque[OperationRecord] = deque()

        self.namespace = opts.namespace
        self.shift_error = opts.shift_error
        self.debug = opts.debug
        self.log = self._resolve_sink(opts.log, default_log_sink)
        self.logerr = self._resolve_sink(opts.logerr, default_logerr_sink)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread: int | None = None

    def _resolve_sink(self, sink: Any, factory: Callable[[str | None], Callable[[Any], None]]) -> Callable[[Any], Any] | None:
        if sink is False:
            return None
        if sink is None:
            return factory(self.namespace)
        return sink

    def __str__(self) -> str:
        return "[OperationQueue" + (f":{self.namespace}" if self.namespace else "") + "]"

    def __repr__(self) -> str:
        return f"<OperationQueue namespace={self.namespace!r} pending={len(self.operations)} busy={self.busy}>"

    @property
    def pending(self) -> int:
        """Number of records waiting for dispatch."""
        return len(self.operations)

    def get_stats(self) -> dict[str, Any]:
        """Get current queue statistics."""
        return {
            "pending": len(self.operations),
            "busy": self.busy,
            "aborted": self.aborted,
            "dropped": self.dropped,
            "invocations": self.current - 1,
        }

    # ------------------------------------------------------------------
    # Enqueue
    # ------------------------------------------------------------------

    def queue(
        self,
        operation: Operation,
        options: OperationOptions | Mapping[str, Any] | Callback | None = None,
        callback: Callback | int | None = None,
        priority: int | None = None,
    ) -> asyncio.Future[Any]:
        """Queue an operation at the given priority.

        Args:
            operation: Callable receiving the completion continuation.
            options: Per-operation options, or the callback if callable.
            callback: Completion callback, or the priority when ``options`` was
                the callback.
            priority: Insertion index, clamped to the pending range. Defaults to
                the tail.

        Returns:
            Future settled with the operation's outcome.

        Raises:
            TypeError: If ``operation`` is not callable, or ``priority`` is a bool.
            RuntimeError: If called outside the event loop this queue is bound to.
        """
        if callable(options) and not isinstance(options, (Mapping, OperationOptions)):
            if priority is None and isinstance(callback, int):
                priority = callback
            callback, options = options, None
        elif isinstance(callback, int):
            raise TypeError("callback must be callable")

        if isinstance(priority, bool):
            raise TypeError("priority must be an int, not bool")

        if not callable(operation):
            raise TypeError(f"operation must be callable, got {type(operation).__name__}")

        loop = self._bind_loop()

        if options is None:
            opts = OperationOptions()
        elif isinstance(options, OperationOptions):
            opts = options
        else:
            opts = OperationOptions.model_validate(dict(options))

        size = len(self.operations)
        index = size if priority is None else max(min(priority, size), 0)

        record = OperationRecord(
            operation=operation,
            future=loop.create_future(),
            generation=self.dropped,
            priority=index,
            name=opts.name or getattr(operation, "__name__", None) or "anonymous operation",
            shift_error=self.shift_error if opts.shift_error is None else opts.shift_error,
            callback=callback,
            summary=opts.summary() if options is not None else "",
        )

        if self.debug:
            self._trace(f"{self} queued({index}) {record.summary}: {record.name}")

        self.operations.insert(index, record)
        loop.call_soon(self._shift)
        return record.future

    def push(
        self,
        operation: Operation,
        options: OperationOptions | Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> asyncio.Future[Any]:
        """Queue an operation after every pending one."""
        return self.queue(operation, options, callback)

    def unshift(
        self,
        operation: Operation,
        options: OperationOptions | Mapping[str, Any] | Callback | None = None,
        callback: Callback | None = None,
    ) -> asyncio.Future[Any]:
        """Queue an operation ahead of every pending one."""
        return self.queue(operation, options, callback, 0)

    def run(
        self,
        func: Callable[..., Any],
        *args: Any,
        options: OperationOptions | Mapping[str, Any] | None = None,
        callback: Callback | None = None,
        priority: int | None = None,
        **kwargs: Any,
    ) -> asyncio.Future[Any]:
        """Queue ``func(*args, **kwargs)`` as an operation.

        The result (awaited when it is awaitable) completes the operation and an
        exception fails it, so ``func`` never deals with the continuation.
        """

        def operation(done: Completion) -> Any:
            async def runner() -> None:
                try:
                    result = func(*args, **kwargs)
                    if inspect.isawaitable(result):
                        result = await result
                except Exception as e:
                    done(e)
                    return
                done(None, result)

            return runner()

        operation.__name__ = getattr(func, "__name__", "anonymous operation")
        return self.queue(operation, options, callback, priority)

    # ------------------------------------------------------------------
    # Interruption
    # ------------------------------------------------------------------

    def abort(self, error: Any = None) -> None:
        """Abort all pending and future operations.

        The running operation, if any, is left to complete on its own.
        Called from another thread, the abort is handed to the queue's event
        loop and takes effect there.

        Args:
            error: Raw failure value passed, wrapped in AbortedError, to every
                record dispatched from now on.
        """
        if self._on_foreign_thread():
            self._loop.call_soon_threadsafe(self.abort, error)
            return

        # abort_error must be in place before aborted is set.
        self.abort_error = AbortedError.normalize(error)
        self.aborted = True
        if self.debug:
            self._trace(f"{self} aborted: {self.abort_error}")

    def drop(self, error: Any = None) -> None:
        """Abort the pending operations, but accept future ones.

        The running operation, if any, is left to complete on its own.
        Called from another thread, the drop is handed to the queue's event
        loop and takes effect there.

        Args:
            error: Raw failure value passed, wrapped in DroppedError, to every
                record that was pending at the time of the call.
        """
        if self._on_foreign_thread():
            self._loop.call_soon_threadsafe(self.drop, error)
            return

        self.drop_error = DroppedError.normalize(error)
        self.dropped += 1
        if self.debug:
            self._trace(f"{self} dropped ({self.dropped}): {self.drop_error}")

    # ------------------------------------------------------------------
    # Dispatch and completion
    # ------------------------------------------------------------------

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.get_running_loop()
        if self._loop is None:
            self._loop = loop
            self._loop_thread = threading.get_ident()
        elif self._loop is not loop:
            raise RuntimeError(f"{self} is bound to a different event loop")
        return loop

    def _on_foreign_thread(self) -> bool:
        return self._loop is not None and threading.get_ident() != self._loop_thread

    def _shift(self) -> None:
        if self.busy or not self.operations:
            return

        record = self.operations.popleft()
        self.busy = True
        self.current += 1
        record.run_id = self.current
        done = Completion(self, record)

        if self.aborted:
            done(self.abort_error.copy())
        elif record.generation != self.dropped:
            done(self.drop_error.copy())
        else:
            self._invoke(record, done)

    def _invoke(self, record: OperationRecord, done: Completion) -> None:
        try:
            result = record.operation(done)
        except Exception as e:
            self._report(OperationError.normalize(e))
            done(e)
            return

        if inspect.isawaitable(result):
            record.task = asyncio.ensure_future(result)
            record.task.add_done_callback(lambda task: self._on_task_done(task, done))

    def _on_task_done(self, task: asyncio.Future[Any], done: Completion) -> None:
        if task.cancelled():
            done(asyncio.CancelledError())
            return
        exc = task.exception()
        if exc is not None:
            self._report(OperationError.normalize(exc))
            done(exc)

    def _complete(self, record: OperationRecord, err: Any, value: Any) -> None:
        if self._on_foreign_thread():
            self._loop.call_soon_threadsafe(self._complete, record, err, value)
            return

        if record.settled:
            if self.debug:
                self._trace(f"{self} ignored repeated completion: {record.name}")
            return
        record.settled = True

        error: OperationQueueError | None = None
        if err is not None:
            error = err if isinstance(err, OperationQueueError) else OperationError.normalize(err)

        if self.debug:
            args = f"({value})" if record.shift_error else f"({error}, {value})"
            self._trace(f"{self} completed {record.summary}: {record.name}: {args}")

        if record.callback is not None:
            if record.shift_error:
                self._call(record.callback, value)
            else:
                self._call(record.callback, error, value)

        if not record.future.done():
            if error is not None:
                record.future.set_exception(error)
            else:
                record.future.set_result(value)

        # Only the most recently dispatched record may release the gate.
        if record.run_id == self.current:
            self.busy = False
            if self._loop is not None:
                self._loop.call_soon(self._shift)

    def _call(self, callback: Callback, *args: Any) -> None:
        try:
            callback(*args)
        except Exception as e:
            self._report(CallbackError.normalize(e))

    def _trace(self, message: str) -> None:
        if self.log is None:
            return
        try:
            self.log(message)
        except Exception as e:
            self._report(CallbackError.normalize(e))

    def _report(self, error: OperationQueueError) -> None:
        if self.logerr is None:
            return
        try:
            self.logerr(error)
        except Exception:
            logger.exception(f"{self} error sink failed while reporting: {error}")
