"""Error kinds raised and reported by the operation queue.

Every terminal failure a queue produces (an operation's own failure, an abort,
a drop) and every non-fatal callback failure is normalized into one of the
kinds below so callers can handle them uniformly.
"""

import traceback
from typing import Any


class OperationQueueError(Exception):
    """Base class for queue errors.

    Attributes:
        message: Human-readable description.
        cause: The raw failure value this error was built from, if any.
        stack: Formatted traceback of the cause, if it carried one.
        kind: Fixed tag identifying the error kind.
    """

    kind = "queue"
    default_message = "Unknown Error"

    def __init__(
        self,
        message: str | None = None,
        cause: Any = None,
        stack: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.cause = cause
        self.stack = stack
        super().__init__(self.message)
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    @classmethod
    def normalize(cls, raw: Any = None) -> "OperationQueueError":
        """Convert a raw failure value into an error of this kind.

        Args:
            raw: A string, an exception, an object with a ``message`` attribute,
                or None.

        Returns:
            ``raw`` unchanged if it already is an instance of ``cls``, otherwise a
            new ``cls`` instance carrying the message, cause and stack of ``raw``.
        """
        if isinstance(raw, cls):
            return raw
        if raw is None:
            return cls()
        if isinstance(raw, str):
            return cls(raw)
        if isinstance(raw, BaseException):
            stack = None
            if raw.__traceback__ is not None:
                stack = "".join(traceback.format_exception(type(raw), raw, raw.__traceback__))
            return cls(str(raw) or type(raw).__name__, cause=raw, stack=stack)

        message = getattr(raw, "message", None)
        if isinstance(message, str) and message:
            return cls(message, cause=raw)
        return cls(cause=raw)

    def copy(self) -> "OperationQueueError":
        """Fresh error of the same kind, message, cause and stack, without a traceback."""
        return type(self)(self.message, cause=self.cause, stack=self.stack)

    def __str__(self) -> str:
        return f"[OperationQueueError] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary of the error."""
        return {
            "kind": self.kind,
            "name": type(self).__name__,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
            "stack": self.stack,
        }


class OperationError(OperationQueueError):
    """An operation reported a failure or raised while being invoked."""

    kind = "operation"


class AbortedError(OperationQueueError):
    """The queue was aborted before the operation could run."""

    kind = "aborted"
    default_message = "operation queue aborted"


class DroppedError(OperationQueueError):
    """The operation was pending when the queue was dropped."""

    kind = "dropped"
    default_message = "operation dropped"


class CallbackError(OperationQueueError):
    """A completion callback raised. Reported to the error sink only."""

    kind = "callback"
