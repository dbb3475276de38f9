"""Tests for queue error kinds and normalization."""

from opqueue.core.errors import (
    AbortedError,
    CallbackError,
    DroppedError,
    OperationError,
    OperationQueueError,
)


class TestNormalize:
    """Raw failure values become queue errors."""

    def test_string(self):
        """Strings become the message."""
        err = OperationError.normalize("went wrong")
        assert err.message == "went wrong"
        assert err.cause is None
        assert err.stack is None

    def test_exception_keeps_cause(self):
        """Exceptions are kept as cause and chained."""
        cause = ValueError("bad value")
        err = DroppedError.normalize(cause)
        assert err.message == "bad value"
        assert err.cause is cause
        assert err.__cause__ is cause

    def test_raised_exception_captures_stack(self):
        """A raised exception contributes its formatted traceback."""
        try:
            raise RuntimeError("raised")
        except RuntimeError as e:
            err = OperationError.normalize(e)

        assert err.stack is not None
        assert "RuntimeError: raised" in err.stack

    def test_exception_without_message_uses_type_name(self):
        """Empty exception messages fall back to the exception type."""
        err = OperationError.normalize(KeyboardInterrupt())
        assert err.message == "KeyboardInterrupt"

    def test_object_with_message_attribute(self):
        """Objects carrying a message attribute contribute it."""

        class Failure:
            message = "custom failure"

        err = AbortedError.normalize(Failure())
        assert err.message == "custom failure"

    def test_unknown_value(self):
        """Unrecognized values get the default message."""
        assert OperationError.normalize(42).message == "Unknown Error"
        assert OperationError.normalize(42).cause == 42

    def test_none_uses_kind_default(self):
        """None yields the kind's default message."""
        assert AbortedError.normalize().message == "operation queue aborted"
        assert DroppedError.normalize(None).message == "operation dropped"
        assert OperationError.normalize(None).message == "Unknown Error"

    def test_same_kind_passes_through(self):
        """Errors already of the requested kind are returned unchanged."""
        original = AbortedError("already")
        assert AbortedError.normalize(original) is original

    def test_other_kind_is_wrapped(self):
        """Errors of another kind become the cause of the new one."""
        original = AbortedError("aborted")
        err = DroppedError.normalize(original)
        assert isinstance(err, DroppedError)
        assert err.cause is original


class TestErrorShape:
    """Rendering and serialization."""

    def test_hierarchy(self):
        """Every kind derives from OperationQueueError."""
        for kind in (OperationError, AbortedError, DroppedError, CallbackError):
            assert issubclass(kind, OperationQueueError)
            assert issubclass(kind, Exception)

    def test_kind_tags(self):
        """Each kind has a fixed tag."""
        assert OperationError.kind == "operation"
        assert AbortedError.kind == "aborted"
        assert DroppedError.kind == "dropped"
        assert CallbackError.kind == "callback"

    def test_str(self):
        """String form carries the queue error prefix."""
        assert str(OperationError("x")) == "[OperationQueueError] x"

    def test_to_dict(self):
        """to_dict() exposes message, kind and cause."""
        data = DroppedError.normalize(ValueError("reset")).to_dict()
        assert data["kind"] == "dropped"
        assert data["name"] == "DroppedError"
        assert data["message"] == "reset"
        assert data["cause"] == "ValueError('reset')"
        assert data["stack"] is None

    def test_copy(self):
        """copy() keeps kind, message, cause and stack but not the traceback."""
        cause = ValueError("reset")
        try:
            raise DroppedError.normalize(cause)
        except DroppedError as e:
            original = e

        duplicate = original.copy()

        assert type(duplicate) is DroppedError
        assert duplicate is not original
        assert duplicate.message == original.message
        assert duplicate.cause is cause
        assert duplicate.__cause__ is cause
        assert duplicate.stack == original.stack
        assert original.__traceback__ is not None
        assert duplicate.__traceback__ is None
