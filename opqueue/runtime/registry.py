"""Registry keeping one operation queue per target object."""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from opqueue.core.config.loader import merge_options
from opqueue.core.config.models import Config, QueueOptions
from opqueue.core.queue.operation import OperationQueue

logger = logging.getLogger(__name__)


class QueueRegistry:
    """Hands out one OperationQueue per key.

    Handles:
    - Lazy creation with shared default options and the key as namespace
    - Per-key option overrides
    - Aborting or dropping every queue at once (e.g., on shutdown or reset)
    """

    def __init__(
        self,
        defaults: QueueOptions | Mapping[str, Any] | None = None,
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ):
        """Initialize the registry.

        Args:
            defaults: Options applied to every queue created by the registry.
            overrides: Per-key options merged over ``defaults``.
        """
        if isinstance(defaults, QueueOptions):
            self._defaults: dict[str, Any] = defaults.model_dump(exclude_unset=True)
        else:
            self._defaults = QueueOptions.model_validate(dict(defaults or {})).model_dump(exclude_unset=True)
        self._overrides = {key: dict(value) for key, value in (overrides or {}).items()}
        self._queues: dict[str, OperationQueue] = {}

    @classmethod
    def from_config(cls, config: Config) -> "QueueRegistry":
        """Build a registry from the ``queue`` and ``queues`` config sections."""
        return cls(defaults=config.queue, overrides=config.queues)

    def options_for(self, key: str) -> QueueOptions:
        """Resolve the options a queue for ``key`` is created with."""
        data = merge_options(self._defaults, {"namespace": key})
        override = self._overrides.get(key)
        if override:
            data = merge_options(data, QueueOptions.model_validate(override).model_dump(exclude_unset=True))
        return QueueOptions.model_validate(data)

    def get(self, key: str) -> OperationQueue:
        """Get or create the queue for a key."""
        queue = self._queues.get(key)
        if queue is None:
            queue = OperationQueue(self.options_for(key))
            self._queues[key] = queue
            logger.debug(f"Created operation queue {queue}")
        return queue

    def remove(self, key: str, error: Any = None) -> OperationQueue | None:
        """Abort and forget the queue for a key.

        Returns:
            The removed queue, or None if the key was unknown.
        """
        queue = self._queues.pop(key, None)
        if queue is not None:
            queue.abort(error)
            logger.debug(f"Removed operation queue {queue}")
        return queue

    def abort_all(self, error: Any = None) -> None:
        """Abort every registered queue."""
        for queue in self._queues.values():
            queue.abort(error)
        logger.info(f"Aborted {len(self._queues)} operation queue(s)")

    def drop_all(self, error: Any = None) -> None:
        """Drop pending operations of every registered queue."""
        for queue in self._queues.values():
            queue.drop(error)
        logger.info(f"Dropped pending operations of {len(self._queues)} operation queue(s)")

    def keys(self) -> list[str]:
        return list(self._queues)

    def __contains__(self, key: object) -> bool:
        return key in self._queues

    def __len__(self) -> int:
        return len(self._queues)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._queues))

    def get_stats(self) -> dict[str, dict[str, Any]]:
        """Get current statistics for every registered queue."""
        return {key: queue.get_stats() for key, queue in self._queues.items()}
