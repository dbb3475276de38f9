"""Runtime services for opqueue.

This package provides the per-target queue registry.
"""

from opqueue.runtime.registry import QueueRegistry

__all__ = ["QueueRegistry"]
