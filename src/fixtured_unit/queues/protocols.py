"""Protocols for reading the state of a background work processor.

Both protocols return counts keyed by kind so a processor with several
queues (or several kinds of work unit) reports them separately. Either
method may be a coroutine; the drain waiter awaits the result when needed.
"""

from collections.abc import Awaitable, Mapping
from typing import Protocol, runtime_checkable

type Counts = Mapping[str, int]


@runtime_checkable
class QueueStateSource(Protocol):
    """Reports how many items are waiting in each queue (not yet started)."""

    def lengths(self) -> Counts | Awaitable[Counts]:
        """Return pending item counts keyed by queue kind."""
        ...


@runtime_checkable
class ProcessingStateSource(Protocol):
    """Reports how many items are being processed (started, not completed)."""

    def processing_counts(self) -> Counts | Awaitable[Counts]:
        """Return in-flight item counts keyed by work kind."""
        ...
