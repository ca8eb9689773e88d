"""Queue-drain synchronisation for tests.

DrainWaiter blocks a test until a background processor reports no pending
and no in-flight work. The processor is sampled by polling rather than by
subscribing to completion events: several independent producers and
consumers report their counts separately, and a poll loop gives one join
point however many kinds of work exist.

Typical usage::

    waiter = DrainWaiter(queue, worker, logger=logger)
    queue.enqueue(send_welcome_email)
    outcome = await waiter.wait_until_empty()
    assert outcome is DrainOutcome.DRAINED
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from fixtured_unit.errors import InvariantViolationError
from fixtured_unit.queues.configuration import DrainConfiguration
from fixtured_unit.queues.protocols import ProcessingStateSource, QueueStateSource


class DrainOutcome(StrEnum):
    """Result of waiting for a background queue to drain."""

    DRAINED = "drained"
    CANCELLED = "cancelled"


def _validated_counts(counts: Mapping[str, int], label: str) -> dict[str, int]:
    """Copy a counts mapping, rejecting anything that is not a count."""
    validated: dict[str, int] = {}
    for kind, count in counts.items():
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvariantViolationError(
                f"{label} count for '{kind}' is not an integer: {count!r}",
                operation="wait",
            )
        if count < 0:
            raise InvariantViolationError(
                f"{label} count for '{kind}' is negative: {count}",
                operation="wait",
            )
        validated[kind] = count
    return validated


@dataclass(frozen=True, slots=True)
class QueueSnapshot:
    """Point-in-time view of pending and in-flight work, keyed by kind.

    Construction fails with InvariantViolationError when a collaborator
    reports a negative or non-integer count. Counts are never clamped.
    """

    pending_by_kind: dict[str, int] = field(default_factory=dict)
    processing_by_kind: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "pending_by_kind", _validated_counts(self.pending_by_kind, "Pending")
        )
        object.__setattr__(
            self,
            "processing_by_kind",
            _validated_counts(self.processing_by_kind, "Processing"),
        )

    @property
    def pending_count(self) -> int:
        """Items waiting in any queue."""
        return sum(self.pending_by_kind.values())

    @property
    def processing_count(self) -> int:
        """Items started but not yet completed."""
        return sum(self.processing_by_kind.values())

    @property
    def is_empty(self) -> bool:
        """Whether nothing is pending and nothing is processing."""
        return self.pending_count == 0 and self.processing_count == 0


async def _read_counts(result: object) -> Mapping[str, int]:
    if inspect.isawaitable(result):
        result = await result
    if not isinstance(result, Mapping):
        raise InvariantViolationError(
            f"State source returned {type(result).__name__}, expected a mapping of counts",
            operation="wait",
        )
    return result


class DrainWaiter:
    """Polls queue and processing state until every count reaches zero."""

    def __init__(
        self,
        queue_source: QueueStateSource,
        processing_source: ProcessingStateSource,
        configuration: DrainConfiguration | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialise the waiter.

        Args:
            queue_source: Reports pending counts per queue kind.
            processing_source: Reports in-flight counts per work kind.
            configuration: Polling policy (default interval 500ms).
            logger: Logger for per-iteration diagnostics; defaults to this
                module's logger.

        """
        self._queue_source = queue_source
        self._processing_source = processing_source
        self._configuration = configuration or DrainConfiguration()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def configuration(self) -> DrainConfiguration:
        """Polling policy in use."""
        return self._configuration

    async def sample(self) -> QueueSnapshot:
        """Read both state sources once.

        Raises:
            InvariantViolationError: If a source reports an impossible count.

        """
        pending = await _read_counts(self._queue_source.lengths())
        processing = await _read_counts(self._processing_source.processing_counts())
        return QueueSnapshot(dict(pending), dict(processing))

    async def wait_until_empty(
        self, cancel: asyncio.Event | None = None
    ) -> DrainOutcome:
        """Wait until no work is pending or processing.

        The state is re-sampled after every delay; an earlier snapshot is
        never reused. Without a cancel event this waits for as long as work
        remains.

        Args:
            cancel: Optional event that aborts the wait when set. It is
                observed during each delay, so cancellation takes effect
                within one polling interval.

        Returns:
            DrainOutcome.DRAINED once every count is zero, or
            DrainOutcome.CANCELLED if the cancel event fired first.

        Raises:
            InvariantViolationError: If a source reports an impossible count.
            Exception: Whatever a state source raises, unchanged.

        """
        interval = self._configuration.poll_interval_seconds
        polls = 0

        while True:
            if cancel is not None and cancel.is_set():
                self._logger.debug(
                    "Wait for background queue cancelled after %d poll(s)", polls
                )
                return DrainOutcome.CANCELLED

            snapshot = await self.sample()
            polls += 1

            if snapshot.is_empty:
                self._logger.debug("Background queue is empty; continuing")
                return DrainOutcome.DRAINED

            self._logger.debug(
                "Waiting %dms for background queue to empty "
                "(pending=%d, processing=%d)...",
                self._configuration.poll_interval_ms,
                snapshot.pending_count,
                snapshot.processing_count,
            )

            if await self._delay(interval, cancel):
                self._logger.debug(
                    "Wait for background queue cancelled after %d poll(s)", polls
                )
                return DrainOutcome.CANCELLED

    @staticmethod
    async def _delay(interval: float, cancel: asyncio.Event | None) -> bool:
        """Sleep for one interval; return True if cancelled meanwhile."""
        if cancel is None:
            await asyncio.sleep(interval)
            return False
        try:
            await asyncio.wait_for(cancel.wait(), timeout=interval)
        except TimeoutError:
            return False
        return True
