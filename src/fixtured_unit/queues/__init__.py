"""Background queue state and drain waiting."""

from fixtured_unit.queues.background import BackgroundQueue, QueuedWorker, QueueKind
from fixtured_unit.queues.configuration import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DrainConfiguration,
)
from fixtured_unit.queues.drain import DrainOutcome, DrainWaiter, QueueSnapshot
from fixtured_unit.queues.protocols import (
    Counts,
    ProcessingStateSource,
    QueueStateSource,
)
from fixtured_unit.queues.registration import add_background_queue

__all__ = [
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "BackgroundQueue",
    "Counts",
    "DrainConfiguration",
    "DrainOutcome",
    "DrainWaiter",
    "ProcessingStateSource",
    "QueueKind",
    "QueueSnapshot",
    "QueueStateSource",
    "QueuedWorker",
    "add_background_queue",
]
