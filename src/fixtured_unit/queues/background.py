"""In-process background work queue and the worker that drains it.

BackgroundQueue holds work that has not started yet; QueuedWorker takes
items off it and runs them. Together they implement QueueStateSource and
ProcessingStateSource, so a test can enqueue work through application
services and then wait for it with DrainWaiter.

Two kinds of work are supported:

- ``"async"``: zero-argument coroutine functions, awaited on the event loop
- ``"blocking"``: zero-argument callables, run in a worker thread via
  ``asyncio.to_thread`` so they never block the loop
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any, Literal, Self

from fixtured_unit.errors import BackgroundWorkerError

logger = logging.getLogger(__name__)

type QueueKind = Literal["async", "blocking"]
type AsyncWork = Callable[[], Awaitable[Any]]
type BlockingWork = Callable[[], Any]

QUEUE_KINDS: tuple[QueueKind, ...] = ("async", "blocking")


class BackgroundQueue:
    """Unbounded FIFO queues of pending work, one per kind."""

    def __init__(self) -> None:
        """Initialise empty queues for every kind."""
        self._queues: dict[QueueKind, asyncio.Queue[Callable[[], Any]]] = {
            kind: asyncio.Queue() for kind in QUEUE_KINDS
        }
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind(self) -> None:
        """Move the queues onto the running event loop, keeping pending items.

        An asyncio.Queue belongs to the first loop that waits on it. A queue
        shared across tests (each on its own loop) is rebuilt here before a
        consumer on the new loop waits on it.
        """
        loop = asyncio.get_running_loop()
        if loop is self._loop:
            return

        previous = self._queues
        self._queues = {kind: asyncio.Queue() for kind in QUEUE_KINDS}
        for kind, queue in previous.items():
            while not queue.empty():
                self._queues[kind].put_nowait(queue.get_nowait())
        self._loop = loop

    @property
    def kinds(self) -> tuple[QueueKind, ...]:
        """Kinds of work this queue accepts."""
        return QUEUE_KINDS

    def enqueue(self, work: AsyncWork) -> None:
        """Queue a coroutine function to run on the event loop."""
        self._queues["async"].put_nowait(work)
        logger.debug("Queued async work item: %s", _describe(work))

    def enqueue_blocking(self, work: BlockingWork) -> None:
        """Queue a blocking callable to run in a worker thread."""
        self._queues["blocking"].put_nowait(work)
        logger.debug("Queued blocking work item: %s", _describe(work))

    async def dequeue(self, kind: QueueKind) -> Callable[[], Any]:
        """Wait for and remove the next item of the given kind."""
        return await self._queues[kind].get()

    def lengths(self) -> dict[str, int]:
        """Return pending item counts keyed by kind."""
        return {kind: queue.qsize() for kind, queue in self._queues.items()}


class QueuedWorker:
    """Runs queued work items concurrently and counts those in flight.

    One consumer task per kind pulls items off the queue; every item then
    runs as its own task. An item is counted as processing from the moment
    it leaves the queue, so it is always visible to either ``lengths()`` or
    ``processing_counts()``.

    The worker may be registered once and started by many tests, each on its
    own event loop. Starting on a new loop discards the tasks left on the
    previous one and moves the queue along with it.
    """

    def __init__(self, queue: BackgroundQueue) -> None:
        """Initialise worker for a queue.

        Args:
            queue: Queue to drain once started.

        """
        self._queue = queue
        self._processing: dict[str, int] = dict.fromkeys(queue.kinds, 0)
        self._consumers: list[asyncio.Task[None]] = []
        self._running: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._failure: BaseException | None = None

    @property
    def is_running(self) -> bool:
        """Whether the consumer tasks have been started."""
        return bool(self._consumers)

    def processing_counts(self) -> dict[str, int]:
        """Return in-flight item counts keyed by kind.

        Raises:
            BackgroundWorkerError: If a consumer task died, since queued work
                would otherwise stay pending forever.

        """
        if self._failure is not None:
            raise BackgroundWorkerError(
                f"Background consumer stopped unexpectedly: {self._failure!r}",
                operation="wait",
            ) from self._failure
        return dict(self._processing)

    async def start(self) -> None:
        """Start consuming on the running event loop. No-op if started there."""
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            self._abandon()
        elif self._consumers:
            return

        self._queue.bind()
        self._loop = loop
        self._failure = None
        self._consumers = [
            asyncio.create_task(self._consume(kind), name=f"background-{kind}")
            for kind in self._queue.kinds
        ]
        for task in self._consumers:
            task.add_done_callback(self._on_consumer_done)
        logger.debug("QueuedWorker started")

    async def stop(self) -> None:
        """Cancel consumers and in-flight items and wait for them to finish."""
        if self._loop is not asyncio.get_running_loop():
            self._abandon()
            return

        tasks = [*self._consumers, *self._running]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._consumers = []
        self._running.clear()
        self._failure = None
        logger.debug("QueuedWorker stopped")

    def _abandon(self) -> None:
        # Tasks bound to another loop can be neither awaited nor cancelled.
        stale = len(self._consumers) + len(self._running)
        if stale:
            logger.debug(
                "QueuedWorker discarding %d task(s) from a previous event loop", stale
            )
        self._consumers = []
        self._running.clear()
        self._processing = dict.fromkeys(self._queue.kinds, 0)
        self._failure = None

    def _on_consumer_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled() or task.exception() is None:
            return
        self._failure = task.exception()
        logger.error(
            "Background consumer %s stopped: %r",
            task.get_name(),
            self._failure,
            exc_info=self._failure,
        )

    async def _consume(self, kind: QueueKind) -> None:
        while True:
            work = await self._queue.dequeue(kind)
            # Count before the next suspension point so the item never
            # disappears from both queue and processing counts.
            self._processing[kind] += 1
            task = asyncio.create_task(self._run(kind, work))
            self._running.add(task)
            task.add_done_callback(self._running.discard)

    async def _run(self, kind: QueueKind, work: Callable[[], Any]) -> None:
        try:
            if kind == "blocking":
                await asyncio.to_thread(work)
            else:
                await work()
        except Exception:
            logger.exception("Background %s work item %s failed", kind, _describe(work))
        finally:
            self._processing[kind] -= 1

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()


def _describe(work: Callable[[], Any]) -> str:
    return getattr(work, "__qualname__", None) or repr(work)
