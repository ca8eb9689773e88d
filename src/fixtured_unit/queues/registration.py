"""Container registration for the in-process background queue."""

from __future__ import annotations

from fixtured_unit.queues.background import BackgroundQueue, QueuedWorker
from fixtured_unit.queues.protocols import ProcessingStateSource, QueueStateSource
from fixtured_unit.services import FunctionFactory, ServiceContainer, ServiceDescriptor


def add_background_queue(container: ServiceContainer) -> None:
    """Register BackgroundQueue and QueuedWorker as singletons.

    The queue is also registered as the QueueStateSource and the worker as
    the ProcessingStateSource, so FixturedTest.wait_until_empty() drains
    them. The worker still has to be started on the test's event loop.
    """
    container.register(
        ServiceDescriptor(BackgroundQueue, FunctionFactory(BackgroundQueue))
    )
    container.register(
        ServiceDescriptor(
            QueuedWorker,
            FunctionFactory(lambda: QueuedWorker(container.get_service(BackgroundQueue))),
        )
    )
    container.register(
        ServiceDescriptor(
            QueueStateSource,  # type: ignore[type-abstract]
            FunctionFactory(lambda: container.get_service(BackgroundQueue)),
        )
    )
    container.register(
        ServiceDescriptor(
            ProcessingStateSource,  # type: ignore[type-abstract]
            FunctionFactory(lambda: container.get_service(QueuedWorker)),
        )
    )
