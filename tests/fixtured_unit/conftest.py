"""Shared fixtures for fixtured-unit tests."""

from collections.abc import AsyncIterator

import pytest

from fixtured_unit import (
    CapturedOutput,
    DrainConfiguration,
    FixtureConfiguration,
    FunctionFactory,
    ProcessingStateSource,
    QueueStateSource,
    ServiceContainer,
    ServiceDescriptor,
    UnitFixture,
)

from .fakes import (
    ScopedRepository,
    ScopeMarker,
    ScriptedProcessingSource,
    ScriptedQueueSource,
    SingletonMarker,
    TransientMarker,
    idle,
    pending,
)

FAST_DRAIN = DrainConfiguration(poll_interval_seconds=0.01)

# =============================================================================
# Container Fixtures
# =============================================================================


def register_markers(container: ServiceContainer) -> None:
    """Register one marker service per lifetime."""
    container.register(
        ServiceDescriptor(SingletonMarker, FunctionFactory(SingletonMarker))
    )
    container.register(
        ServiceDescriptor(ScopeMarker, FunctionFactory(ScopeMarker), "scoped")
    )
    container.register(
        ServiceDescriptor(ScopedRepository, FunctionFactory(ScopedRepository), "scoped")
    )
    container.register(
        ServiceDescriptor(TransientMarker, FunctionFactory(TransientMarker), "transient")
    )


@pytest.fixture
def container() -> ServiceContainer:
    """Root container with marker services registered."""
    container = ServiceContainer()
    register_markers(container)
    return container


# =============================================================================
# Queue State Fixtures
# =============================================================================


@pytest.fixture
def queue_source() -> ScriptedQueueSource:
    """Queue draining over four polls: 3, 2, 1, 0 pending."""
    return ScriptedQueueSource(pending(3, 2, 1, 0))


@pytest.fixture
def processing_source() -> ScriptedProcessingSource:
    """Processor with nothing in flight."""
    return ScriptedProcessingSource(idle())


# =============================================================================
# Fixture Fixtures
# =============================================================================


@pytest.fixture
async def services_fixture(
    queue_source: ScriptedQueueSource,
    processing_source: ScriptedProcessingSource,
) -> AsyncIterator[UnitFixture]:
    """UnitFixture with markers and scripted queue state, closed after the test."""

    def configure(container: ServiceContainer) -> None:
        register_markers(container)
        container.register(
            ServiceDescriptor(QueueStateSource, FunctionFactory(lambda: queue_source))  # type: ignore[type-abstract]
        )
        container.register(
            ServiceDescriptor(
                ProcessingStateSource,  # type: ignore[type-abstract]
                FunctionFactory(lambda: processing_source),
            )
        )

    fixture = UnitFixture.build(
        configure,
        FixtureConfiguration(drain=FAST_DRAIN),
    )
    yield fixture
    await fixture.aclose()


@pytest.fixture
def output() -> CapturedOutput:
    """Output channel that does not echo to stdout."""
    return CapturedOutput(echo=False)
