"""Per-test lifecycle tying service resolution, output and drain waiting together.

A FixturedTest is created for every test. It routes log output to the
test's output channel, resolves services from the shared UnitFixture
(optionally through one per-test scope), and can wait for the background
queue to drain before the test asserts.

Usage Pattern:
    async def test_signup_sends_welcome_email(unit_fixture, test_output):
        async with FixturedTest(unit_fixture, test_output) as test:
            await test.resolve(SignupService).sign_up("ada@example.com")
            await test.wait_until_empty()
            assert test.resolve(FakeMailer).sent == ["ada@example.com"]
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from types import TracebackType
from typing import Self

from fixtured_unit.errors import FixtureDisposedError, FixtureStateError
from fixtured_unit.fixture import UnitFixture
from fixtured_unit.logging import build_test_logger
from fixtured_unit.output import InjectableOutputSink, OutputChannel
from fixtured_unit.queues import (
    DrainConfiguration,
    DrainOutcome,
    DrainWaiter,
    ProcessingStateSource,
    QueueStateSource,
)
from fixtured_unit.resolver import ScopedResolver
from fixtured_unit.services import ServiceScope
from fixtured_unit.utils import Lazy


class FixtureState(StrEnum):
    """Lifecycle state of a FixturedTest."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DISPOSED = "disposed"


class FixturedTest:
    """Test base giving access to the fixture's container and background queue.

    Lifecycle: UNINITIALIZED -> ACTIVE (``initialize()``) -> DISPOSED
    (``dispose()``, terminal). Resolution, scope creation and drain waiting
    are only allowed while ACTIVE.
    """

    def __init__(
        self,
        fixture: UnitFixture,
        output: OutputChannel,
        *,
        logger: logging.Logger | None = None,
        drain_configuration: DrainConfiguration | None = None,
    ) -> None:
        """Initialise the test lifecycle.

        Args:
            fixture: Root fixture shared by all tests.
            output: This test's output channel.
            logger: Logger for the test; built lazily from the process-wide
                logging tree when None.
            drain_configuration: Polling policy; falls back to the
                DrainConfiguration registered in the fixture's container.

        """
        self.fixture = fixture
        self._output = output
        self._drain_configuration = drain_configuration
        self._state = FixtureState.UNINITIALIZED
        self._resolver = ScopedResolver(fixture)
        self._sink: InjectableOutputSink | None = None
        self._logger: Lazy[logging.Logger] = Lazy(
            lambda: logger or build_test_logger(type(self))
        )
        self._drain_waiter: Lazy[DrainWaiter] = Lazy(self._build_drain_waiter)

    @property
    def state(self) -> FixtureState:
        """Current lifecycle state."""
        return self._state

    @property
    def logger(self) -> logging.Logger:
        """Logger for this test, built on first use."""
        return self._logger.value

    @property
    def scope(self) -> ServiceScope | None:
        """The test's active scope, if one was created."""
        return self._resolver.scope

    def initialize(self) -> None:
        """Route log output to this test's channel and become ACTIVE.

        Raises:
            FixtureStateError: If already initialized or disposed.
            ContainerUnavailableError: If the fixture is closed.

        """
        if self._state is not FixtureState.UNINITIALIZED:
            raise FixtureStateError(
                f"Cannot initialize a test in state '{self._state}'",
                operation="initialize",
            )

        sink = self._resolver.resolve(InjectableOutputSink)
        sink.inject(self._output)
        self._sink = sink
        self._state = FixtureState.ACTIVE

    def resolve[T](self, service_type: type[T], *, scoped: bool = False) -> T:
        """Resolve a service from the fixture, optionally through the test scope.

        Args:
            service_type: The type of service to retrieve.
            scoped: Resolve from the test's scope, creating it on first use.

        """
        self._require_active("resolve")
        return self._resolver.resolve(service_type, scoped=scoped)

    def create_scope(self) -> ServiceScope:
        """Create the test's scope explicitly. Released on dispose."""
        self._require_active("scope")
        return self._resolver.create_scope()

    async def wait_until_empty(
        self, cancel: asyncio.Event | None = None
    ) -> DrainOutcome:
        """Wait for the background queue to drain.

        Args:
            cancel: Optional event that aborts the wait when set.

        Returns:
            DrainOutcome.DRAINED, or DrainOutcome.CANCELLED if cancelled.

        """
        self._require_active("wait")
        return await self._drain_waiter.value.wait_until_empty(cancel)

    async def delay(self, seconds: float, reason: str | None = None) -> None:
        """Sleep for a fixed time, logging why.

        Prefer ``wait_until_empty()`` when waiting on background work.
        """
        self._require_active("delay")
        if reason:
            self.logger.debug("Delaying %.3fs: %s", seconds, reason)
        else:
            self.logger.debug("Delaying %.3fs", seconds)
        await asyncio.sleep(seconds)

    async def dispose(self) -> None:
        """Release the test's scope and output channel. Idempotent.

        Safe to call when the test was never initialized or when
        ``initialize()`` failed part-way.
        """
        if self._state is FixtureState.DISPOSED:
            return
        self._state = FixtureState.DISPOSED

        try:
            await self._resolver.dispose()
        finally:
            if self._sink is not None:
                self._sink.eject(self._output)
                self._sink = None

    async def __aenter__(self) -> Self:
        self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.dispose()

    def _build_drain_waiter(self) -> DrainWaiter:
        configuration = self._drain_configuration or self._resolver.resolve(
            DrainConfiguration
        )
        return DrainWaiter(
            self._resolver.resolve(QueueStateSource),  # type: ignore[type-abstract]
            self._resolver.resolve(ProcessingStateSource),  # type: ignore[type-abstract]
            configuration,
            self.logger,
        )

    def _require_active(self, operation: str) -> None:
        if self._state is FixtureState.ACTIVE:
            return
        if self._state is FixtureState.DISPOSED:
            raise FixtureDisposedError(
                "Test has already been disposed", operation=operation
            )
        raise FixtureStateError(
            "Test has not been initialized", operation=operation
        )
