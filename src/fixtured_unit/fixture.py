"""Root fixture owning the service container shared by all tests."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fixtured_unit.configuration import FixtureConfiguration
from fixtured_unit.output import InjectableOutputSink
from fixtured_unit.queues.configuration import DrainConfiguration
from fixtured_unit.services import FunctionFactory, ServiceContainer, ServiceDescriptor

logger = logging.getLogger(__name__)

type ServiceConfigurator = Callable[[ServiceContainer], None]


class UnitFixture:
    """Holds the root ServiceContainer for a test session.

    The container is built once and shared read-only by every test. Each
    FixturedTest reads it through ``container``, which becomes None once the
    fixture is closed so late resolutions fail instead of touching disposed
    singletons.

    Example:
        >>> def configure(container: ServiceContainer) -> None:
        ...     container.register(ServiceDescriptor(Clock, ClockFactory()))
        >>>
        >>> fixture = UnitFixture.build(configure)
        >>> async with FixturedTest(fixture, CapturedOutput()) as test:
        ...     clock = test.resolve(Clock)
        >>> await fixture.aclose()

    """

    def __init__(
        self,
        container: ServiceContainer,
        configuration: FixtureConfiguration | None = None,
    ) -> None:
        """Initialise fixture around an already configured container.

        Prefer ``UnitFixture.build()``, which also registers the output sink
        and configuration services.

        Args:
            container: Root container shared by all tests.
            configuration: Fixture settings; defaults apply when None.

        """
        self._container: ServiceContainer | None = container
        self._configuration = configuration or FixtureConfiguration()
        self._sink: InjectableOutputSink | None = None
        self._previous_level: int | None = None

    @classmethod
    def build(
        cls,
        configure: ServiceConfigurator | None = None,
        configuration: FixtureConfiguration | None = None,
    ) -> UnitFixture:
        """Create a container, register fixture services and attach the sink.

        Args:
            configure: Callback registering application services.
            configuration: Fixture settings; defaults apply when None.

        Returns:
            Ready-to-use fixture.

        """
        configuration = configuration or FixtureConfiguration()
        container = ServiceContainer()
        container.register(
            ServiceDescriptor(InjectableOutputSink, FunctionFactory(InjectableOutputSink))
        )
        container.register(
            ServiceDescriptor(FixtureConfiguration, FunctionFactory(lambda: configuration))
        )
        container.register(
            ServiceDescriptor(
                DrainConfiguration, FunctionFactory(lambda: configuration.drain)
            )
        )

        if configure is not None:
            configure(container)

        fixture = cls(container, configuration)
        fixture.attach_sink()
        return fixture

    @property
    def container(self) -> ServiceContainer | None:
        """Root container, or None once the fixture is closed."""
        return self._container

    @property
    def configuration(self) -> FixtureConfiguration:
        """Fixture settings."""
        return self._configuration

    def attach_sink(self) -> None:
        """Attach the container's output sink to the configured logger."""
        if self._container is None or self._sink is not None:
            return

        sink = self._container.get_service(InjectableOutputSink)
        target = logging.getLogger(self._configuration.sink_logger_name)
        self._previous_level = target.level
        target.setLevel(self._configuration.log_level_value)
        target.addHandler(sink)
        self._sink = sink
        logger.debug(
            "Output sink attached to logger '%s' at level %s",
            self._configuration.sink_logger_name or "root",
            self._configuration.log_level,
        )

    async def aclose(self) -> None:
        """Detach the sink and dispose the container. Safe to call twice."""
        container = self._container
        if container is None:
            return
        self._container = None

        target = logging.getLogger(self._configuration.sink_logger_name)
        if self._sink is not None:
            target.removeHandler(self._sink)
            self._sink = None
        if self._previous_level is not None:
            target.setLevel(self._previous_level)
            self._previous_level = None

        await container.aclose()
        logger.debug("UnitFixture closed")
