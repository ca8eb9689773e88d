"""fixtured-unit - DI-backed test fixtures with background queue draining.

This package gives tests access to a shared dependency-injection container,
an optional per-test service scope, per-test log output, and a way to wait
until background work has fully drained before asserting.
"""

__version__ = "0.1.0"

from fixtured_unit.configuration import FixtureConfiguration
from fixtured_unit.errors import (
    BackgroundWorkerError,
    ContainerUnavailableError,
    FixtureDisposedError,
    FixtureError,
    FixtureStateError,
    InvariantViolationError,
    ScopeAlreadyActiveError,
    ScopedServiceError,
    ScopeDisposedError,
    ServiceUnavailableError,
    UnregisteredServiceError,
)
from fixtured_unit.fixture import ServiceConfigurator, UnitFixture
from fixtured_unit.logging import build_logger
from fixtured_unit.output import CapturedOutput, InjectableOutputSink, OutputChannel
from fixtured_unit.queues import (
    BackgroundQueue,
    DrainConfiguration,
    DrainOutcome,
    DrainWaiter,
    ProcessingStateSource,
    QueuedWorker,
    QueueSnapshot,
    QueueStateSource,
    add_background_queue,
)
from fixtured_unit.resolver import ActiveScope, NoScope, ScopedResolver
from fixtured_unit.services import (
    BaseServiceConfiguration,
    FunctionFactory,
    ServiceContainer,
    ServiceDescriptor,
    ServiceFactory,
    ServiceScope,
)
from fixtured_unit.testing import FixturedTest, FixtureState
from fixtured_unit.utils import Lazy

__all__ = [
    # Version
    "__version__",
    # Fixtures
    "FixtureConfiguration",
    "FixtureState",
    "FixturedTest",
    "ServiceConfigurator",
    "UnitFixture",
    # Resolution
    "ActiveScope",
    "NoScope",
    "ScopedResolver",
    # Dependency Injection
    "BaseServiceConfiguration",
    "FunctionFactory",
    "ServiceContainer",
    "ServiceDescriptor",
    "ServiceFactory",
    "ServiceScope",
    # Background queue
    "BackgroundQueue",
    "DrainConfiguration",
    "DrainOutcome",
    "DrainWaiter",
    "ProcessingStateSource",
    "QueueSnapshot",
    "QueueStateSource",
    "QueuedWorker",
    "add_background_queue",
    # Output and logging
    "CapturedOutput",
    "InjectableOutputSink",
    "OutputChannel",
    "build_logger",
    # Utilities
    "Lazy",
    # Errors
    "FixtureError",
    "BackgroundWorkerError",
    "ContainerUnavailableError",
    "FixtureDisposedError",
    "FixtureStateError",
    "InvariantViolationError",
    "ScopeAlreadyActiveError",
    "ScopeDisposedError",
    "ScopedServiceError",
    "ServiceUnavailableError",
    "UnregisteredServiceError",
]
