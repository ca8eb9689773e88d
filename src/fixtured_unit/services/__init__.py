"""Service management and dependency injection infrastructure."""

from fixtured_unit.services.configuration import BaseServiceConfiguration
from fixtured_unit.services.container import ServiceContainer
from fixtured_unit.services.factories import FunctionFactory
from fixtured_unit.services.lifecycle import ServiceDescriptor, ServiceLifetime
from fixtured_unit.services.protocols import ServiceFactory
from fixtured_unit.services.scope import ServiceScope

__all__ = [
    "BaseServiceConfiguration",
    "FunctionFactory",
    "ServiceContainer",
    "ServiceDescriptor",
    "ServiceFactory",
    "ServiceLifetime",
    "ServiceScope",
]
