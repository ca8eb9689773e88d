"""Service lifecycle management for dependency injection."""

from dataclasses import dataclass
from typing import Literal

from fixtured_unit.services.protocols import ServiceFactory

type ServiceLifetime = Literal["singleton", "scoped", "transient"]


@dataclass
class ServiceDescriptor[T]:
    """Descriptor for a service registration with lifecycle configuration.

    Attributes:
        service_type: The type of service being registered
        factory: Factory that creates service instances
        lifetime: Service lifetime ("singleton", "scoped" or "transient")

    """

    service_type: type[T]
    factory: ServiceFactory[T]
    lifetime: ServiceLifetime = "singleton"
