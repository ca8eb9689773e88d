"""Service container for dependency injection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fixtured_unit.errors import (
    ScopedServiceError,
    ServiceUnavailableError,
    UnregisteredServiceError,
)
from fixtured_unit.services.disposal import dispose_instances
from fixtured_unit.services.lifecycle import ServiceDescriptor

if TYPE_CHECKING:
    from fixtured_unit.services.scope import ServiceScope

logger = logging.getLogger(__name__)


def create_instance[T](descriptor: ServiceDescriptor[T]) -> T:
    """Invoke a descriptor's factory, rejecting a None result.

    Raises:
        ServiceUnavailableError: If factory returns None (service unavailable)

    """
    name = descriptor.service_type.__name__
    logger.debug("Creating %s service: %s", descriptor.lifetime, name)
    instance = descriptor.factory.create()
    if instance is None:
        logger.error("Factory for %s returned None - service unavailable", name)
        raise ServiceUnavailableError(
            f"Factory for {name} returned None - service unavailable",
            operation="resolve",
        )
    return instance


class ServiceContainer:
    """Dependency injection container for managing service lifecycle.

    The root container is shared by every test using a fixture. It owns
    singleton instances; scoped and transient instances belong to a
    ServiceScope created with ``create_scope()``.
    """

    def __init__(self) -> None:
        """Initialise the service container."""
        # Store descriptors directly - type uses Any for heterogeneous storage
        # Type safety is enforced at the public API level through generics
        self._descriptors: dict[type, ServiceDescriptor[Any]] = {}
        self._singletons: dict[type, Any] = {}
        logger.debug("ServiceContainer initialized")

    def register[T](self, descriptor: ServiceDescriptor[T]) -> None:
        """Register a service with the container.

        Registering the same type again replaces the earlier registration.

        Args:
            descriptor: Service descriptor containing type, factory, and lifetime

        """
        self._descriptors[descriptor.service_type] = descriptor
        logger.debug(
            "Registered service: %s with lifetime: %s",
            descriptor.service_type.__name__,
            descriptor.lifetime,
        )

    def is_registered(self, service_type: type) -> bool:
        """Check whether a service type has a registration."""
        return service_type in self._descriptors

    def get_descriptor[T](self, service_type: type[T]) -> ServiceDescriptor[T]:
        """Get the registration for a service type.

        Raises:
            UnregisteredServiceError: If the type was never registered

        """
        descriptor = self._descriptors.get(service_type)
        if descriptor is None:
            raise UnregisteredServiceError(
                f"No service registered for type {service_type.__name__}",
                operation="resolve",
            )
        return descriptor

    def get_service[T](self, service_type: type[T]) -> T:
        """Get a service instance from the container.

        Args:
            service_type: The type of service to retrieve

        Returns:
            Service instance

        Raises:
            UnregisteredServiceError: If the type was never registered
            ServiceUnavailableError: If factory returns None (service unavailable)
            ScopedServiceError: If the service is scoped (resolve it from a scope)

        """
        descriptor = self.get_descriptor(service_type)

        if descriptor.lifetime == "singleton":
            return self.get_singleton(descriptor)
        if descriptor.lifetime == "scoped":
            raise ScopedServiceError(
                f"Scoped service {service_type.__name__} cannot be resolved "
                "from the root container; resolve it from a scope",
                operation="resolve",
            )
        return create_instance(descriptor)

    def get_singleton[T](self, descriptor: ServiceDescriptor[T]) -> T:
        """Get or lazily create the singleton instance for a descriptor."""
        service_type = descriptor.service_type
        if service_type not in self._singletons:
            self._singletons[service_type] = create_instance(descriptor)
            logger.debug(
                "Singleton service created and cached: %s", service_type.__name__
            )
        else:
            logger.debug("Returning cached singleton service: %s", service_type.__name__)
        return self._singletons[service_type]

    def create_scope(self) -> ServiceScope:
        """Create a nested scope with its own scoped-service lifetime."""
        from fixtured_unit.services.scope import ServiceScope

        return ServiceScope(self)

    async def aclose(self) -> None:
        """Dispose created singletons in reverse creation order."""
        instances = list(self._singletons.values())
        self._singletons.clear()
        logger.debug("Disposing %d singleton service(s)", len(instances))
        await dispose_instances(instances)
