"""Nested service scope with deterministic asynchronous teardown."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Self

from fixtured_unit.errors import ScopeDisposedError
from fixtured_unit.services.container import ServiceContainer, create_instance
from fixtured_unit.services.disposal import dispose_instances

logger = logging.getLogger(__name__)


class ServiceScope:
    """Service-resolution context nested inside a root ServiceContainer.

    Singletons come from the root container. Scoped services are created once
    per scope and cached here. Transient services are created on every call.
    Scoped and transient instances are owned by the scope and closed when the
    scope is disposed; singletons are left to the root container.
    """

    def __init__(self, container: ServiceContainer) -> None:
        """Initialise scope over a root container.

        Args:
            container: Root container providing registrations and singletons

        """
        self._container = container
        self._scoped: dict[type, Any] = {}
        self._owned: list[object] = []
        self._disposed = False
        logger.debug("ServiceScope created")

    @property
    def disposed(self) -> bool:
        """Whether the scope has been disposed."""
        return self._disposed

    def get_service[T](self, service_type: type[T]) -> T:
        """Get a service instance from this scope.

        Raises:
            ScopeDisposedError: If the scope has already been disposed
            UnregisteredServiceError: If the type was never registered
            ServiceUnavailableError: If factory returns None

        """
        if self._disposed:
            raise ScopeDisposedError(
                f"Cannot resolve {service_type.__name__} from a disposed scope",
                operation="resolve",
            )

        descriptor = self._container.get_descriptor(service_type)

        if descriptor.lifetime == "singleton":
            return self._container.get_singleton(descriptor)

        if descriptor.lifetime == "scoped":
            if service_type not in self._scoped:
                instance = create_instance(descriptor)
                self._scoped[service_type] = instance
                self._owned.append(instance)
            return self._scoped[service_type]

        instance = create_instance(descriptor)
        self._owned.append(instance)
        return instance

    async def aclose(self) -> None:
        """Dispose the scope and every instance it owns.

        Safe to call more than once; only the first call releases anything.
        """
        if self._disposed:
            return
        self._disposed = True

        instances = self._owned
        self._owned = []
        self._scoped.clear()
        logger.debug("Disposing ServiceScope with %d owned instance(s)", len(instances))
        await dispose_instances(instances)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
