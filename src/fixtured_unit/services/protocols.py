"""Service protocols for dependency injection."""

from typing import Protocol, runtime_checkable


class ServiceFactory[T](Protocol):
    """Protocol for factories that create service instances for the container.

    Factories are held by a ServiceDescriptor and invoked lazily: nothing is
    created at registration time, only on the first ``get_service()`` call
    (singleton), once per scope (scoped) or on every call (transient).

    The protocol methods take NO parameters. Anything a factory needs is held
    by the factory instance itself, typically captured at construction.

    Example:
        ```python
        class ClockFactory:
            def __init__(self, zone: str = "UTC") -> None:
                self._zone = zone

            def can_create(self) -> bool:
                return True

            def create(self) -> Clock | None:
                return Clock(self._zone)

        container.register(ServiceDescriptor(Clock, ClockFactory(), "singleton"))
        ```

    """

    def create(self) -> T | None:
        """Create a service instance.

        Returns:
            Service instance, or None if service unavailable.

        """
        ...

    def can_create(self) -> bool:
        """Check if factory can create service instance.

        Returns:
            True if service is available and can be created, False otherwise.

        """
        ...


@runtime_checkable
class AsyncClosable(Protocol):
    """Service that releases its resources asynchronously."""

    async def aclose(self) -> None:
        """Release resources held by the service."""
        ...


@runtime_checkable
class Closable(Protocol):
    """Service that releases its resources synchronously."""

    def close(self) -> None:
        """Release resources held by the service."""
        ...
