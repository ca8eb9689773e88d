"""Per-test service resolution with one lazily created scope."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fixtured_unit.errors import ContainerUnavailableError, ScopeAlreadyActiveError
from fixtured_unit.services import ServiceContainer, ServiceScope

if TYPE_CHECKING:
    from fixtured_unit.fixture import UnitFixture

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NoScope:
    """No scope has been created for the test yet."""


@dataclass(frozen=True, slots=True)
class ActiveScope:
    """The test's scope is live."""

    handle: ServiceScope


type ScopeState = NoScope | ActiveScope


class ScopedResolver:
    """Resolves services for a single test from the root container or its scope.

    The scope is created on the first scoped resolution and reused for the
    rest of the test; ``dispose()`` releases it.
    """

    def __init__(self, fixture: UnitFixture) -> None:
        """Initialise resolver for a fixture.

        Args:
            fixture: Root fixture whose container is read on every call.

        """
        self._fixture = fixture
        self._state: ScopeState = NoScope()

    @property
    def state(self) -> ScopeState:
        """Current scope state."""
        return self._state

    @property
    def scope(self) -> ServiceScope | None:
        """The active scope, or None if none was created."""
        match self._state:
            case ActiveScope(handle):
                return handle
            case NoScope():
                return None

    def resolve[T](self, service_type: type[T], *, scoped: bool = False) -> T:
        """Resolve a service from the root container or the test's scope.

        Args:
            service_type: The type of service to retrieve.
            scoped: Resolve from the test's scope, creating it if needed.

        Raises:
            ContainerUnavailableError: If the fixture's container is gone.
            UnregisteredServiceError: If the type was never registered.

        """
        container = self._require_container(
            "resolve", f"trying to resolve service {service_type.__name__}"
        )

        if not scoped:
            return container.get_service(service_type)

        match self._state:
            case ActiveScope(handle):
                scope = handle
            case NoScope():
                scope = self.create_scope()

        return scope.get_service(service_type)

    def create_scope(self) -> ServiceScope:
        """Create the test's scope.

        Usually ``resolve(..., scoped=True)`` is enough; the scope is released
        when the test is disposed.

        Raises:
            ScopeAlreadyActiveError: If the test already has a live scope.
            ContainerUnavailableError: If the fixture's container is gone.

        """
        if isinstance(self._state, ActiveScope):
            raise ScopeAlreadyActiveError(
                "A scope already exists for this test; "
                "creating another would orphan services bound to it",
                operation="scope",
            )

        container = self._require_container("scope", "trying to create a scope")
        handle = container.create_scope()
        self._state = ActiveScope(handle)
        logger.debug("Created service scope for test")
        return handle

    async def dispose(self) -> bool:
        """Release the scope if one exists.

        Returns:
            True if a scope was released, False if there was none.

        """
        match self._state:
            case NoScope():
                return False
            case ActiveScope(handle):
                self._state = NoScope()
                await handle.aclose()
                logger.debug("Released service scope for test")
                return True

    def _require_container(self, operation: str, action: str) -> ServiceContainer:
        container = self._fixture.container
        if container is None:
            raise ContainerUnavailableError(
                f"Service container was unavailable {action}",
                operation=operation,
            )
        return container
