"""Error classes for fixtured-unit.

This module provides:
- FixtureError: Base exception class carrying the failed operation
- ContainerUnavailableError, UnregisteredServiceError, ServiceUnavailableError,
  ScopedServiceError: Service resolution exceptions
- ScopeAlreadyActiveError, ScopeDisposedError: Scope exceptions
- InvariantViolationError: Impossible queue or processing counts
- FixtureStateError, FixtureDisposedError: Lifecycle exceptions
- BackgroundWorkerError: A background consumer died
"""

from __future__ import annotations

from typing import override


class FixtureError(Exception):
    """Base exception for all fixtured-unit errors.

    Carries the name of the fixture operation that failed (``"resolve"``,
    ``"scope"``, ``"wait"``, ``"initialize"``) so a failing test reports
    which step aborted it and why.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialise fixture error with context.

        Args:
            message: Human-readable error message describing what went wrong
            operation: Name of the fixture operation that failed
            original_error: The underlying exception that caused this error

        """
        super().__init__(message)
        self.operation = operation
        self.original_error = original_error

    @override
    def __str__(self) -> str:
        """Return formatted error message with operation context."""
        base_message = super().__str__()
        if self.operation:
            return f"Fixture operation '{self.operation}' failed: {base_message}"
        return base_message


class ContainerUnavailableError(FixtureError):
    """Raised when the root container is gone (fixture already closed)."""

    pass


class UnregisteredServiceError(FixtureError):
    """Raised when a requested service type has no registration."""

    pass


class ServiceUnavailableError(FixtureError):
    """Raised when a registered factory cannot produce its service."""

    pass


class ScopedServiceError(FixtureError):
    """Raised when a scoped service is requested from the root container."""

    pass


class ScopeAlreadyActiveError(FixtureError):
    """Raised when a scope is created while another one is still live."""

    pass


class ScopeDisposedError(FixtureError):
    """Raised when resolving from a scope that has been disposed."""

    pass


class InvariantViolationError(FixtureError):
    """Raised when a collaborator reports negative or non-integer counts."""

    pass


class FixtureStateError(FixtureError):
    """Raised when a lifecycle operation is called in the wrong state."""

    pass


class FixtureDisposedError(FixtureStateError):
    """Raised when a fixtured test is used after disposal."""

    pass


class BackgroundWorkerError(FixtureError):
    """Raised when a background consumer stopped while work may remain."""

    pass
