"""Ready-made ServiceFactory implementations."""

from collections.abc import Callable


class FunctionFactory[T]:
    """ServiceFactory that delegates to a zero-argument callable.

    Useful for registering pre-built instances or small lambdas without
    writing a dedicated factory class::

        container.register(
            ServiceDescriptor(Clock, FunctionFactory(lambda: FrozenClock(now)))
        )
    """

    def __init__(self, create: Callable[[], T | None]) -> None:
        self._create = create

    def create(self) -> T | None:
        """Create a service instance by calling the wrapped function."""
        return self._create()

    def can_create(self) -> bool:
        """Wrapped functions are always considered available."""
        return True
