"""Utility helpers shared across fixtured-unit."""

import threading
from collections.abc import Callable


class Lazy[T]:
    """Compute-once value with synchronised first access.

    The factory runs at most once, even when several threads read ``value``
    for the first time concurrently. A factory that raises leaves the value
    unset, so the next access tries again.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._value: T | None = None
        self._created = False
        self._lock = threading.Lock()

    @property
    def is_created(self) -> bool:
        """Whether the value has been constructed."""
        return self._created

    @property
    def value(self) -> T:
        """The value, constructing it on first access."""
        if not self._created:
            with self._lock:
                if not self._created:
                    self._value = self._factory()
                    self._created = True
        return self._value  # type: ignore[return-value]
