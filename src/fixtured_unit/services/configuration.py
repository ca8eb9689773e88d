"""Base class for settings objects registered in the fixture container."""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class BaseServiceConfiguration(BaseModel):
    """Immutable, strictly validated settings shared through the root container.

    The root container is shared by every test in a session, so settings
    resolved from it are frozen: one test cannot change the polling interval
    or log level seen by the next. Unknown keys are rejected so a misspelt
    setting fails at build time rather than silently using a default.

    Example:
        ```python
        drain = DrainConfiguration.from_properties({"poll_interval_seconds": 0.05})
        container.register(
            ServiceDescriptor(DrainConfiguration, FunctionFactory(lambda: drain))
        )
        ```

    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_assignment=True)

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Validate a mapping of settings, e.g. loaded from an ini or env file.

        Raises:
            ValidationError: If a key is unknown or a value fails validation.

        """
        return cls.model_validate(properties)
