"""Configuration for queue drain polling."""

from __future__ import annotations

from pydantic import Field

from fixtured_unit.services.configuration import BaseServiceConfiguration

DEFAULT_POLL_INTERVAL_SECONDS = 0.5


class DrainConfiguration(BaseServiceConfiguration):
    """Polling policy used while waiting for background work to drain.

    Attributes:
        poll_interval_seconds: Delay between successive drain checks

    """

    poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        gt=0,
        description="Delay between successive drain checks, in seconds",
    )

    @property
    def poll_interval_ms(self) -> int:
        """Polling interval in whole milliseconds, for log messages."""
        return round(self.poll_interval_seconds * 1000)
