"""Configuration for the root unit fixture."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator

from fixtured_unit.queues.configuration import DrainConfiguration
from fixtured_unit.services.configuration import BaseServiceConfiguration


class FixtureConfiguration(BaseServiceConfiguration):
    """Settings applied when a UnitFixture is built.

    Attributes:
        log_level: Level set on the sink logger while the fixture is open
        sink_logger_name: Logger the output sink is attached to ("" is root)
        drain: Polling policy for waiting on background work

    Example:
        ```python
        config = FixtureConfiguration.from_properties({
            "log_level": "info",
            "sink_logger_name": "myapp",
            "drain": {"poll_interval_seconds": 0.1},
        })
        ```

    """

    log_level: str = Field(
        default="DEBUG", description="Level set on the sink logger"
    )
    sink_logger_name: str = Field(
        default="", description="Logger the output sink is attached to"
    )
    drain: DrainConfiguration = Field(default_factory=DrainConfiguration)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is a standard logging level name.

        Args:
            v: Level name to validate

        Returns:
            Upper-case level name

        Raises:
            ValueError: If level is not a standard logging level

        """
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
        level = v.upper()
        if level not in allowed:
            raise ValueError(f"Log level must be one of {sorted(allowed)}, got: {v}")
        return level

    @property
    def log_level_value(self) -> int:
        """Numeric logging level."""
        return logging.getLevelNamesMapping()[self.log_level]
