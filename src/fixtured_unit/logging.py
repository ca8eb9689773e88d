"""Logger construction for fixtured tests.

Loggers should be injected into the code that needs them. ``build_logger``
is the explicit opt-out for code that cannot receive one: it returns a
logger from Python's process-wide logging tree, which is shared state
configured once at process start and never torn down. Whatever handlers are
attached to that tree (including the output sink a UnitFixture attaches)
receive its records for the lifetime of the process.
"""

from __future__ import annotations

import logging

TEST_LOGGER_PREFIX = "fixtured_unit.tests"


def build_logger(name: str) -> logging.Logger:
    """Return a logger from the process-wide logging tree.

    Avoid if you can; prefer a logger injected through the constructor.

    Args:
        name: Dotted logger name.

    Returns:
        The shared logger for ``name``.

    """
    return logging.getLogger(name)


def build_test_logger(test_type: type) -> logging.Logger:
    """Return the process-wide logger for a fixtured test class."""
    return build_logger(f"{TEST_LOGGER_PREFIX}.{test_type.__qualname__}")
