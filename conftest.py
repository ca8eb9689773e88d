"""Workspace-level pytest configuration and fixtures.

This file enables the fixtured-unit pytest plugin, registers the in-process
background queue for the session, and provides shared fixtures for all
tests in the repository.
"""

import logging

import pytest

from fixtured_unit.configuration import FixtureConfiguration
from fixtured_unit.fixture import ServiceConfigurator
from fixtured_unit.output import InjectableOutputSink
from fixtured_unit.queues import DrainConfiguration, add_background_queue

pytest_plugins = ["fixtured_unit.pytest_plugin"]


@pytest.fixture(scope="session")
def configure_services() -> ServiceConfigurator:
    """Register the background queue in the session-wide container."""
    return add_background_queue


@pytest.fixture(scope="session")
def fixture_configuration() -> FixtureConfiguration:
    """Poll quickly so drain waits stay short."""
    return FixtureConfiguration(drain=DrainConfiguration(poll_interval_seconds=0.01))


@pytest.fixture(autouse=True, scope="function")
def isolate_output_sinks():
    """Automatically remove output sinks a test leaves on the root logger.

    UnitFixture attaches its sink to the process-wide root logger and raises
    the root level. A test that builds a fixture and fails before closing it
    would otherwise leak the sink into every later test's logging.
    """
    root = logging.getLogger()
    saved_level = root.level
    saved_sinks = [h for h in root.handlers if isinstance(h, InjectableOutputSink)]

    yield  # Test runs here

    for handler in list(root.handlers):
        if isinstance(handler, InjectableOutputSink) and handler not in saved_sinks:
            root.removeHandler(handler)
    root.setLevel(saved_level)
