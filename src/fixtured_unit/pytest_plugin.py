"""pytest fixtures for fixtured-unit.

Enable in a root ``conftest.py``::

    pytest_plugins = ["fixtured_unit.pytest_plugin"]

Then override ``configure_services`` (and optionally
``fixture_configuration``) to register application services::

    @pytest.fixture(scope="session")
    def configure_services() -> ServiceConfigurator:
        def configure(container: ServiceContainer) -> None:
            add_background_queue(container)
            container.register(ServiceDescriptor(Mailer, MailerFactory()))

        return configure

Tests request ``fixtured_test`` to get an initialized FixturedTest that is
disposed after the test, whatever its outcome.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio

from fixtured_unit.configuration import FixtureConfiguration
from fixtured_unit.fixture import ServiceConfigurator, UnitFixture
from fixtured_unit.output import CapturedOutput
from fixtured_unit.testing import FixturedTest


@pytest.fixture(scope="session")
def fixture_configuration() -> FixtureConfiguration:
    """Settings for the session's UnitFixture. Override to customise."""
    return FixtureConfiguration()


@pytest.fixture(scope="session")
def configure_services() -> ServiceConfigurator | None:
    """Callback registering application services. Override to customise."""
    return None


@pytest.fixture(scope="session")
def unit_fixture(
    configure_services: ServiceConfigurator | None,
    fixture_configuration: FixtureConfiguration,
) -> Iterator[UnitFixture]:
    """Root fixture shared by every test in the session."""
    fixture = UnitFixture.build(configure_services, fixture_configuration)
    yield fixture
    asyncio.run(fixture.aclose())


@pytest.fixture
def test_output() -> CapturedOutput:
    """Output channel for the current test."""
    return CapturedOutput()


@pytest_asyncio.fixture
async def fixtured_test(
    unit_fixture: UnitFixture, test_output: CapturedOutput
) -> AsyncIterator[FixturedTest]:
    """Initialized FixturedTest, disposed after the test."""
    async with FixturedTest(unit_fixture, test_output) as test:
        yield test
