"""Tests for FixturedTest lifecycle.

Business behaviour: a test moves from uninitialized to active to disposed
exactly once; while active it resolves services, waits for background work
and writes log output to its own channel; after disposal nothing runs
against torn-down state.
"""

import asyncio
import logging
from unittest.mock import Mock

import pytest

from fixtured_unit import (
    CapturedOutput,
    ContainerUnavailableError,
    DrainConfiguration,
    DrainOutcome,
    FixtureDisposedError,
    FixturedTest,
    FixtureState,
    FixtureStateError,
    InjectableOutputSink,
    UnitFixture,
    UnregisteredServiceError,
)

from .fakes import ScopeMarker, ScriptedQueueSource, SingletonMarker

# =============================================================================
# State Machine
# =============================================================================


class TestFixturedTestLifecycle:
    """Tests for UNINITIALIZED -> ACTIVE -> DISPOSED."""

    async def test_initialize_activates_and_injects_output(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        test = FixturedTest(services_fixture, output)
        assert test.state is FixtureState.UNINITIALIZED

        test.initialize()

        assert test.state is FixtureState.ACTIVE
        assert test.resolve(InjectableOutputSink).channel is output

    async def test_initialize_twice_is_rejected(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        test = FixturedTest(services_fixture, output)
        test.initialize()

        with pytest.raises(FixtureStateError) as exc_info:
            test.initialize()

        assert exc_info.value.operation == "initialize"

    async def test_operations_before_initialize_are_rejected(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        test = FixturedTest(services_fixture, output)

        with pytest.raises(FixtureStateError, match="not been initialized"):
            test.resolve(SingletonMarker)

    async def test_dispose_without_initialize_is_safe(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        test = FixturedTest(services_fixture, output)

        await test.dispose()

        assert test.state is FixtureState.DISPOSED

    async def test_dispose_after_failed_initialize_is_safe(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        await services_fixture.aclose()
        test = FixturedTest(services_fixture, output)

        with pytest.raises(ContainerUnavailableError, match="unavailable"):
            test.initialize()
        await test.dispose()

        assert test.state is FixtureState.DISPOSED

    async def test_dispose_releases_scope_once_when_called_repeatedly(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        test = FixturedTest(services_fixture, output)
        test.initialize()
        marker = test.resolve(ScopeMarker, scoped=True)

        await test.dispose()
        await test.dispose()

        assert marker.close_count == 1

    async def test_dispose_ejects_output_channel(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        test = FixturedTest(services_fixture, output)
        test.initialize()
        sink = test.resolve(InjectableOutputSink)

        await test.dispose()

        assert sink.channel is None

    @pytest.mark.parametrize(
        "call",
        [
            lambda test: test.resolve(SingletonMarker),
            lambda test: test.create_scope(),
            lambda test: test.wait_until_empty(),
            lambda test: test.delay(0),
        ],
        ids=["resolve", "create_scope", "wait_until_empty", "delay"],
    )
    async def test_calls_after_dispose_fail_fast(
        self, services_fixture: UnitFixture, output: CapturedOutput, call
    ) -> None:
        test = FixturedTest(services_fixture, output)
        test.initialize()
        await test.dispose()

        with pytest.raises(FixtureDisposedError, match="already been disposed"):
            result = call(test)
            if asyncio.iscoroutine(result):
                await result

    async def test_async_context_manager_runs_full_lifecycle(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            assert test.state is FixtureState.ACTIVE
            marker = test.resolve(ScopeMarker, scoped=True)

        assert test.state is FixtureState.DISPOSED
        assert marker.close_count == 1


# =============================================================================
# Resolution & Scope
# =============================================================================


class TestFixturedTestResolution:
    """Tests for resolve() and create_scope()."""

    async def test_scoped_resolution_creates_scope_lazily(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            assert test.scope is None

            test.resolve(ScopeMarker, scoped=True)

            assert test.scope is not None

    async def test_tests_get_separate_scopes(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as first:
            first_marker = first.resolve(ScopeMarker, scoped=True)
        async with FixturedTest(services_fixture, output) as second:
            second_marker = second.resolve(ScopeMarker, scoped=True)

        assert first_marker is not second_marker

    async def test_create_scope_then_scoped_resolution_reuses_it(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            scope = test.create_scope()

            assert test.resolve(ScopeMarker, scoped=True) is scope.get_service(
                ScopeMarker
            )


# =============================================================================
# Draining
# =============================================================================


class TestFixturedTestDraining:
    """Tests for wait_until_empty()."""

    async def test_waits_for_queue_registered_in_container(
        self,
        services_fixture: UnitFixture,
        output: CapturedOutput,
        queue_source: ScriptedQueueSource,
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            outcome = await test.wait_until_empty()

        assert outcome is DrainOutcome.DRAINED
        assert queue_source.calls == 4

    async def test_cancelled_wait_is_not_reported_as_drained(
        self,
        services_fixture: UnitFixture,
        output: CapturedOutput,
    ) -> None:
        cancel = asyncio.Event()
        cancel.set()

        async with FixturedTest(services_fixture, output) as test:
            outcome = await test.wait_until_empty(cancel)

        assert outcome is DrainOutcome.CANCELLED

    async def test_explicit_drain_configuration_wins(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        logger = Mock(spec=logging.Logger)
        test = FixturedTest(
            services_fixture,
            output,
            logger=logger,
            drain_configuration=DrainConfiguration(poll_interval_seconds=0.02),
        )

        async with test:
            await test.wait_until_empty()

        logger.debug.assert_any_call(
            "Waiting %dms for background queue to empty (pending=%d, processing=%d)...",
            20,
            3,
            0,
        )

    async def test_missing_queue_registration_fails_loudly(
        self, output: CapturedOutput
    ) -> None:
        fixture = UnitFixture.build()
        try:
            async with FixturedTest(fixture, output) as test:
                with pytest.raises(UnregisteredServiceError, match="QueueStateSource"):
                    await test.wait_until_empty()
        finally:
            await fixture.aclose()


# =============================================================================
# Logging
# =============================================================================


class TestFixturedTestLogging:
    """Tests for the test logger and output routing."""

    async def test_logger_is_built_once_and_memoized(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            assert test.logger is test.logger
            assert test.logger.name == "fixtured_unit.tests.FixturedTest"

    async def test_injected_logger_is_used(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        logger = logging.getLogger("tests.injected")

        async with FixturedTest(services_fixture, output, logger=logger) as test:
            assert test.logger is logger

    async def test_subclass_logger_is_named_after_the_subclass(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        class TestSignup(FixturedTest):
            pass

        async with TestSignup(services_fixture, output) as test:
            assert test.logger.name.endswith("TestSignup")

    async def test_log_records_reach_the_test_output(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            test.logger.info("signup flow started")

        assert any("signup flow started" in line for line in output.lines)

    async def test_drain_iterations_are_written_to_output(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            await test.wait_until_empty()

        assert "Background queue is empty; continuing" in output.text
        assert output.text.count("Waiting 10ms for background queue") == 3

    async def test_output_is_not_written_after_dispose(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            logger = test.logger

        logger.info("late message")

        assert "late message" not in output.text

    async def test_delay_logs_reason(
        self, services_fixture: UnitFixture, output: CapturedOutput
    ) -> None:
        async with FixturedTest(services_fixture, output) as test:
            await test.delay(0.01, "letting the clock tick")

        assert "Delaying 0.010s: letting the clock tick" in output.text
