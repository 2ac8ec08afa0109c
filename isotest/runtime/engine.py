"""
Execution engine.

Drains the registry in registration order. For every test descriptor:

    NOT_STARTED -> SETTING_UP    allocate a fresh data instance, run fixture
                                 setup then the case's parameter block
    SETTING_UP  -> RUNNING       run the body in an isolated child process
    RUNNING     -> TEARING_DOWN  classify the outcome, record timing
    TEARING_DOWN -> DONE         run teardown (always), drop the instance

Each descriptor updates the run summary exactly once and produces exactly one
reporter line. Test outcomes never abort the run; only infrastructure errors
(IsolationError) propagate.
"""

import logging
import os
import time
from typing import Any

from isotest.assertions.outcomes import AssertionFailed, SkipRequested
from isotest.config import RunnerConfig
from isotest.reporting.console import ConsoleReporter, Reporter
from isotest.runtime.isolation import (
    IsolationOutcome,
    ProcessIsolator,
    describe_exception,
    truncate_message,
)
from isotest.runtime.models import (
    ExecutionResult,
    ExecutionStatus,
    LifecycleState,
    RunSummary,
    Timing,
)
from isotest.testing.fixtures import FixtureDescriptor
from isotest.testing.models import TestDescriptor
from isotest.testing.parametrize import compose_setup
from isotest.testing.registry import Registry, default_registry

logger = logging.getLogger(__name__)


def _children_cpu_seconds() -> float:
    times = os.times()
    return times.children_user + times.children_system


class ExecutionEngine:
    """
    Runs every registered test in isolation and aggregates the results.

    Example:
        >>> engine = ExecutionEngine(registry, config=RunnerConfig(monochrome=True))
        >>> summary = engine.run()
        >>> summary.success
        True
    """

    def __init__(
        self,
        registry: Registry | None = None,
        config: RunnerConfig | None = None,
        reporter: Reporter | None = None,
        isolator: ProcessIsolator | None = None,
    ):
        """
        Initialize the engine.

        Args:
            registry: Tests to run (defaults to the process-wide registry).
            config: Run configuration.
            reporter: Result observer (defaults to a ConsoleReporter).
            isolator: Isolation layer (defaults to a ProcessIsolator built from config).
        """
        self.registry = registry if registry is not None else default_registry
        self.config = config or RunnerConfig()
        self.reporter: Reporter = (
            reporter if reporter is not None else ConsoleReporter.from_config(self.config)
        )
        self.isolator = isolator or ProcessIsolator(
            capacity=self.config.diagnostic_capacity,
            timeout_seconds=self.config.timeout_seconds,
        )
        self.summary = RunSummary()
        self.results: list[ExecutionResult] = []

    def run(self) -> RunSummary:
        """
        Seal the registry and execute every test in registration order.

        Returns:
            The final RunSummary.

        Raises:
            IsolationError: If an isolated context cannot be created.
        """
        self.registry.seal()
        tests = self.registry.tests
        logger.info("Running %d test(s)", len(tests))

        self.reporter.begin(len(tests))
        for descriptor in tests:
            self.run_test(descriptor)
        self.reporter.finish(self.summary)

        logger.info(
            "Run finished: %d passed, %d failed, %d skipped",
            self.summary.passed,
            self.summary.failed_total,
            self.summary.skipped,
        )
        return self.summary

    def run_test(self, descriptor: TestDescriptor) -> ExecutionResult:
        """Execute one descriptor through its full lifecycle."""
        fixture = self.registry.get_fixture(descriptor.fixture_id)
        name = descriptor.display_name

        self._transition(name, LifecycleState.SETTING_UP)
        try:
            data = fixture.new_instance()
        except Exception as exc:
            result = self._result(
                descriptor,
                ExecutionStatus.CRASHED,
                f"Fixture data allocation raised {describe_exception(exc)}",
            )
        else:
            try:
                result = self._set_up(fixture, descriptor, data)
                if result is None:
                    self._transition(name, LifecycleState.RUNNING)
                    result = self._execute(descriptor, data)
            finally:
                self._transition(name, LifecycleState.TEARING_DOWN)
                self._tear_down(fixture, name, data)
                del data

        self._transition(name, LifecycleState.DONE)
        self.summary.record(result)
        self.results.append(result)
        self.reporter.report(result)
        return result

    # -------------------------------------------------------------------------
    # Lifecycle steps
    # -------------------------------------------------------------------------

    def _set_up(
        self, fixture: FixtureDescriptor, descriptor: TestDescriptor, data: Any
    ) -> ExecutionResult | None:
        """Run composed setup; return a result only if the body must not run."""
        try:
            compose_setup(fixture, descriptor)(data)
        except SkipRequested as exc:
            return self._result(descriptor, ExecutionStatus.SKIPPED, exc.reason)
        except AssertionFailed as exc:
            return self._result(descriptor, ExecutionStatus.FAILED, exc.diagnostic)
        except KeyboardInterrupt:
            raise
        except BaseException as exc:  # SystemExit from a hook ends only this test
            logger.debug("Setup of '%s' raised", descriptor.display_name, exc_info=True)
            return self._result(
                descriptor,
                ExecutionStatus.CRASHED,
                f"Fixture setup raised {describe_exception(exc)}",
            )
        return None

    def _execute(self, descriptor: TestDescriptor, data: Any) -> ExecutionResult:
        wall_start = time.perf_counter()
        cpu_start = _children_cpu_seconds()

        outcome = self.isolator.run(descriptor.body, data, name=descriptor.display_name)

        timing = Timing(
            wall_seconds=max(0.0, time.perf_counter() - wall_start),
            cpu_seconds=max(0.0, _children_cpu_seconds() - cpu_start),
        )
        return self._from_outcome(descriptor, outcome, timing)

    def _tear_down(self, fixture: FixtureDescriptor, name: str, data: Any) -> None:
        # Teardown errors are infrastructure failures: logged and counted,
        # never attributed to the test that just finished.
        try:
            fixture.teardown(data)
        except KeyboardInterrupt:
            raise
        except BaseException:
            logger.exception("Teardown of fixture '%s' failed after test '%s'", fixture.id, name)
            self.summary.record_teardown_error()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _transition(self, name: str, state: LifecycleState) -> None:
        logger.debug("%s -> %s", name, state.value)

    def _result(
        self,
        descriptor: TestDescriptor,
        status: ExecutionStatus,
        message: str = "",
        **details: Any,
    ) -> ExecutionResult:
        return ExecutionResult(
            name=descriptor.display_name,
            fixture_id=descriptor.fixture_id,
            status=status,
            message=truncate_message(message, self.config.diagnostic_capacity),
            **details,
        )

    def _from_outcome(
        self, descriptor: TestDescriptor, outcome: IsolationOutcome, timing: Timing
    ) -> ExecutionResult:
        return self._result(
            descriptor,
            outcome.status,
            outcome.message,
            timing=timing,
            exit_code=outcome.exit_code,
            signal_name=outcome.signal_name,
        )


def run_suite(
    registry: Registry | None = None,
    config: RunnerConfig | None = None,
    reporter: Reporter | None = None,
) -> RunSummary:
    """
    Convenience function: run every registered test and return the summary.

    Args:
        registry: Tests to run (defaults to the process-wide registry).
        config: Run configuration.
        reporter: Result observer (defaults to a ConsoleReporter).

    Returns:
        The final RunSummary; ``summary.success`` is the overall verdict.
    """
    engine = ExecutionEngine(registry=registry, config=config, reporter=reporter)
    return engine.run()
