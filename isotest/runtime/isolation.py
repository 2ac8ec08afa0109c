"""
Isolation layer.

Each test body runs in its own forked child process. Whatever happens in
there (a failed assertion, an unexpected exception, a segmentation fault, an
abort) stays in the child: the orchestrator waits for it, reads the
diagnostic the child left in a shared-memory channel, and classifies the
exit status.

Child exit statuses:

    0  body returned normally
    1  an assertion failed (diagnostic in the channel)
    2  a skip directive fired (reason in the channel)
    3  the body raised an unexpected exception (description in the channel)
   <0  the child was killed by a signal
"""

import ctypes
import logging
import multiprocessing
import signal
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from multiprocessing.context import BaseContext
from typing import Any

from isotest.assertions.outcomes import AssertionFailed, SkipRequested
from isotest.config import DEFAULT_CAPACITY, MIN_CAPACITY
from isotest.runtime.models import ExecutionStatus

logger = logging.getLogger(__name__)

START_METHOD = "fork"


class ChildExit(IntEnum):
    """Exit statuses used by the isolated child."""

    PASSED = 0
    FAILED = 1
    SKIPPED = 2
    ERRORED = 3


# =============================================================================
# Custom Exceptions
# =============================================================================


class IsolationError(RuntimeError):
    """Raised when an isolated execution context cannot be created.

    This is an infrastructure failure, not a test outcome; the engine does
    not catch it.
    """


class ChannelError(RuntimeError):
    """Raised when the diagnostic channel is written more than once."""


# =============================================================================
# Diagnostic Channel
# =============================================================================


class DiagnosticChannel:
    """Bounded message buffer shared between the orchestrator and one child.

    The buffer lives in shared memory allocated before the child starts, so
    the parent can still read it after the child has exited or been killed.
    One writer (the child, at most once) and one reader (the parent, after
    the child has ended).

    Example:
        >>> channel = DiagnosticChannel(capacity=8)
        >>> channel.write("truncated message")
        >>> channel.read()
        'truncat'
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, context: BaseContext | None = None):
        """
        Allocate the shared buffer.

        Args:
            capacity: Buffer size in bytes; messages keep at most capacity - 1.
            context: Multiprocessing context the child will be started from.
        """
        if capacity < 2:
            raise ValueError("Diagnostic channel capacity must be at least 2 bytes")
        ctx = context or multiprocessing.get_context(START_METHOD)
        self._capacity = capacity
        self._buffer = ctx.RawArray(ctypes.c_char, capacity)
        # Explicit length, so messages may contain NUL bytes
        self._length = ctx.RawValue(ctypes.c_size_t, 0)
        self._written = False

    @property
    def capacity(self) -> int:
        return self._capacity

    def write(self, message: str) -> None:
        """Store a message, truncated to capacity - 1 bytes on a character boundary.

        Raises:
            ChannelError: If this channel was already written in this process.
        """
        if self._written:
            raise ChannelError("Diagnostic channel has already been written")
        data = truncate_message(message, self._capacity).encode("utf-8")
        self._buffer[: len(data)] = data
        self._length.value = len(data)
        self._written = True

    def read(self) -> str:
        """Return the stored message ('' if nothing was written)."""
        return self._buffer[: self._length.value].decode("utf-8", errors="ignore")

    def __repr__(self) -> str:
        return f"DiagnosticChannel(capacity={self._capacity})"


# =============================================================================
# Outcome Classification
# =============================================================================


@dataclass(frozen=True)
class IsolationOutcome:
    """How an isolated execution ended."""

    status: ExecutionStatus
    message: str = ""
    exit_code: int | None = None
    signal_name: str | None = None
    timed_out: bool = False


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return f"SIG{number}"


def classify_exit(exit_code: int | None, message: str) -> IsolationOutcome:
    """Map a child exit status and its diagnostic to an outcome.

    Statuses 1 and 2 only count as an assertion failure or a skip when the
    child actually wrote a diagnostic; a body that calls ``os._exit(1)``
    itself is reported as a crash.
    """
    if exit_code == ChildExit.PASSED:
        return IsolationOutcome(ExecutionStatus.PASSED, exit_code=exit_code)
    if exit_code == ChildExit.FAILED and message:
        return IsolationOutcome(ExecutionStatus.FAILED, message, exit_code=exit_code)
    if exit_code == ChildExit.SKIPPED and message:
        return IsolationOutcome(ExecutionStatus.SKIPPED, message, exit_code=exit_code)
    if exit_code == ChildExit.ERRORED and message:
        return IsolationOutcome(
            ExecutionStatus.CRASHED, f"Test raised {message}", exit_code=exit_code
        )
    if exit_code is not None and exit_code < 0:
        name = _signal_name(-exit_code)
        return IsolationOutcome(
            ExecutionStatus.CRASHED,
            f"Test halted due to signal {name.lower()} (code {-exit_code})",
            exit_code=exit_code,
            signal_name=name,
        )
    return IsolationOutcome(
        ExecutionStatus.CRASHED,
        f"Test exited unexpectedly with status {exit_code}",
        exit_code=exit_code,
    )


def truncate_message(message: str, capacity: int) -> str:
    """Cut a message to at most capacity - 1 UTF-8 bytes without splitting a character."""
    encoded = message.encode("utf-8")[: capacity - 1]
    return encoded.decode("utf-8", errors="ignore")


def describe_exception(exc: BaseException) -> str:
    """One-line exception identity plus the innermost raising location."""
    description = "".join(traceback.format_exception_only(type(exc), exc)).strip()
    frames = traceback.extract_tb(exc.__traceback__)
    if frames:
        description += f"\n  at {frames[-1].filename}:{frames[-1].lineno}"
    return description


def _run_isolated(body: Callable[[Any], None], data: Any, channel: DiagnosticChannel) -> None:
    """Child-side entry point: run the body, report through the channel and exit."""
    try:
        body(data)
    except AssertionFailed as exc:
        channel.write(exc.diagnostic)
        code = ChildExit.FAILED
    except SkipRequested as exc:
        channel.write(exc.reason)
        code = ChildExit.SKIPPED
    except BaseException as exc:  # the boundary reports every escape from the body
        channel.write(describe_exception(exc))
        code = ChildExit.ERRORED
    else:
        code = ChildExit.PASSED
    sys.stdout.flush()
    sys.stderr.flush()
    sys.exit(int(code))


# =============================================================================
# Process Isolator
# =============================================================================


class ProcessIsolator:
    """
    Runs test bodies in forked child processes.

    Fork is used so that test bodies and fixture data (closures, lambdas,
    open handles) reach the child without pickling.

    Example:
        >>> isolator = ProcessIsolator()
        >>> isolator.run(lambda data: None, data=None).status
        <ExecutionStatus.PASSED: 'passed'>
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        timeout_seconds: float | None = None,
    ):
        """
        Initialize the isolator.

        Args:
            capacity: Diagnostic channel size in bytes.
            timeout_seconds: Optional per-test limit; None waits indefinitely.

        Raises:
            IsolationError: If process forking is unavailable on this platform.
        """
        if capacity < MIN_CAPACITY:
            raise ValueError(f"Diagnostic capacity must be at least {MIN_CAPACITY} bytes")
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("Timeout must be positive")
        try:
            self._context = multiprocessing.get_context(START_METHOD)
        except ValueError as exc:
            raise IsolationError(
                f"Process isolation needs the '{START_METHOD}' start method, "
                "which this platform does not provide"
            ) from exc
        self.capacity = capacity
        self.timeout_seconds = timeout_seconds

    def run(self, body: Callable[[Any], None], data: Any, name: str = "test") -> IsolationOutcome:
        """
        Execute ``body(data)`` in a child process and wait for it.

        Args:
            body: The test body.
            data: The fixture data instance, already set up.
            name: Test name, used for the child process title and logging.

        Returns:
            The classified outcome.

        Raises:
            IsolationError: If the child process cannot be started.
        """
        channel = DiagnosticChannel(self.capacity, self._context)
        process = self._context.Process(
            target=_run_isolated,
            args=(body, data, channel),
            name=f"isotest[{name}]",
        )
        try:
            process.start()
        except OSError as exc:
            raise IsolationError(f"Could not start isolated process for '{name}': {exc}") from exc

        try:
            process.join(self.timeout_seconds)
            if process.is_alive():
                logger.warning(
                    "Test '%s' exceeded %ss, killing pid %s",
                    name,
                    self.timeout_seconds,
                    process.pid,
                )
                process.kill()
                process.join()
                return IsolationOutcome(
                    ExecutionStatus.CRASHED,
                    f"Test timed out after {self.timeout_seconds:g}s",
                    exit_code=process.exitcode,
                    signal_name="SIGKILL",
                    timed_out=True,
                )
            logger.debug("Test '%s' child exited with status %s", name, process.exitcode)
            return classify_exit(process.exitcode, channel.read())
        finally:
            process.close()
