"""
In-test control flow signals.

A failing assertion or a skip directive ends the running test on the spot.
Both unwind as BaseException subclasses so that a test body's own
``except Exception`` handlers cannot swallow them; they are caught only at
the isolation boundary (or by the engine while running fixture setup).
"""


class OutcomeSignal(BaseException):
    """Base class for signals that terminate the current test."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AssertionFailed(OutcomeSignal):
    """Raised by a failing assertion. Carries the rendered diagnostic."""

    def __init__(self, message: str, location: str | None = None) -> None:
        self.location = location
        super().__init__(message)

    @property
    def diagnostic(self) -> str:
        """Full diagnostic text written to the diagnostic channel."""
        if self.location:
            return f"Assertion failed at {self.location}\n{self.message}"
        return self.message


class SkipRequested(OutcomeSignal):
    """Raised by a skip directive. Carries the caller's reason."""

    @property
    def reason(self) -> str:
        return self.message


def skip(reason: str) -> None:
    """Skip the current test unconditionally.

    Args:
        reason: Non-empty explanation shown in the report.

    Raises:
        SkipRequested: Always, unless the reason is empty.
        ValueError: If the reason is empty.
    """
    skip_if(True, reason)


def skip_if(condition: object, reason: str) -> None:
    """Skip the current test if ``condition`` is truthy; otherwise do nothing."""
    if not reason or not str(reason).strip():
        raise ValueError("A skip directive requires a non-empty reason")
    if condition:
        raise SkipRequested(str(reason))
