"""
Console reporter.

Prints a banner when the run starts, one status line per finished test and a
summary at the end:

    ================================ BEGIN TEST RUN ================================
    [PASS] (  0.001/  0.004s) strlen_returns_length
    [FAIL] (  0.001/  0.004s) all_assertions
    | Assertion failed at tests/example.py:42
    | Expression is false: 4 == 5
    [HALT] (  0.000/  0.003s) segfault_does_not_crash
    | Test halted due to signal sigsegv (code 11)
    ================================= TEST SUMMARY =================================
    Test(s) passed: 1
    Test(s) failed: 2 (1 crashed)
    Total tests: 3

Styling uses rich Text spans rather than markup, so test names and
diagnostics containing brackets print verbatim.
"""

from typing import Protocol

from rich.console import Console
from rich.text import Text

from isotest.config import RunnerConfig
from isotest.runtime.models import ExecutionResult, ExecutionStatus, RunSummary

# Status -> (tag, style)
STATUS_TAGS: dict[ExecutionStatus, tuple[str, str]] = {
    ExecutionStatus.PASSED: ("PASS", "bold green"),
    ExecutionStatus.FAILED: ("FAIL", "bold red"),
    ExecutionStatus.SKIPPED: ("SKIP", "bold bright_black"),
    ExecutionStatus.CRASHED: ("HALT", "bold red"),
}


class Reporter(Protocol):
    """Observer of a test run."""

    def begin(self, total: int) -> None:
        """Called once before the first test runs."""
        ...

    def report(self, result: ExecutionResult) -> None:
        """Called once per finished test."""
        ...

    def finish(self, summary: RunSummary) -> None:
        """Called once after the last test."""
        ...


class SilentReporter:
    """Reporter that prints nothing; used for machine-readable output."""

    def begin(self, total: int) -> None:
        pass

    def report(self, result: ExecutionResult) -> None:
        pass

    def finish(self, summary: RunSummary) -> None:
        pass


class ConsoleReporter:
    """
    Human-readable report on a rich Console.

    Example:
        >>> reporter = ConsoleReporter(monochrome=True, omit_runtime=True)
        >>> reporter.begin(total=0)
    """

    def __init__(
        self,
        monochrome: bool = False,
        omit_runtime: bool = False,
        omit_successes: bool = False,
        console: Console | None = None,
    ):
        """
        Initialize the reporter.

        Args:
            monochrome: Disable all styling.
            omit_runtime: Leave timing fields out of status lines.
            omit_successes: Print no line for passed tests.
            console: Console to print on (defaults to stdout).
        """
        self.monochrome = monochrome
        self.omit_runtime = omit_runtime
        self.omit_successes = omit_successes
        self.console = console or Console(
            color_system=None if monochrome else "auto",
            highlight=False,
        )

    @classmethod
    def from_config(cls, config: RunnerConfig, console: Console | None = None) -> "ConsoleReporter":
        """Create a reporter from the report options of a RunnerConfig."""
        return cls(
            monochrome=config.monochrome,
            omit_runtime=config.omit_runtime,
            omit_successes=config.omit_successes,
            console=console,
        )

    def _style(self, style: str) -> str:
        return "" if self.monochrome else style

    def begin(self, total: int) -> None:
        """Print the run banner."""
        self.console.rule(
            Text("BEGIN TEST RUN", style=self._style("bold")),
            characters="=",
            style=self._style("blue"),
        )

    def report(self, result: ExecutionResult) -> None:
        """Print the status line and diagnostic block for one test."""
        if self.omit_successes and result.status is ExecutionStatus.PASSED:
            return

        tag, style = STATUS_TAGS[result.status]
        line = Text()
        line.append(f"[{tag}]", style=self._style(style))
        if (
            not self.omit_runtime
            and result.timing is not None
            and result.status is not ExecutionStatus.SKIPPED
        ):
            timing = result.timing
            line.append(
                f" ({timing.cpu_seconds:7.3f}/{timing.wall_seconds:7.3f}s)",
                style=self._style("cyan"),
            )
        line.append(f" {result.name}")
        self.console.print(line, soft_wrap=True)

        for message_line in result.message.splitlines():
            self.console.print(
                Text(f"| {message_line}", style=self._style("bright_black")),
                soft_wrap=True,
            )

    def finish(self, summary: RunSummary) -> None:
        """Print the summary block."""
        self.console.print()
        self.console.rule(
            Text("TEST SUMMARY", style=self._style("bold")),
            characters="=",
            style=self._style("blue"),
        )

        if summary.success:
            self._line(f"All {summary.passed} tests passed!", "bold green")
        else:
            self._line(f"Test(s) passed: {summary.passed}", "green")
            failed = f"Test(s) failed: {summary.failed_total}"
            if summary.crashed:
                failed += f" ({summary.crashed} crashed)"
            self._line(failed, "bold red")

        if summary.skipped:
            self._line(f"Test(s) skipped: {summary.skipped}", "yellow")
        if summary.teardown_errors:
            self._line(f"Teardown error(s): {summary.teardown_errors}", "red")
        self._line(f"Total tests: {summary.total}", "bold")

    def _line(self, text: str, style: str) -> None:
        self.console.print(Text(text, style=self._style(style)), soft_wrap=True)
