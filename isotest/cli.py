"""
isotest CLI - Command-line interface for the isolated test runner.

Provides commands for running and listing tests and for writing a starter
configuration file.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from isotest.config import ConfigError, ConfigLoader, RunnerConfig
from isotest.discovery import DiscoveryError, load_modules
from isotest.logging import configure_logging
from isotest.reporting.console import ConsoleReporter, Reporter, SilentReporter
from isotest.reporting.export import report_to_json, report_to_yaml
from isotest.runtime.engine import ExecutionEngine
from isotest.runtime.isolation import IsolationError
from isotest.testing.registry import default_registry

app = typer.Typer(
    name="isotest",
    help="Unit-test runner that executes every test in its own child process",
    add_completion=False,
)

console = Console()

FORMATS = ("console", "json", "yaml")

# Exit statuses
EXIT_FAILURES = 1
EXIT_USAGE = 2


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from isotest import __version__

        console.print(f"[bold blue]isotest[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """isotest - crash-proof unit test runner."""
    pass


def _error(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
    return typer.Exit(EXIT_USAGE)


def _load_config(config: str | None, **overrides: object) -> RunnerConfig:
    try:
        return ConfigLoader.load(config, **overrides)
    except FileNotFoundError:
        raise _error(f"Config file not found: {config}") from None
    except ConfigError as e:
        raise _error(str(e)) from e


def _discover(paths: list[Path]) -> None:
    default_registry.clear()
    try:
        load_modules(paths)
    except DiscoveryError as e:
        raise _error(str(e)) from e


@app.command()
def run(
    paths: list[Path] = typer.Argument(..., help="Test files or directories"),
    monochrome: bool = typer.Option(False, "--monochrome", help="Disable colors"),
    omit_runtime: bool = typer.Option(False, "--omit-runtime", help="Hide test timings"),
    omit_successes: bool = typer.Option(
        False, "--omit-successes", help="Only print tests that did not pass"
    ),
    timeout: float = typer.Option(None, "--timeout", "-t", help="Per-test time limit in seconds"),
    config: str = typer.Option(None, "--config", "-c", help="Path to YAML config file"),
    format_: str = typer.Option(
        "console", "--format", "-f", help="Output format: console, json, yaml"
    ),
    output: str = typer.Option(None, "--output", "-o", help="Also write the report to a file"),
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default WARNING)"),
) -> None:
    """
    Discover and run tests, each in an isolated child process.

    Exits with status 1 when any test failed or crashed, and 2 when the
    configuration or a test module could not be loaded.
    """
    if format_ not in FORMATS:
        raise _error(f"Unknown format: {format_}. Available: {', '.join(FORMATS)}")

    # Unset flags are passed as None so YAML and environment values still apply
    cfg = _load_config(
        config,
        monochrome=monochrome or None,
        omit_runtime=omit_runtime or None,
        omit_successes=omit_successes or None,
        timeout_seconds=timeout,
        log_level=log_level,
    )
    configure_logging(cfg.log_level, color=not cfg.monochrome)
    _discover(paths)

    report_console: Console | None = None
    reporter: Reporter
    if format_ == "console":
        report_console = Console(
            color_system=None if cfg.monochrome else "auto",
            highlight=False,
            record=output is not None,
        )
        reporter = ConsoleReporter.from_config(cfg, console=report_console)
    else:
        reporter = SilentReporter()

    engine = ExecutionEngine(registry=default_registry, config=cfg, reporter=reporter)
    try:
        summary = engine.run()
    except IsolationError as e:
        raise _error(str(e)) from e

    if format_ == "console":
        if output and report_console is not None:
            report_console.save_text(output)
    else:
        text = (
            report_to_json(engine.results, summary)
            if format_ == "json"
            else report_to_yaml(engine.results, summary)
        )
        if output:
            Path(output).write_text(text)
        typer.echo(text)

    if not summary.success:
        raise typer.Exit(EXIT_FAILURES)


@app.command("list")
def list_tests(
    paths: list[Path] = typer.Argument(..., help="Test files or directories"),
) -> None:
    """
    List registered tests in execution order without running them.
    """
    _discover(paths)

    tests = default_registry.tests
    if not tests:
        console.print("[yellow]No tests found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Fixture", style="cyan", no_wrap=True)
    table.add_column("Test", no_wrap=True)
    table.add_column("Source", style="dim", overflow="fold")
    for index, descriptor in enumerate(tests, start=1):
        table.add_row(
            str(index),
            descriptor.fixture_id,
            descriptor.display_name,
            descriptor.source or "",
        )
    console.print(table)
    fixtures = len(default_registry.fixtures)
    console.print(f"\n[bold]{len(tests)}[/bold] test(s) in {fixtures} fixture(s)")


@app.command()
def init(
    path: str = typer.Argument(".", help="Directory to initialize"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """
    Write a starter isotest.yaml configuration file.
    """
    target_dir = Path(path)
    if not target_dir.is_dir():
        raise _error(f"Directory not found: {path}")

    config_file = target_dir / "isotest.yaml"
    if config_file.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {config_file}")
        console.print("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    config_file.write_text(ConfigLoader.generate_sample_config())

    console.print(
        Panel(
            f"[green]✓[/green] Created configuration: {config_file}\n"
            f"[dim]Run [cyan]isotest run --config {config_file} <path>[/cyan][/dim]",
            title="isotest",
            border_style="blue",
        )
    )
