"""
Fixture descriptors and lifecycle hooks.

A fixture groups tests that share a data layout and optional setup/teardown
hooks. Every test execution receives a fresh data instance produced by the
fixture's data factory; the instance is owned by that execution alone and is
dropped as soon as teardown returns.

Hooks start out as no-ops and may each be overridden exactly once, during the
registration phase, before any test bound to the fixture runs.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

FixtureHook = Callable[[Any], None]
DataFactory = Callable[[], Any]


def noop_hook(data: Any) -> None:
    """Default setup/teardown hook."""


# =============================================================================
# Custom Exceptions
# =============================================================================


class DuplicateFixtureError(ValueError):
    """Raised when attempting to register a fixture with an existing id."""

    def __init__(self, fixture_id: str) -> None:
        self.fixture_id = fixture_id
        super().__init__(f"Fixture '{fixture_id}' is already registered")


class FixtureNotFoundError(KeyError):
    """Raised when a fixture id is not present in the registry."""

    def __init__(self, fixture_id: str) -> None:
        self.fixture_id = fixture_id
        super().__init__(f"Fixture '{fixture_id}' not found in registry")


class DuplicateOverrideError(ValueError):
    """Raised when a fixture hook is overridden a second time."""

    def __init__(self, fixture_id: str, hook: str) -> None:
        self.fixture_id = fixture_id
        self.hook = hook
        super().__init__(f"Fixture '{fixture_id}' already has a custom {hook} hook")


# =============================================================================
# Fixture Descriptor
# =============================================================================


@dataclass
class FixtureDescriptor:
    """Registered fixture: identity, data layout and lifecycle hooks.

    Example:
        >>> descriptor = FixtureDescriptor(id="strings")
        >>> descriptor.override_setup(lambda data: setattr(data, "text", ""))
        >>> data = descriptor.new_instance()
        >>> descriptor.setup(data)
        >>> data.text
        ''
    """

    id: str
    data_factory: DataFactory = SimpleNamespace
    description: str = ""
    setup: FixtureHook = noop_hook
    teardown: FixtureHook = noop_hook
    setup_overridden: bool = field(default=False, init=False)
    teardown_overridden: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Fixture id must not be empty or whitespace-only")
        if not callable(self.data_factory):
            raise TypeError(f"Fixture '{self.id}' data factory must be callable")

    def override_setup(self, fn: FixtureHook) -> None:
        """Replace the no-op setup hook.

        Raises:
            DuplicateOverrideError: If setup was already overridden.
        """
        if self.setup_overridden:
            raise DuplicateOverrideError(self.id, "setup")
        self.setup = _checked_hook(self.id, fn)
        self.setup_overridden = True

    def override_teardown(self, fn: FixtureHook) -> None:
        """Replace the no-op teardown hook.

        Raises:
            DuplicateOverrideError: If teardown was already overridden.
        """
        if self.teardown_overridden:
            raise DuplicateOverrideError(self.id, "teardown")
        self.teardown = _checked_hook(self.id, fn)
        self.teardown_overridden = True

    def new_instance(self) -> Any:
        """Allocate a fresh data instance for one test execution."""
        return self.data_factory()

    def __repr__(self) -> str:
        hooks = [
            name
            for name, overridden in (
                ("setup", self.setup_overridden),
                ("teardown", self.teardown_overridden),
            )
            if overridden
        ]
        return f"FixtureDescriptor(id={self.id!r}, hooks={hooks})"


def _checked_hook(fixture_id: str, fn: FixtureHook) -> FixtureHook:
    if not callable(fn):
        raise TypeError(f"Hook for fixture '{fixture_id}' must be callable")
    return fn
