"""
Declarative front-end.

Decorators that turn module-level declarations into registry entries. They
only emit descriptors; no engine logic lives here.

Example:
    >>> @fixture
    ... class Strings:
    ...     text = ""
    >>> @setup(Strings)
    ... def _(data):
    ...     data.text = "hello"
    >>> @test(Strings)
    ... def length_is_five(data):
    ...     assert_eq(len(data.text), 5)
"""

import inspect
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

from isotest.testing.fixtures import FixtureDescriptor, FixtureHook
from isotest.testing.models import TestBody, TestDescriptor
from isotest.testing.parametrize import ParameterCase
from isotest.testing.registry import Registry, default_registry

# Class attribute carrying the fixture id of a decorated data class
FIXTURE_ATTR = "__isotest_fixture__"

# Fixture used by tests declared without one
DEFAULT_FIXTURE = "default"

FixtureRef = str | type | FixtureDescriptor


def _registry(registry: Registry | None) -> Registry:
    return registry if registry is not None else default_registry


def _fixture_id(ref: FixtureRef) -> str:
    if isinstance(ref, str):
        return ref
    if isinstance(ref, FixtureDescriptor):
        return ref.id
    # vars() so a subclass of a fixture class is not mistaken for the fixture
    fixture_id = vars(ref).get(FIXTURE_ATTR) if isinstance(ref, type) else None
    if fixture_id is None:
        raise TypeError(f"{ref!r} is not a fixture; decorate it with @fixture first")
    return str(fixture_id)


def _source(fn: Callable[..., Any]) -> str | None:
    try:
        filename = inspect.getsourcefile(fn) or inspect.getfile(fn)
    except TypeError:
        return None
    code = getattr(fn, "__code__", None)
    return f"{filename}:{code.co_firstlineno}" if code is not None else filename


def fixture(
    cls: type | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    registry: Registry | None = None,
) -> Any:
    """
    Register a class as a fixture's data layout.

    Each test bound to the fixture receives a fresh ``cls()`` instance. Works
    with or without arguments::

        @fixture
        class Buffer: ...

        @fixture(name="buffers")
        class Buffer: ...

    Args:
        cls: Data class (zero-argument constructible).
        name: Fixture id; defaults to the class name.
        description: Defaults to the first line of the class docstring.
        registry: Target registry (defaults to the process-wide one).
    """

    def decorate(target: type) -> type:
        if not isinstance(target, type):
            raise TypeError("@fixture decorates classes")
        fixture_id = name or target.__name__
        doc = inspect.getdoc(target) or ""
        _registry(registry).register_fixture(
            fixture_id,
            data_factory=target,
            description=description if description is not None else doc.split("\n")[0],
        )
        setattr(target, FIXTURE_ATTR, fixture_id)
        return target

    if cls is None:
        return decorate
    return decorate(cls)


def setup(
    ref: FixtureRef, *, registry: Registry | None = None
) -> Callable[[FixtureHook], FixtureHook]:
    """Install the decorated function as the fixture's setup hook."""
    fixture_id = _fixture_id(ref)

    def decorate(fn: FixtureHook) -> FixtureHook:
        _registry(registry).override_setup(fixture_id, fn)
        return fn

    return decorate


def teardown(
    ref: FixtureRef, *, registry: Registry | None = None
) -> Callable[[FixtureHook], FixtureHook]:
    """Install the decorated function as the fixture's teardown hook."""
    fixture_id = _fixture_id(ref)

    def decorate(fn: FixtureHook) -> FixtureHook:
        _registry(registry).override_teardown(fixture_id, fn)
        return fn

    return decorate


def _default_fixture(registry: Registry) -> str:
    if not registry.has_fixture(DEFAULT_FIXTURE):
        registry.register_fixture(
            DEFAULT_FIXTURE,
            data_factory=SimpleNamespace,
            description="Implicit fixture for tests declared without one",
        )
    return DEFAULT_FIXTURE


def test(
    ref: FixtureRef | TestBody | None = None,
    *,
    name: str | None = None,
    registry: Registry | None = None,
) -> Any:
    """
    Register the decorated function as a test body.

    ``@test`` alone binds the test to the implicit default fixture;
    ``@test(Fixture)`` binds it to a declared fixture.
    """
    target = _registry(registry)

    def register(body: TestBody, fixture_id: str) -> TestBody:
        target.register_test(
            TestDescriptor(
                name=name or body.__name__,
                fixture_id=fixture_id,
                body=body,
                source=_source(body),
            )
        )
        return body

    if inspect.isfunction(ref):
        return register(ref, _default_fixture(target))

    def decorate(body: TestBody) -> TestBody:
        fixture_id = _default_fixture(target) if ref is None else _fixture_id(ref)
        return register(body, fixture_id)

    return decorate


# Stop pytest from collecting the decorator itself when it is imported into a test module
test.__test__ = False  # type: ignore[attr-defined]


def parametrize(
    ref: FixtureRef | None,
    *cases: ParameterCase | FixtureHook,
    name: str | None = None,
    registry: Registry | None = None,
) -> Callable[[TestBody], TestBody]:
    """
    Register the decorated function once per parameter case.

    Example:
        >>> @parametrize(Strings, case(text="", expected=0), case(text="hi", expected=2))
        ... def length_matches(data):
        ...     assert_eq(len(data.text), data.expected)
    """
    target = _registry(registry)

    def decorate(body: TestBody) -> TestBody:
        fixture_id = _default_fixture(target) if ref is None else _fixture_id(ref)
        target.register_parametrized(
            name or body.__name__,
            fixture_id,
            body,
            list(cases),
            source=_source(body),
        )
        return body

    return decorate
