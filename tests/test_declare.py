"""
Tests for the declarative front-end (isotest.declare).

Every test registers into its own Registry so the process-wide default
registry is left alone.
"""

from types import SimpleNamespace

import pytest

from isotest import declare
from isotest.assertions import assert_eq
from isotest.reporting.console import SilentReporter
from isotest.runtime.engine import ExecutionEngine
from isotest.runtime.models import ExecutionStatus
from isotest.testing.fixtures import DuplicateOverrideError
from isotest.testing.parametrize import case
from isotest.testing.registry import Registry


class TestFixtureDecorator:
    """Tests for @fixture."""

    def test_registers_class_as_data_factory(self) -> None:
        """The class becomes the fixture's data layout."""
        registry = Registry()

        @declare.fixture(registry=registry)
        class Buffer:
            """Scratch buffer for IO tests."""

            size = 16

        fixture = registry.get_fixture("Buffer")
        assert isinstance(fixture.new_instance(), Buffer)
        assert fixture.description == "Scratch buffer for IO tests."
        assert vars(Buffer)[declare.FIXTURE_ATTR] == "Buffer"

    def test_custom_name(self) -> None:
        """An explicit name overrides the class name."""
        registry = Registry()

        @declare.fixture(name="buffers", registry=registry)
        class Buffer:
            pass

        assert registry.has_fixture("buffers")

    def test_rejects_functions(self) -> None:
        """Only classes describe a data layout."""
        with pytest.raises(TypeError):
            declare.fixture(lambda: None, registry=Registry())  # type: ignore[arg-type]


class TestHookDecorators:
    """Tests for @setup and @teardown."""

    def test_setup_and_teardown(self) -> None:
        """Decorated functions become the fixture's hooks."""
        registry = Registry()

        @declare.fixture(registry=registry)
        class Strings:
            text = ""

        @declare.setup(Strings, registry=registry)
        def prepare(data: Strings) -> None:
            data.text = "hello"

        @declare.teardown(Strings, registry=registry)
        def release(data: Strings) -> None:
            data.text = ""

        fixture = registry.get_fixture("Strings")
        assert fixture.setup is prepare
        assert fixture.teardown is release

    def test_setup_twice_rejected(self) -> None:
        """A hook may only be declared once per fixture."""
        registry = Registry()
        registry.register_fixture("plain")
        declare.setup("plain", registry=registry)(lambda data: None)
        with pytest.raises(DuplicateOverrideError):
            declare.setup("plain", registry=registry)(lambda data: None)

    def test_undecorated_class_rejected(self) -> None:
        """Hooks need a fixture class, id or descriptor."""

        class NotAFixture:
            pass

        with pytest.raises(TypeError, match="not a fixture"):
            declare.setup(NotAFixture, registry=Registry())

    def test_subclass_is_not_the_fixture(self) -> None:
        """Inheriting from a fixture class does not make a fixture."""
        registry = Registry()

        @declare.fixture(registry=registry)
        class Base:
            pass

        class Derived(Base):
            pass

        with pytest.raises(TypeError):
            declare.teardown(Derived, registry=registry)


class TestTestDecorator:
    """Tests for @test and @parametrize."""

    def test_bare_decorator_uses_default_fixture(self) -> None:
        """@test without a fixture binds to the implicit one."""
        registry = Registry()

        def passes(data: SimpleNamespace) -> None:
            pass

        assert declare.test(passes, registry=registry) is passes
        (descriptor,) = registry.tests
        assert descriptor.name == "passes"
        assert descriptor.fixture_id == declare.DEFAULT_FIXTURE
        assert descriptor.source is not None
        assert descriptor.source.startswith(__file__)

    def test_bound_to_fixture_with_name(self) -> None:
        """@test(Fixture, name=...) binds and renames."""
        registry = Registry()

        @declare.fixture(registry=registry)
        class Strings:
            pass

        @declare.test(Strings, name="renamed", registry=registry)
        def original(data: Strings) -> None:
            pass

        (descriptor,) = registry.tests
        assert descriptor.name == "renamed"
        assert descriptor.fixture_id == "Strings"

    def test_parametrize(self) -> None:
        """@parametrize registers one test per case, in order."""
        registry = Registry()

        @declare.fixture(registry=registry)
        class Strings:
            value = ""
            expected = 0

        @declare.parametrize(
            Strings,
            case(value="", expected=0),
            case(value="hi", expected=2),
            registry=registry,
        )
        def length(data: Strings) -> None:
            assert_eq(len(data.value), data.expected)

        assert [t.display_name for t in registry.tests] == [
            "length [value='', expected=0]",
            "length [value='hi', expected=2]",
        ]

    def test_declared_suite_runs(self) -> None:
        """A suite declared through decorators runs end to end."""
        registry = Registry()

        @declare.fixture(registry=registry)
        class Counter:
            def __init__(self) -> None:
                self.n = 0

        @declare.setup(Counter, registry=registry)
        def start_at_one(data: Counter) -> None:
            data.n = 1

        @declare.test(Counter, registry=registry)
        def starts_at_one(data: Counter) -> None:
            assert_eq(data.n, 1)

        @declare.test(Counter, registry=registry)
        def wrong_start(data: Counter) -> None:
            assert_eq(data.n, 0)

        engine = ExecutionEngine(registry=registry, reporter=SilentReporter())
        engine.run()
        assert [r.status for r in engine.results] == [
            ExecutionStatus.PASSED,
            ExecutionStatus.FAILED,
        ]
