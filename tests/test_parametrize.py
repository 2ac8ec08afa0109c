"""
Tests for isotest.testing.parametrize.

Covers case declaration, tag derivation, expansion into descriptors and
setup composition.
"""

from types import SimpleNamespace

import pytest

from isotest.testing.fixtures import FixtureDescriptor
from isotest.testing.models import TestDescriptor
from isotest.testing.parametrize import ParameterCase, case, compose_setup, expand


def _body(data: object) -> None:
    pass


# =============================================================================
# case() Tests
# =============================================================================


class TestCaseHelper:
    """Tests for the case() helper."""

    def test_keyword_values_are_assigned(self) -> None:
        """Keyword values should land as attributes on the data instance."""
        parameter = case(text="hi", expected=2)
        data = SimpleNamespace()
        parameter.apply(data)
        assert data.text == "hi"
        assert data.expected == 2

    def test_keyword_tag(self) -> None:
        """Keyword cases should be tagged with their values."""
        assert case(text="", expected=0).tag == "text='', expected=0"

    def test_explicit_tag_wins(self) -> None:
        """An explicit tag replaces the derived one."""
        assert case(text="", tag="empty").tag == "empty"

    def test_values_are_copied_per_instance(self) -> None:
        """Mutable values must not be shared between executions."""
        parameter = case(items=[1, 2])
        first, second = SimpleNamespace(), SimpleNamespace()
        parameter.apply(first)
        parameter.apply(second)
        first.items.append(3)
        assert second.items == [1, 2]

    def test_block_case(self) -> None:
        """A callable block runs against the instance."""
        parameter = case(lambda data: setattr(data, "n", 7))
        data = SimpleNamespace()
        parameter.apply(data)
        assert data.n == 7
        assert parameter.tag is None

    def test_block_and_values_rejected(self) -> None:
        """A case is either a block or keyword values."""
        with pytest.raises(ValueError, match="either a block or keyword values"):
            case(lambda data: None, text="x")

    def test_non_callable_block_rejected(self) -> None:
        """Blocks must be callable."""
        with pytest.raises(TypeError):
            case("nope")  # type: ignore[arg-type]


# =============================================================================
# expand() Tests
# =============================================================================


class TestExpand:
    """Tests for expanding a parameterized test."""

    def test_one_descriptor_per_case(self) -> None:
        """K cases should yield K descriptors sharing one body."""
        descriptors = expand(
            "length", "strings", _body, [case(text="", expected=0), case(text="hi", expected=2)]
        )
        assert len(descriptors) == 2
        assert all(isinstance(d, TestDescriptor) for d in descriptors)
        assert all(d.body is _body for d in descriptors)
        assert [d.case_index for d in descriptors] == [0, 1]
        assert [d.display_name for d in descriptors] == [
            "length [text='', expected=0]",
            "length [text='hi', expected=2]",
        ]

    def test_each_case_carries_its_own_block(self) -> None:
        """Case k's setup should run parameter block k."""
        descriptors = expand("n", "numbers", _body, [case(n=1), case(n=2), case(n=3)])
        values = []
        for descriptor in descriptors:
            data = SimpleNamespace()
            assert descriptor.case_setup is not None
            descriptor.case_setup(data)
            values.append(data.n)
        assert values == [1, 2, 3]

    def test_bare_callables_tagged_by_line(self) -> None:
        """Blocks without a tag should be tagged with their declaration line."""

        def first(data: object) -> None:
            pass

        (descriptor,) = expand("n", "numbers", _body, [first])
        assert descriptor.case_tag == f"L{first.__code__.co_firstlineno}"

    def test_colliding_tags_disambiguated(self) -> None:
        """Cases declared on the same line should still get distinct names."""
        blocks = [lambda d: None, lambda d: None]
        descriptors = expand("n", "numbers", _body, blocks)
        names = [d.display_name for d in descriptors]
        assert len(set(names)) == 2
        assert names[0].endswith("#0]")
        assert names[1].endswith("#1]")

    def test_source_recorded(self) -> None:
        """The declaration site should be kept on every case."""
        descriptors = expand("n", "numbers", _body, [case(n=1)], source="suite.py:3")
        assert descriptors[0].source == "suite.py:3"

    def test_no_cases_rejected(self) -> None:
        """A parameterized test needs at least one case."""
        with pytest.raises(ValueError, match="at least one case"):
            expand("n", "numbers", _body, [])

    def test_parameter_case_passthrough(self) -> None:
        """ParameterCase instances are used as given."""
        parameter = ParameterCase(block=lambda d: None, tag="explicit")
        (descriptor,) = expand("n", "numbers", _body, [parameter])
        assert descriptor.case_tag == "explicit"


# =============================================================================
# compose_setup() Tests
# =============================================================================


class TestComposeSetup:
    """Tests for composing fixture setup with a case block."""

    def test_plain_test_uses_fixture_setup(self) -> None:
        """Without a case block, the fixture setup is used unchanged."""
        fixture = FixtureDescriptor(id="strings")
        descriptor = TestDescriptor(name="t", fixture_id="strings", body=_body)
        assert compose_setup(fixture, descriptor) is fixture.setup

    def test_fixture_setup_runs_before_case(self) -> None:
        """The case block should see (and may override) what setup prepared."""
        calls: list[str] = []
        fixture = FixtureDescriptor(id="strings")

        def fixture_setup(data: SimpleNamespace) -> None:
            calls.append("fixture")
            data.text = "default"

        fixture.override_setup(fixture_setup)

        def block(data: SimpleNamespace) -> None:
            calls.append("case")
            data.text = "case"

        (descriptor,) = expand("t", "strings", _body, [block])
        data = SimpleNamespace()
        compose_setup(fixture, descriptor)(data)
        assert calls == ["fixture", "case"]
        assert data.text == "case"
