"""
Tests for testing module Pydantic models.

Tests cover:
- TestDescriptor validation and immutability
- Display names of plain and parameterized tests
"""

import pytest
from pydantic import ValidationError

from isotest.testing.models import TestDescriptor


def _body(data: object) -> None:
    pass


class TestTestDescriptor:
    """Tests for TestDescriptor model."""

    def test_minimal_descriptor(self) -> None:
        """Name, fixture and body are enough."""
        descriptor = TestDescriptor(name="passes", fixture_id="simple", body=_body)
        assert descriptor.body is _body
        assert descriptor.case_setup is None
        assert descriptor.is_parametrized is False
        assert descriptor.display_name == "passes"

    def test_blank_name_rejected(self) -> None:
        """Whitespace-only names are invalid."""
        with pytest.raises(ValidationError):
            TestDescriptor(name="  ", fixture_id="simple", body=_body)

    def test_empty_fixture_rejected(self) -> None:
        """Empty fixture ids are invalid."""
        with pytest.raises(ValidationError):
            TestDescriptor(name="passes", fixture_id="", body=_body)

    def test_extra_fields_forbidden(self) -> None:
        """Unknown fields should be rejected."""
        with pytest.raises(ValidationError):
            TestDescriptor(
                name="passes",
                fixture_id="simple",
                body=_body,
                retries=3,  # type: ignore[call-arg]
            )

    def test_negative_case_index_rejected(self) -> None:
        """Case indices are zero-based."""
        with pytest.raises(ValidationError):
            TestDescriptor(name="p", fixture_id="simple", body=_body, case_index=-1)

    def test_frozen(self) -> None:
        """Descriptors are immutable once created."""
        descriptor = TestDescriptor(name="passes", fixture_id="simple", body=_body)
        with pytest.raises(ValidationError):
            descriptor.name = "renamed"  # type: ignore[misc]

    def test_parametrized_display_name(self) -> None:
        """Case tags should be appended to the display name."""
        descriptor = TestDescriptor(
            name="length",
            fixture_id="strings",
            body=_body,
            case_setup=_body,
            case_index=1,
            case_tag="text='hi'",
        )
        assert descriptor.is_parametrized is True
        assert descriptor.display_name == "length [text='hi']"

    def test_repr(self) -> None:
        """Repr should show fixture and display name."""
        descriptor = TestDescriptor(name="passes", fixture_id="simple", body=_body)
        assert repr(descriptor) == "TestDescriptor(simple::passes)"
