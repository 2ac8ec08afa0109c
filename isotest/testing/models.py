"""
Pydantic models for registered tests.

A TestDescriptor is the record the front-end emits for every runnable test:
its name, the fixture it binds to and the body to execute. Parameterized
tests expand into one descriptor per case, each carrying its own parameter
block and a tag that keeps report names unique.
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, field_validator

TestBody = Callable[[Any], None]


class TestDescriptor(BaseModel):
    """
    Immutable record of a single runnable test.

    Example:
        >>> descriptor = TestDescriptor(
        ...     name="strlen_returns_length",
        ...     fixture_id="strings",
        ...     body=lambda data: None,
        ... )
        >>> descriptor.display_name
        'strlen_returns_length'
    """

    __test__ = False

    model_config = {"frozen": True, "extra": "forbid", "arbitrary_types_allowed": True}

    name: str = Field(..., description="Test name as declared", min_length=1)
    fixture_id: str = Field(..., description="Id of the owning fixture", min_length=1)
    body: TestBody = Field(..., description="Callable receiving the fixture data instance")

    # Parameterization
    case_setup: TestBody | None = Field(
        default=None, description="Parameter block run after fixture setup"
    )
    case_index: int | None = Field(default=None, description="Zero-based case index", ge=0)
    case_tag: str | None = Field(default=None, description="Stable per-case tag")

    # Metadata
    source: str | None = Field(default=None, description="Declaration site (file:line)")

    @field_validator("name", "fixture_id")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Validate that identifiers are not whitespace-only."""
        if not v.strip():
            raise ValueError("Identifiers must not be empty or whitespace-only")
        return v

    @property
    def is_parametrized(self) -> bool:
        """Whether this descriptor is one case of a parameterized test."""
        return self.case_index is not None

    @property
    def display_name(self) -> str:
        """Name used in reports; unique within the owning fixture."""
        if self.case_tag:
            return f"{self.name} [{self.case_tag}]"
        return self.name

    def __repr__(self) -> str:
        return f"TestDescriptor({self.fixture_id}::{self.display_name})"
