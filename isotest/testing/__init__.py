"""
isotest Registry.

Fixture and test descriptors, the two-phase registry and the
parameterization expander.
"""

from isotest.testing.fixtures import (
    DuplicateFixtureError,
    DuplicateOverrideError,
    FixtureDescriptor,
    FixtureNotFoundError,
    noop_hook,
)
from isotest.testing.models import TestDescriptor
from isotest.testing.parametrize import ParameterCase, case, compose_setup, expand
from isotest.testing.registry import (
    DuplicateTestError,
    Registry,
    RegistrySealedError,
    default_registry,
)

__all__ = [
    # Fixtures
    "DuplicateFixtureError",
    "DuplicateOverrideError",
    "FixtureDescriptor",
    "FixtureNotFoundError",
    "noop_hook",
    # Tests
    "TestDescriptor",
    # Parameterization
    "ParameterCase",
    "case",
    "compose_setup",
    "expand",
    # Registry
    "DuplicateTestError",
    "Registry",
    "RegistrySealedError",
    "default_registry",
]
