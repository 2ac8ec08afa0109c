"""
Pydantic models for execution results and run summaries.

Follows patterns established in isotest.testing.models.
"""

from enum import Enum
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class ExecutionStatus(str, Enum):
    """Final classification of one test execution."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    CRASHED = "crashed"


class LifecycleState(str, Enum):
    """States a test descriptor moves through while being executed."""

    NOT_STARTED = "not_started"
    SETTING_UP = "setting_up"
    RUNNING = "running"
    TEARING_DOWN = "tearing_down"
    DONE = "done"


class Timing(BaseModel):
    """Wall-clock and CPU time spent in the isolated test body."""

    model_config = {"frozen": True}

    wall_seconds: float = Field(..., ge=0.0, description="Elapsed wall-clock seconds")
    cpu_seconds: float = Field(..., ge=0.0, description="User + system CPU seconds")


class ExecutionResult(BaseModel):
    """
    Result of executing a single test descriptor.

    The message is the diagnostic for FAILED/CRASHED, the reason for SKIPPED,
    and empty for PASSED.
    """

    model_config = {"frozen": True}

    name: str = Field(..., description="Display name of the executed test")
    fixture_id: str = Field(..., description="Owning fixture id")
    status: ExecutionStatus = Field(..., description="Final classification")
    message: str = Field(default="", description="Diagnostic or skip reason")
    timing: Timing | None = Field(default=None, description="Body timing, if it ran")

    # Isolation details
    exit_code: int | None = Field(default=None, description="Child exit status")
    signal_name: str | None = Field(default=None, description="Terminating signal, if any")

    @model_validator(mode="after")
    def message_matches_status(self) -> "ExecutionResult":
        """Non-pass outcomes need a diagnostic; passes carry none."""
        if self.status is ExecutionStatus.PASSED and self.message:
            raise ValueError("A passed result must not carry a diagnostic message")
        if self.status is not ExecutionStatus.PASSED and not self.message:
            raise ValueError(f"A {self.status.value} result requires a diagnostic message")
        return self

    @property
    def is_failure(self) -> bool:
        """Failed or crashed."""
        return self.status in (ExecutionStatus.FAILED, ExecutionStatus.CRASHED)

    def to_yaml(self) -> str:
        """Serialize to YAML format."""
        result: str = yaml.dump(
            self.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return result

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ExecutionResult":
        """Deserialize from YAML format."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data)


class RunSummary(BaseModel):
    """
    Running counts for a whole suite.

    Crashed tests are counted separately but reported under failures; the
    suite succeeds exactly when no test failed or crashed.
    """

    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    crashed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    teardown_errors: int = Field(default=0, ge=0, description="Teardown hooks that raised")

    def record(self, result: ExecutionResult) -> None:
        """Count one finished test."""
        if result.status is ExecutionStatus.PASSED:
            self.passed += 1
        elif result.status is ExecutionStatus.FAILED:
            self.failed += 1
        elif result.status is ExecutionStatus.CRASHED:
            self.crashed += 1
        else:
            self.skipped += 1

    def record_teardown_error(self) -> None:
        """Count a teardown hook that raised."""
        self.teardown_errors += 1

    @property
    def failed_total(self) -> int:
        """Failures including crashes."""
        return self.failed + self.crashed

    @property
    def total(self) -> int:
        """Number of tests recorded."""
        return self.passed + self.failed + self.crashed + self.skipped

    @property
    def success(self) -> bool:
        """Whether the suite as a whole passed."""
        return self.failed_total == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, including computed fields."""
        data = self.model_dump(mode="json")
        data["failed_total"] = self.failed_total
        data["total"] = self.total
        data["success"] = self.success
        return data
