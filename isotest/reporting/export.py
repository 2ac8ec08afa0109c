"""
Machine-readable run reports (JSON and YAML).
"""

import json
from typing import Any

import yaml

from isotest.runtime.models import ExecutionResult, RunSummary


def report_to_dict(results: list[ExecutionResult], summary: RunSummary) -> dict[str, Any]:
    """Convert a finished run to a plain dictionary."""
    return {
        "summary": summary.to_dict(),
        "results": [result.model_dump(mode="json") for result in results],
    }


def report_to_json(results: list[ExecutionResult], summary: RunSummary) -> str:
    """Serialize a finished run to JSON."""
    return json.dumps(report_to_dict(results, summary), indent=2)


def report_to_yaml(results: list[ExecutionResult], summary: RunSummary) -> str:
    """Serialize a finished run to YAML."""
    result: str = yaml.dump(
        report_to_dict(results, summary),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return result
