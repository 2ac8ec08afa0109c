"""
isotest Reporting.

Console and machine-readable run reports.
"""

from isotest.reporting.console import (
    STATUS_TAGS,
    ConsoleReporter,
    Reporter,
    SilentReporter,
)
from isotest.reporting.export import report_to_dict, report_to_json, report_to_yaml

__all__ = [
    "STATUS_TAGS",
    "ConsoleReporter",
    "Reporter",
    "SilentReporter",
    "report_to_dict",
    "report_to_json",
    "report_to_yaml",
]
