"""Validation reporting for asmdeps."""

from report.export import report_to_json, write_json_report
from report.run import run_validation
from report.text import ValidationReport, build_report

__all__ = [
    "ValidationReport",
    "build_report",
    "report_to_json",
    "run_validation",
    "write_json_report",
]
