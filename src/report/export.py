"""JSON export of validation reports."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from report.models import ReportDocument

if TYPE_CHECKING:
    from pathlib import Path

    from report.text import ValidationReport


def report_to_json(report: ValidationReport) -> bytes:
    payload = ReportDocument.from_report(report).model_dump()
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(payload, option=opts)


def write_json_report(path: Path, report: ValidationReport) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(report_to_json(report))


__all__ = ["report_to_json", "write_json_report"]
