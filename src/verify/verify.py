"""Determinism verification for assembly dependency reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from report.run import run_validation

if TYPE_CHECKING:
    from pathlib import Path

    from report.text import ValidationReport
    from rules.config import DepsConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    report: ValidationReport
    mismatches: tuple[str, ...] = field(default_factory=tuple)


def verify_determinism(
    config: DepsConfig, *, base_dir: Path | None = None, jobs: int = 1
) -> DeterminismResult:
    """Verify that validation output is deterministic.

    Runs the full validation twice from scratch and compares each rendered
    section byte-for-byte.

    Args:
        config: Validated run configuration
        base_dir: Directory relative config paths are resolved against
        jobs: Worker threads for reading module metadata

    Returns:
        DeterminismResult carrying the first run's report and the headers of
        every section whose output differed between the two runs.
    """
    first = run_validation(config, base_dir=base_dir, jobs=jobs)
    second = run_validation(config, base_dir=base_dir, jobs=jobs)

    mismatches = [
        header
        for (header, body), (_, other_body) in zip(
            first.sections(), second.sections()
        )
        if body != other_body
    ]

    return DeterminismResult(
        ok=not mismatches,
        report=first,
        mismatches=tuple(mismatches),
    )
