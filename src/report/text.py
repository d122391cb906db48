"""Validation report assembly and console rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from report.sections import (
    DuplicateEntry,
    HierarchyEntry,
    ModuleEntry,
    SystemEntry,
    build_duplicate_section,
    build_failed_section,
    build_hierarchy,
    build_missing_section,
    build_system_section,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graph.model import ModuleIndex, ModuleRecord
    from rules.classifier import SystemResolver

HIERARCHY_HEADER = "=== Assembly Dependencies ==="
SYSTEM_HEADER = "=== System DLLs ==="
MISSING_HEADER = "=== Missing DLLs ==="
FAILED_HEADER = "=== Failed to load ==="
DUPLICATE_HEADER = "=== Duplicate DLLs ==="
SUMMARY_HEADER = "=== Summary ==="

INDENT = "    "
LOCATION_INDENT = "   "
EMPTY_SECTION = "none"

_STATUS_SUFFIX = {
    "ok": "",
    "missing": " - missing!",
    "failed": " - failed to load!",
}


@dataclass
class ValidationReport:
    hierarchy: list[HierarchyEntry] = field(default_factory=list)
    system: list[SystemEntry] = field(default_factory=list)
    missing: list[ModuleEntry] = field(default_factory=list)
    failed: list[ModuleEntry] = field(default_factory=list)
    duplicates: list[DuplicateEntry] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.missing and not self.failed and not self.duplicates

    def sections(self) -> list[tuple[str, list[str]]]:
        """Rendered (header, body lines) pairs in report order."""
        return [
            (HIERARCHY_HEADER, _hierarchy_lines(self.hierarchy)),
            (SYSTEM_HEADER, _or_none([_system_line(e) for e in self.system])),
            (MISSING_HEADER, _or_none([_module_line(e) for e in self.missing])),
            (FAILED_HEADER, _or_none([_module_line(e) for e in self.failed])),
            (DUPLICATE_HEADER, _or_none(_duplicate_lines(self.duplicates))),
            (SUMMARY_HEADER, self.summary_lines()),
        ]

    def summary_lines(self) -> list[str]:
        outcome = "Passed" if self.passed else "Failed"
        return [
            f"{len(self.missing)} missing dlls.",
            f"{len(self.failed)} dlls failed to load.",
            f"{len(self.duplicates)} duplicate dlls.",
            "",
            f"{outcome} assembly dependency validation.",
        ]

    def render(self) -> str:
        lines: list[str] = []
        for header, body in self.sections():
            if lines:
                lines.append("")
            lines.append(header)
            lines.extend(body)
        return "\n".join(lines) + "\n"


def _or_none(lines: list[str]) -> list[str]:
    return lines or [EMPTY_SECTION]


def _hierarchy_lines(entries: Iterable[HierarchyEntry]) -> list[str]:
    return [
        f"{INDENT * e.depth}{e.name} ({e.version}){_STATUS_SUFFIX[e.status]}"
        for e in entries
    ]


def _system_line(entry: SystemEntry) -> str:
    return f"{entry.name} ({entry.version}) => {entry.location}"


def _module_line(entry: ModuleEntry) -> str:
    return f"{entry.name} ({entry.version})"


def _duplicate_lines(entries: Iterable[DuplicateEntry]) -> list[str]:
    lines: list[str] = []
    for entry in entries:
        lines.append(f"{entry.name} ({entry.version}): {len(entry.locations)}")
        lines.extend(f"{LOCATION_INDENT}{location}" for location in entry.locations)
    return lines


def build_report(
    index: ModuleIndex,
    roots: Iterable[ModuleRecord],
    resolver: SystemResolver,
) -> ValidationReport:
    """Build every report section from a linked module graph."""
    roots = list(roots)
    return ValidationReport(
        hierarchy=build_hierarchy(roots, resolver),
        system=build_system_section(roots, resolver),
        missing=build_missing_section(roots, resolver),
        failed=build_failed_section(index, resolver),
        duplicates=build_duplicate_section(index),
    )


__all__ = [
    "DUPLICATE_HEADER",
    "FAILED_HEADER",
    "HIERARCHY_HEADER",
    "MISSING_HEADER",
    "SUMMARY_HEADER",
    "SYSTEM_HEADER",
    "ValidationReport",
    "build_report",
]
