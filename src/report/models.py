"""Machine-readable report models.

This module contains the pydantic models written by ``--json-out``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from report.text import ValidationReport

# Schema version constant
SCHEMA_VERSION = 1


class HierarchyNode(BaseModel):
    """One line of the dependency hierarchy."""

    depth: int
    name: str
    version: str
    status: Literal["ok", "missing", "failed"]


class SystemModule(BaseModel):
    """A missing reference satisfied by a system path."""

    name: str
    version: str
    location: str


class ModuleRef(BaseModel):
    name: str
    version: str


class DuplicateModule(BaseModel):
    name: str
    version: str
    count: int
    locations: list[str]


class ReportSummary(BaseModel):
    """Counts that decide the pass/fail outcome."""

    missing: int
    failed_to_load: int
    duplicates: int
    system: int
    passed: bool


class ReportDocument(BaseModel):
    """Full validation report."""

    schema_version: int = Field(default=SCHEMA_VERSION)
    hierarchy: list[HierarchyNode] = Field(default_factory=list)
    system: list[SystemModule] = Field(default_factory=list)
    missing: list[ModuleRef] = Field(default_factory=list)
    failed_to_load: list[ModuleRef] = Field(default_factory=list)
    duplicates: list[DuplicateModule] = Field(default_factory=list)
    cycles: list[list[str]] = Field(default_factory=list)
    summary: ReportSummary

    @classmethod
    def from_report(cls, report: ValidationReport) -> ReportDocument:
        return cls(
            hierarchy=[
                HierarchyNode(
                    depth=e.depth, name=e.name, version=e.version, status=e.status
                )
                for e in report.hierarchy
            ],
            system=[
                SystemModule(name=e.name, version=e.version, location=e.location)
                for e in report.system
            ],
            missing=[ModuleRef(name=e.name, version=e.version) for e in report.missing],
            failed_to_load=[
                ModuleRef(name=e.name, version=e.version) for e in report.failed
            ],
            duplicates=[
                DuplicateModule(
                    name=e.name,
                    version=e.version,
                    count=len(e.locations),
                    locations=list(e.locations),
                )
                for e in report.duplicates
            ],
            cycles=report.cycles,
            summary=ReportSummary(
                missing=len(report.missing),
                failed_to_load=len(report.failed),
                duplicates=len(report.duplicates),
                system=len(report.system),
                passed=report.passed,
            ),
        )


__all__ = [
    "SCHEMA_VERSION",
    "DuplicateModule",
    "HierarchyNode",
    "ModuleRef",
    "ReportDocument",
    "ReportSummary",
    "SystemModule",
]
