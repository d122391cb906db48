"""Report section builders.

Each builder walks the linked module graph (or the flat module index) and
returns structured entries; rendering to text or JSON happens elsewhere.
Visited sets are created per call and traversals use an explicit stack, so
builders can be run any number of times against the same graph.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from graph.model import ModuleIndex, ModuleRecord
    from rules.classifier import SystemResolver

NodeStatus = Literal["ok", "missing", "failed"]


@dataclass(frozen=True)
class HierarchyEntry:
    depth: int
    name: str
    version: str
    status: NodeStatus


@dataclass(frozen=True)
class SystemEntry:
    name: str
    version: str
    location: str


@dataclass(frozen=True)
class ModuleEntry:
    name: str
    version: str


@dataclass(frozen=True)
class DuplicateEntry:
    name: str
    version: str
    locations: tuple[str, ...]


def _sorted(records: Iterable[ModuleRecord]) -> list[ModuleRecord]:
    return sorted(records, key=lambda record: record.sort_key())


def _node_status(record: ModuleRecord, resolver: SystemResolver) -> NodeStatus:
    if record.parse_failed:
        return "failed"
    if (
        record.missing
        and not resolver.is_excluded(record.name)
        and resolver.locate(record) is None
    ):
        return "missing"
    return "ok"


def _push_children(
    stack: list[tuple[ModuleRecord, int]], records: Iterable[ModuleRecord], depth: int
) -> None:
    # Reversed so the first name in sort order is popped first.
    stack.extend((record, depth) for record in reversed(_sorted(records)))


def build_hierarchy(
    roots: Iterable[ModuleRecord], resolver: SystemResolver
) -> list[HierarchyEntry]:
    """Depth-first, name-sorted dependency tree starting at the roots."""
    entries: list[HierarchyEntry] = []
    seen_names: set[str] = set()
    stack: list[tuple[ModuleRecord, int]] = []
    _push_children(stack, roots, 0)

    while stack:
        record, depth = stack.pop()
        entries.append(
            HierarchyEntry(
                depth=depth,
                name=record.name,
                version=record.display_version,
                status=_node_status(record, resolver),
            )
        )
        # Only the first occurrence of a name is expanded, whatever its version.
        if record.name in seen_names:
            continue
        seen_names.add(record.name)
        _push_children(stack, record.children.values(), depth + 1)

    return entries


def _iter_missing(roots: Iterable[ModuleRecord]) -> Iterator[ModuleRecord]:
    """Yield each missing node whose name has not been reported yet.

    Siblings are visited in name order. Scanned nodes are expanded once
    each (by key), which keeps the walk finite on cyclic graphs without
    changing which names are found first.
    """
    reported_names: set[str] = set()
    expanded_keys: set[str] = set()
    stack = list(reversed(_sorted(roots)))

    while stack:
        record = stack.pop()
        if record.missing and record.name not in reported_names:
            reported_names.add(record.name)
            yield record

        if record.key in expanded_keys:
            continue
        expanded_keys.add(record.key)
        stack.extend(reversed(_sorted(record.children.values())))


def build_system_section(
    roots: Iterable[ModuleRecord], resolver: SystemResolver
) -> list[SystemEntry]:
    """Missing references that resolve against a system path."""
    entries: list[SystemEntry] = []
    for record in _iter_missing(roots):
        location = resolver.locate(record)
        if location is not None:
            entries.append(
                SystemEntry(
                    name=record.name,
                    version=record.display_version,
                    location=location,
                )
            )
    return entries


def build_missing_section(
    roots: Iterable[ModuleRecord], resolver: SystemResolver
) -> list[ModuleEntry]:
    """Missing references that are neither resolvable nor excluded."""
    entries: list[ModuleEntry] = []
    for record in _iter_missing(roots):
        if resolver.locate(record) is not None:
            continue
        if resolver.is_excluded(record.name):
            continue
        entries.append(ModuleEntry(name=record.name, version=record.display_version))
    return entries


def build_failed_section(
    index: ModuleIndex, resolver: SystemResolver
) -> list[ModuleEntry]:
    """Scanned files whose metadata could not be read, minus exclusions."""
    return [
        ModuleEntry(name=record.name, version=record.display_version)
        for record in index.values()
        if record.parse_failed and not resolver.is_excluded(record.name)
    ]


def build_duplicate_section(index: ModuleIndex) -> list[DuplicateEntry]:
    """Modules found at more than one location."""
    return [
        DuplicateEntry(
            name=record.name,
            version=record.display_version,
            locations=tuple(record.locations),
        )
        for record in index.values()
        if record.is_duplicate
    ]


__all__ = [
    "DuplicateEntry",
    "HierarchyEntry",
    "ModuleEntry",
    "NodeStatus",
    "SystemEntry",
    "build_duplicate_section",
    "build_failed_section",
    "build_hierarchy",
    "build_missing_section",
    "build_system_section",
]
