"""Dependency linking between indexed modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from graph.model import ModuleRecord
from utils import module_file_name, module_key

if TYPE_CHECKING:
    from graph.model import ModuleIndex


def link_dependencies(index: ModuleIndex) -> list[ModuleRecord]:
    """Link every module's declared references and return the root modules.

    Each reference is linked to the indexed record with the same key, or to
    a ``missing`` placeholder when no scanned module matches. Placeholders
    are shared: every parent referencing the same key gets the same object.

    A referenced key is removed from the root candidates whether or not it
    resolves, so a module that is only someone's dependency is never a root.

    Args:
        index: Module index built by build_module_index

    Returns:
        Records never referenced by another scanned module, in index order.
    """
    root_candidates = dict(index)
    placeholders: dict[str, ModuleRecord] = {}

    for record in index.values():
        if record.parse_failed:
            continue

        for reference in record.references:
            name = module_file_name(reference.name)
            key = module_key(name, reference.version)

            root_candidates.pop(key, None)

            target = index.get(key)
            if target is None:
                target = placeholders.get(key)
            if target is None:
                target = ModuleRecord.placeholder(name, reference.version)
                placeholders[key] = target

            record.children[key] = target

    return list(root_candidates.values())


def build_key_graph(index: ModuleIndex) -> dict[str, set[str]]:
    """Project linked records onto a key -> child keys adjacency map."""
    graph: dict[str, set[str]] = {}
    for key, record in index.items():
        graph[key] = set(record.children)
    return graph


__all__ = ["build_key_graph", "link_dependencies"]
