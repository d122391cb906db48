from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from graph.algos import find_cycles
from graph.builder import build_key_graph, link_dependencies
from graph.index import build_module_index
from parse.assembly_metadata import read_assembly_metadata
from report.text import ValidationReport, build_report
from rules.classifier import SystemResolver

if TYPE_CHECKING:
    from collections.abc import Callable

    from parse.assembly_metadata import AssemblyMetadata, ParseFailure
    from rules.config import DepsConfig

    MetadataReader = Callable[[Path], "AssemblyMetadata | ParseFailure"]

logger = logging.getLogger(__name__)


def run_validation(
    config: DepsConfig,
    *,
    base_dir: Path | None = None,
    jobs: int = 1,
    reader: MetadataReader = read_assembly_metadata,
) -> ValidationReport:
    """Scan, link, and classify modules, then build the validation report.

    Args:
        config: Validated run configuration
        base_dir: Directory relative config paths are resolved against
            (default: current working directory)
        jobs: Worker threads for reading module metadata
        reader: Metadata reader, shared by the scan and system lookups

    Returns:
        ValidationReport for this run. Every call re-scans from scratch.

    Raises:
        ScanError: If a configured scan directory does not exist.
    """
    base = base_dir if base_dir is not None else Path.cwd()

    index = build_module_index(config.resolved_paths(base), reader=reader, jobs=jobs)
    roots = link_dependencies(index)
    logger.debug("Indexed %d modules, %d roots", len(index), len(roots))

    resolver = SystemResolver(
        config.resolved_system_paths(base),
        config.excluded_dlls,
        reader=reader,
    )
    report = build_report(index, roots, resolver)

    report.cycles = [
        [index[key].label() for key in component]
        for component in find_cycles(build_key_graph(index))
    ]
    return report


__all__ = ["run_validation"]
