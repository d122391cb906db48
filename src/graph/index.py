"""Module index: scan directories and key every module by name and version."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from graph.model import ModuleIndex, ModuleRecord
from parse.assembly_metadata import ParseFailure, read_assembly_metadata
from scan.files import find_module_files

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from parse.assembly_metadata import AssemblyMetadata

    MetadataReader = Callable[[Path], "AssemblyMetadata | ParseFailure"]

logger = logging.getLogger(__name__)


def _record_for(
    file_path: Path, result: AssemblyMetadata | ParseFailure
) -> ModuleRecord:
    location = str(file_path.absolute())
    if isinstance(result, ParseFailure):
        return ModuleRecord.failed(file_path.name, location)
    return ModuleRecord.scanned(
        file_path.name,
        result.identity.version,
        location,
        references=result.references,
    )


def _merge(index: ModuleIndex, record: ModuleRecord) -> None:
    existing = index.get(record.key)
    if existing is None:
        index[record.key] = record
        return
    logger.debug("Duplicate %s at %s", record.label(), record.locations[0])
    existing.locations.extend(record.locations)


def build_module_index(
    paths: Iterable[Path],
    *,
    reader: MetadataReader = read_assembly_metadata,
    jobs: int = 1,
) -> ModuleIndex:
    """Scan directories for modules and build the keyed module index.

    Args:
        paths: Directories to scan, in priority order
        reader: Metadata reader applied to every module file
        jobs: Number of worker threads used to read files (1 = sequential)

    Returns:
        Mapping of module key to ModuleRecord, in discovery order. Files
        with the same (name, version) are merged into one record whose
        locations list every path in (directory order, file name) order.

    Raises:
        ScanError: If a directory does not exist.
    """
    file_paths: list[Path] = []
    for directory in paths:
        found = list(find_module_files(directory))
        logger.debug("Found %d module files in %s", len(found), directory)
        file_paths.extend(found)

    if jobs > 1 and len(file_paths) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            results = list(executor.map(reader, file_paths))
    else:
        results = [reader(file_path) for file_path in file_paths]

    index: ModuleIndex = {}
    for file_path, result in zip(file_paths, results):
        _merge(index, _record_for(file_path, result))

    return index


__all__ = ["build_module_index"]
