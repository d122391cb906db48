"""System path resolution and exclusion rules for unresolved modules."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from parse.assembly_metadata import ParseFailure, read_assembly_metadata

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from graph.model import ModuleRecord, Version
    from parse.assembly_metadata import AssemblyMetadata

    MetadataReader = Callable[[Path], "AssemblyMetadata | ParseFailure"]

logger = logging.getLogger(__name__)


class SystemResolver:
    """Answers whether a module is excluded or available in a system path.

    System paths are searched in declaration order and the first acceptable
    match wins. Answers are memoized for the lifetime of the resolver, so
    one resolver should be used per validation run.
    """

    def __init__(
        self,
        system_paths: Iterable[Path],
        excluded_patterns: Iterable[str],
        *,
        reader: MetadataReader = read_assembly_metadata,
    ) -> None:
        self._system_paths = list(system_paths)
        self._patterns = [re.compile(pattern) for pattern in excluded_patterns]
        self._reader = reader
        self._located: dict[tuple[str, Version | None], str | None] = {}
        self._excluded: dict[str, bool] = {}

    def is_excluded(self, name: str) -> bool:
        """Return True if any exclusion pattern matches anywhere in ``name``."""
        cached = self._excluded.get(name)
        if cached is None:
            cached = any(pattern.search(name) for pattern in self._patterns)
            self._excluded[name] = cached
        return cached

    def locate(self, record: ModuleRecord) -> str | None:
        """Find a system copy of ``record`` with a version at least as new.

        Returns:
            Absolute path of the first acceptable system module, or None.
        """
        cache_key = (record.name, record.version)
        if cache_key not in self._located:
            self._located[cache_key] = self._search(record)
        return self._located[cache_key]

    def _search(self, record: ModuleRecord) -> str | None:
        for system_path in self._system_paths:
            candidate = system_path / record.name
            if not candidate.is_file():
                continue

            result = self._reader(candidate)
            if isinstance(result, ParseFailure):
                continue

            found_version = result.identity.version
            if record.version is None or found_version >= record.version:
                location = str(candidate.absolute())
                logger.debug("Resolved %s => %s", record.label(), location)
                return location

            logger.debug(
                "Skipping %s: version %s is older than required %s",
                candidate,
                found_version,
                record.version,
            )
        return None


__all__ = ["SystemResolver"]
