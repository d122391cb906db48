"""File scanning utilities for asmdeps."""

from __future__ import annotations

from typing import TYPE_CHECKING

from utils import MODULE_EXTENSION

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


class ScanError(Exception):
    """Raised when a configured scan directory cannot be listed."""


def _should_include_file(path: Path, extension: str) -> bool:
    """Check if a directory entry is a module file that belongs to the scan.

    Symlinks count when they point at a regular file, wherever it lives.
    """
    if not path.name.lower().endswith(extension.lower()):
        return False

    return path.is_file()


def find_module_files(
    directory: Path,
    *,
    extension: str = MODULE_EXTENSION,
) -> Iterator[Path]:
    """Find module files directly inside a directory (non-recursive).

    Args:
        directory: Directory to list
        extension: File extension to match, case-insensitively

    Yields:
        Path objects for each module file found, sorted by file name for
        deterministic ordering.

    Raises:
        ScanError: If the directory does not exist or is not a directory.
    """
    if not directory.exists():
        msg = f"Scan directory does not exist: {directory}"
        raise ScanError(msg)
    if not directory.is_dir():
        msg = f"Scan path is not a directory: {directory}"
        raise ScanError(msg)

    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        msg = f"Cannot list scan directory {directory}: {exc}"
        raise ScanError(msg) from exc

    matched_files = [
        path for path in entries if _should_include_file(path, extension)
    ]

    matched_files.sort(key=lambda p: p.name)

    yield from matched_files


__all__ = ["ScanError", "_should_include_file", "find_module_files"]
