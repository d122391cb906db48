"""Shared utilities for asmdeps."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graph.model import Version

MODULE_EXTENSION = ".dll"


def module_key(name: str, version: Version | None) -> str:
    """Build the case-insensitive identity key for a module.

    Args:
        name: File-level module name (e.g., "Foo.dll")
        version: Module version, or None for modules whose metadata
            could not be read

    Returns:
        Normalized key (e.g., "foo.dll_1.0.0.0"). Modules without a version
        fall back to the lowercased file name alone.

    Examples:
        >>> from graph.model import Version
        >>> module_key("Foo.dll", Version(1, 0, 0, 0))
        'foo.dll_1.0.0.0'
        >>> module_key("Foo.dll", None)
        'foo.dll'
    """
    if version is None:
        return name.lower()
    return f"{name}_{version}".lower()


def module_file_name(assembly_name: str) -> str:
    """Convert a referenced assembly name to the file name it is shipped as.

    Examples:
        >>> module_file_name("System.Core")
        'System.Core.dll'
    """
    return f"{assembly_name}{MODULE_EXTENSION}"
