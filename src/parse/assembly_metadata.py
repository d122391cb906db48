"""Static .NET assembly metadata extraction.

Reads the CLI metadata tables embedded in a PE image to recover the
assembly's own identity and the identities of the assemblies it references.
Nothing in the file is loaded or executed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import dnfile
import pefile

from graph.model import AssemblyIdentity, Version

logger = logging.getLogger(__name__)


class MetadataError(Exception):
    """Raised when a PE image lacks usable assembly metadata."""


@dataclass(frozen=True)
class AssemblyMetadata:
    path: Path
    identity: AssemblyIdentity
    references: tuple[AssemblyIdentity, ...]


@dataclass(frozen=True)
class ParseFailure:
    path: Path
    cause: str

    def __str__(self) -> str:
        return f"{self.path}: {self.cause}"


def _heap_text(value: Any) -> str:
    """Return the string behind a #Strings heap column."""
    text = getattr(value, "value", value)
    if not isinstance(text, str) or not text:
        msg = "assembly name is missing from the #Strings heap"
        raise MetadataError(msg)
    return text


def _row_identity(row: Any) -> AssemblyIdentity:
    return AssemblyIdentity(
        name=_heap_text(row.Name),
        version=Version(
            int(row.MajorVersion),
            int(row.MinorVersion),
            int(row.BuildNumber),
            int(row.RevisionNumber),
        ),
    )


def _table_rows(tables: Any, name: str) -> list[Any]:
    table = getattr(tables, name, None)
    if table is None:
        return []
    return list(table.rows)


def _extract(pe: dnfile.dnPE) -> tuple[AssemblyIdentity, tuple[AssemblyIdentity, ...]]:
    net = getattr(pe, "net", None)
    if net is None:
        msg = "no CLI header (not a managed assembly)"
        raise MetadataError(msg)

    tables = getattr(net, "mdtables", None)
    if tables is None:
        msg = "no #~ metadata tables stream"
        raise MetadataError(msg)

    assembly_rows = _table_rows(tables, "Assembly")
    if not assembly_rows:
        msg = "no Assembly table row (module is not an assembly manifest)"
        raise MetadataError(msg)

    identity = _row_identity(assembly_rows[0])
    references = tuple(
        _row_identity(row) for row in _table_rows(tables, "AssemblyRef")
    )
    return identity, references


def read_assembly_metadata(path: Path) -> AssemblyMetadata | ParseFailure:
    """Read assembly identity and references from a module file.

    Args:
        path: Path to the module (PE image) to inspect

    Returns:
        AssemblyMetadata on success, or a ParseFailure describing why the file
        could not be read. Failures are per-file and never raised.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        failure = ParseFailure(path, f"cannot read file: {exc}")
        logger.warning("Failed to load module %s", failure)
        return failure

    pe: dnfile.dnPE | None = None
    try:
        pe = dnfile.dnPE(data=data)
        identity, references = _extract(pe)
    except pefile.PEFormatError as exc:
        failure = ParseFailure(path, f"not a PE image: {exc}")
    except MetadataError as exc:
        failure = ParseFailure(path, str(exc))
    except Exception as exc:  # noqa: BLE001
        failure = ParseFailure(path, f"malformed metadata: {exc!r}")
    else:
        logger.debug(
            "Read %s (%s) with %d references", identity.name, identity.version,
            len(references),
        )
        return AssemblyMetadata(path=path, identity=identity, references=references)
    finally:
        if pe is not None:
            pe.close()

    logger.warning("Failed to load module %s", failure)
    return failure


__all__ = [
    "AssemblyMetadata",
    "MetadataError",
    "ParseFailure",
    "read_assembly_metadata",
]
