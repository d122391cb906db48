"""Static metadata readers for asmdeps."""

from parse.assembly_metadata import (
    AssemblyMetadata,
    MetadataError,
    ParseFailure,
    read_assembly_metadata,
)

__all__ = [
    "AssemblyMetadata",
    "MetadataError",
    "ParseFailure",
    "read_assembly_metadata",
]
