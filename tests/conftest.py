from __future__ import annotations

import struct
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

import pytest

from graph.model import AssemblyIdentity, Version
from parse.assembly_metadata import AssemblyMetadata, ParseFailure

FILE_ALIGNMENT = 0x200
SECTION_ALIGNMENT = 0x2000
TEXT_RVA = 0x2000
CLI_HEADER_SIZE = 72

TABLE_MODULE = 0x00
TABLE_ASSEMBLY = 0x20
TABLE_ASSEMBLY_REF = 0x23


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


def _pad(data: bytes, alignment: int = 4) -> bytes:
    return data + b"\0" * (_align(len(data), alignment) - len(data))


class _StringHeap:
    def __init__(self) -> None:
        self.data = bytearray(b"\0")
        self.offsets: dict[str, int] = {}

    def add(self, text: str) -> int:
        if text not in self.offsets:
            self.offsets[text] = len(self.data)
            self.data += text.encode("utf-8") + b"\0"
        return self.offsets[text]


def _metadata(
    module_name: str,
    assembly_name: str,
    version: Version,
    references: list[tuple[str, Version]],
) -> bytes:
    strings = _StringHeap()
    module_name_idx = strings.add(module_name)
    assembly_name_idx = strings.add(assembly_name)
    ref_name_idxs = [strings.add(name) for name, _ in references]

    valid = (1 << TABLE_MODULE) | (1 << TABLE_ASSEMBLY)
    row_counts = [1, 1]
    if references:
        valid |= 1 << TABLE_ASSEMBLY_REF
        row_counts.append(len(references))

    tables = bytearray(struct.pack("<IBBBBQQ", 0, 2, 0, 0, 1, valid, 0))
    for count in row_counts:
        tables += struct.pack("<I", count)
    # Module: Generation, Name, Mvid, EncId, EncBaseId
    tables += struct.pack("<HHHHH", 0, module_name_idx, 1, 0, 0)
    # Assembly: HashAlgId, version, Flags, PublicKey, Name, Culture
    tables += struct.pack("<IHHHHIHHH", 0x8004, *version, 0, 0, assembly_name_idx, 0)
    # AssemblyRef: version, Flags, PublicKeyOrToken, Name, Culture, HashValue
    for (_, ref_version), name_idx in zip(references, ref_name_idxs):
        tables += struct.pack("<HHHHIHHHH", *ref_version, 0, 0, name_idx, 0, 0)

    streams = [
        (b"#~", _pad(bytes(tables))),
        (b"#Strings", _pad(bytes(strings.data))),
        (b"#GUID", bytes(range(1, 17))),
        (b"#Blob", _pad(b"\0")),
    ]

    version_string = _pad(b"v4.0.30319\0")
    root = struct.pack("<IHHII", 0x424A5342, 1, 1, 0, len(version_string))
    root += version_string + struct.pack("<HH", 0, len(streams))

    header_size = sum(8 + len(_pad(name + b"\0")) for name, _ in streams)
    offset = len(root) + header_size
    headers = b""
    body = b""
    for name, data in streams:
        headers += struct.pack("<II", offset, len(data)) + _pad(name + b"\0")
        body += data
        offset += len(data)

    return root + headers + body


def build_pe_image(
    *,
    module_name: str = "Module.dll",
    assembly_name: str | None = None,
    version: Version = Version(1, 0, 0, 0),
    references: list[tuple[str, Version]] | None = None,
    managed: bool = True,
) -> bytes:
    """Build a minimal PE32 DLL, optionally carrying CLI assembly metadata."""
    if assembly_name is None:
        assembly_name = module_name.rsplit(".", 1)[0]

    content = b""
    cli_directory = (0, 0)
    if managed:
        metadata = _metadata(module_name, assembly_name, version, references or [])
        metadata_rva = TEXT_RVA + CLI_HEADER_SIZE
        cli_header = struct.pack(
            "<IHHIIII", CLI_HEADER_SIZE, 2, 5, metadata_rva, len(metadata), 1, 0
        )
        cli_header += b"\0" * (CLI_HEADER_SIZE - len(cli_header))
        content = cli_header + metadata
        cli_directory = (TEXT_RVA, CLI_HEADER_SIZE)
    else:
        content = b"\xc3" * 16

    virtual_size = len(content)
    raw_size = _align(virtual_size, FILE_ALIGNMENT)
    size_of_image = TEXT_RVA + _align(virtual_size, SECTION_ALIGNMENT)

    dos_header = bytearray(0x80)
    dos_header[0:2] = b"MZ"
    struct.pack_into("<I", dos_header, 0x3C, len(dos_header))

    file_header = struct.pack("<HHIIIHH", 0x14C, 1, 0, 0, 0, 0xE0, 0x2102)

    optional_header = struct.pack(
        "<HBB9I6H4I2H6I",
        0x10B, 8, 0,
        raw_size, 0, 0, 0, TEXT_RVA, 0, 0x10000000, SECTION_ALIGNMENT,
        FILE_ALIGNMENT,
        4, 0, 0, 0, 4, 0,
        0, size_of_image, FILE_ALIGNMENT, 0,
        3, 0x8540,
        0x100000, 0x1000, 0x100000, 0x1000, 0, 16,
    )  # fmt: skip
    directories = [(0, 0)] * 16
    directories[14] = cli_directory
    for rva, size in directories:
        optional_header += struct.pack("<II", rva, size)

    section_header = struct.pack(
        "<8sIIIIIIHHI",
        b".text",
        virtual_size,
        TEXT_RVA,
        raw_size,
        FILE_ALIGNMENT,
        0,
        0,
        0,
        0,
        0x60000020,
    )

    headers = bytes(dos_header) + b"PE\0\0" + file_header + optional_header
    headers += section_header
    headers += b"\0" * (FILE_ALIGNMENT - len(headers))

    return headers + content + b"\0" * (raw_size - len(content))


AssemblyFactory = Callable[..., Path]


@pytest.fixture
def make_assembly() -> AssemblyFactory:
    """Write a synthetic .NET assembly and return its path."""

    def _make(
        path: Path,
        version: str = "1.0.0.0",
        references: Iterable[tuple[str, str]] = (),
        *,
        assembly_name: str | None = None,
        managed: bool = True,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(
            build_pe_image(
                module_name=path.name,
                assembly_name=assembly_name,
                version=Version.parse(version),
                references=[(name, Version.parse(v)) for name, v in references],
                managed=managed,
            )
        )
        return path

    return _make


ReaderSpec = Mapping[str, "tuple[str, list[tuple[str, str]]] | None"]


class FakeReader:
    """In-memory metadata reader keyed by "dir/file" or file name.

    A ``None`` spec produces a ParseFailure. Every call is recorded.
    """

    def __init__(self, specs: ReaderSpec) -> None:
        self.specs = dict(specs)
        self.calls: list[Path] = []

    def __call__(self, path: Path) -> AssemblyMetadata | ParseFailure:
        self.calls.append(path)
        qualified = f"{path.parent.name}/{path.name}"
        spec = self.specs[qualified] if qualified in self.specs else self.specs[path.name]
        if spec is None:
            return ParseFailure(path, "not a managed assembly")
        version, references = spec
        return AssemblyMetadata(
            path=path,
            identity=AssemblyIdentity(path.stem, Version.parse(version)),
            references=tuple(
                AssemblyIdentity(name, Version.parse(v)) for name, v in references
            ),
        )


@pytest.fixture
def fake_reader() -> Callable[[ReaderSpec], FakeReader]:
    return FakeReader


@pytest.fixture
def touch() -> Callable[..., Path]:
    """Create an empty placeholder file (contents are supplied by FakeReader)."""

    def _touch(directory: Path, *names: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        for name in names:
            (directory / name).write_bytes(b"")
        return directory

    return _touch
