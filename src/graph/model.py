"""Module records and version identity for the dependency graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from utils import module_key


class Version(NamedTuple):
    """Four-part assembly version, ordered component-wise."""

    major: int
    minor: int
    build: int = 0
    revision: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}.{self.revision}"

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a dotted version string such as "1.2" or "1.2.3.4"."""
        parts = text.strip().split(".")
        if not 2 <= len(parts) <= 4:
            msg = f"Invalid version '{text}': expected 2 to 4 components"
            raise ValueError(msg)
        try:
            numbers = [int(part) for part in parts]
        except ValueError as exc:
            msg = f"Invalid version '{text}': components must be integers"
            raise ValueError(msg) from exc
        if any(number < 0 for number in numbers):
            msg = f"Invalid version '{text}': components must be non-negative"
            raise ValueError(msg)
        numbers.extend([0] * (4 - len(numbers)))
        return cls(*numbers)


@dataclass(frozen=True)
class AssemblyIdentity:
    """A (name, version) pair as declared in assembly metadata."""

    name: str
    version: Version


@dataclass(eq=False)
class ModuleRecord:
    """A node in the dependency graph.

    A record is either scanned (read from disk, possibly with
    ``parse_failed`` set) or a synthesized placeholder for a reference that
    no scanned module satisfies (``missing`` set). Records compare by
    identity: placeholders are shared between every parent that points at
    the same key.
    """

    key: str
    name: str
    version: Version | None
    locations: list[str] = field(default_factory=list)
    children: dict[str, ModuleRecord] = field(default_factory=dict, repr=False)
    references: tuple[AssemblyIdentity, ...] = ()
    missing: bool = False
    parse_failed: bool = False

    @classmethod
    def scanned(
        cls,
        name: str,
        version: Version,
        location: str,
        references: tuple[AssemblyIdentity, ...] = (),
    ) -> ModuleRecord:
        return cls(
            key=module_key(name, version),
            name=name,
            version=version,
            locations=[location],
            references=references,
        )

    @classmethod
    def failed(cls, name: str, location: str) -> ModuleRecord:
        return cls(
            key=module_key(name, None),
            name=name,
            version=None,
            locations=[location],
            parse_failed=True,
        )

    @classmethod
    def placeholder(cls, name: str, version: Version) -> ModuleRecord:
        return cls(
            key=module_key(name, version),
            name=name,
            version=version,
            missing=True,
        )

    @property
    def is_duplicate(self) -> bool:
        return len(self.locations) > 1

    @property
    def display_version(self) -> str:
        return "" if self.version is None else str(self.version)

    def label(self) -> str:
        """Render as ``name (version)``."""
        return f"{self.name} ({self.display_version})"

    def sort_key(self) -> tuple[str, str, tuple[int, ...]]:
        return (self.name.casefold(), self.name, tuple(self.version or ()))


ModuleIndex = dict[str, ModuleRecord]


__all__ = ["AssemblyIdentity", "ModuleIndex", "ModuleRecord", "Version"]
