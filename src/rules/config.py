from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import orjson
import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigError(Exception):
    """Raised when the config file is missing or cannot be parsed."""


class DepsConfig(BaseModel):
    """Configuration for an assembly dependency validation run."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    paths: list[str] = Field(
        alias="Paths",
        description="Directories containing the dlls to check",
    )
    system_paths: list[str] = Field(
        default_factory=list,
        alias="SystemPaths",
        description="Fallback directories where system dlls can be found",
    )
    excluded_dlls: list[str] = Field(
        default_factory=list,
        alias="ExcludedDlls",
        description="Regular expressions naming dlls to ignore",
    )

    @field_validator("paths")
    @classmethod
    def validate_paths(cls, v: list[str]) -> list[str]:
        if not v:
            msg = "No 'Paths' specified"
            raise ValueError(msg)
        return v

    @field_validator("excluded_dlls")
    @classmethod
    def validate_excluded_dlls(cls, v: list[str]) -> list[str]:
        """Reject patterns that do not compile, naming the offending entry."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                msg = f"Invalid ExcludedDlls pattern '{pattern}': {exc}"
                raise ValueError(msg) from exc
        return v

    def resolved_paths(self, base: Path) -> list[Path]:
        return [_resolve_dir(base, entry) for entry in self.paths]

    def resolved_system_paths(self, base: Path) -> list[Path]:
        return [_resolve_dir(base, entry) for entry in self.system_paths]


def _resolve_dir(base: Path, entry: str) -> Path:
    path = Path(entry).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def _read_document(config_path: Path) -> Any:
    if config_path.suffix.lower() == ".toml":
        try:
            with config_path.open("rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {config_path}: {e}"
            raise ConfigError(msg) from e

    try:
        return orjson.loads(config_path.read_bytes())
    except orjson.JSONDecodeError as e:
        msg = f"Invalid JSON in {config_path}: {e}"
        raise ConfigError(msg) from e


def load_config(config_path: Path) -> DepsConfig:
    """Load configuration from a JSON (or .toml) config file."""
    if not config_path.is_file():
        msg = f"Specified config file doesn't exist: {config_path}"
        raise ConfigError(msg)

    try:
        data = _read_document(config_path)
    except OSError as e:
        msg = f"Failed to open config file: {config_path}: {e}"
        raise ConfigError(msg) from e

    if not isinstance(data, dict):
        msg = f"Invalid config in {config_path}: expected an object at top level"
        raise ConfigError(msg)

    try:
        return DepsConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
