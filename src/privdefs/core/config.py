"""
Codec configuration models.

Parses the ``[tool.privdefs]`` table of a ``pyproject.toml`` or the top level
of a ``privdefs.toml`` file. Only host-side tooling reads configuration; the
reader and writer themselves take everything as arguments.

Example ``privdefs.toml``::

    format = "text/xml"

    [writer]
    indent = "  "
    xml_declaration = true

    [namespaces]
    foo = "http://www.foo.com/1.0"
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as ModelValidationError

from .errors import ConfigError, UnsupportedFormatError
from .formats import DEFAULT_FORMAT_ID, resolve_format
from .writer import WriterOptions

CONFIG_FILENAME = "privdefs.toml"


class CodecConfig(BaseModel):
    """Complete codec configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format_id: str = Field(default=DEFAULT_FORMAT_ID, alias="format")
    writer: WriterOptions = Field(default_factory=WriterOptions)
    namespaces: dict[str, str] = Field(default_factory=dict)

    @field_validator("format_id")
    @classmethod
    def _known_format(cls, value: str) -> str:
        try:
            resolve_format(value)
        except UnsupportedFormatError as exc:
            raise ValueError(exc.message) from exc
        return value


def _section(data: dict[str, Any], path: Path) -> dict[str, Any]:
    if path.name == "pyproject.toml":
        section: dict[str, Any] = data.get("tool", {}).get("privdefs", {})
        return section
    return data


def load_config(path: Path) -> CodecConfig:
    """
    Load codec configuration.

    Args:
        path: Path to ``privdefs.toml`` or ``pyproject.toml``

    Returns:
        CodecConfig with parsed values, or defaults if the file does not exist

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values
    """
    if not path.exists():
        return CodecConfig()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    try:
        return CodecConfig.model_validate(_section(data, path))
    except ModelValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc


def find_config(start: Path) -> Path | None:
    """Find the nearest ``privdefs.toml`` in ``start`` or one of its parents."""
    for directory in [start, *start.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
