"""
privdefs - reader and writer for privilege definition documents.

Converts between the XML privilege document format and immutable
:class:`PrivilegeDefinition` values, resolving namespace prefixes along the way.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version

from .core import (
    NamespaceTable,
    ParseError,
    PrivilegeCodecError,
    PrivilegeDefinition,
    PrivilegeDefinitionReader,
    PrivilegeDefinitionWriter,
    UnsupportedFormatError,
    ValidationError,
    read_definitions,
    write_definitions,
)


def _get_version() -> str:
    try:
        return _metadata_version("privdefs")
    except PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _get_version()

__all__ = [
    "__version__",
    "NamespaceTable",
    "ParseError",
    "PrivilegeCodecError",
    "PrivilegeDefinition",
    "PrivilegeDefinitionReader",
    "PrivilegeDefinitionWriter",
    "UnsupportedFormatError",
    "ValidationError",
    "read_definitions",
    "write_definitions",
]
