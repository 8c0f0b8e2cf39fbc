"""Core privdefs functionality: model, namespace table, format registry, reader and writer."""

from .config import CodecConfig, find_config, load_config
from .errors import (
    ConfigError,
    ErrorContext,
    NamespaceConflictError,
    NamespaceError,
    NamespaceNotFoundError,
    ParseError,
    PrivilegeCodecError,
    UnsupportedFormatError,
    ValidationError,
)
from .formats import (
    APPLICATION_XML,
    DEFAULT_FORMAT_ID,
    TEXT_XML,
    PrivilegeFormat,
    resolve_format,
    supported_formats,
)
from .model import PrivilegeDefinition
from .namespaces import (
    WELL_KNOWN_NAMESPACES,
    NamespaceTable,
    expanded_name,
    split_qualified_name,
)
from .reader import PrivilegeDefinitionReader, read_definitions
from .writer import PrivilegeDefinitionWriter, WriterOptions, write_definitions

__all__ = [
    # Model
    "PrivilegeDefinition",
    "NamespaceTable",
    "WELL_KNOWN_NAMESPACES",
    "expanded_name",
    "split_qualified_name",
    # Formats
    "APPLICATION_XML",
    "DEFAULT_FORMAT_ID",
    "TEXT_XML",
    "PrivilegeFormat",
    "resolve_format",
    "supported_formats",
    # Codec
    "PrivilegeDefinitionReader",
    "PrivilegeDefinitionWriter",
    "WriterOptions",
    "read_definitions",
    "write_definitions",
    # Configuration
    "CodecConfig",
    "find_config",
    "load_config",
    # Errors
    "ConfigError",
    "ErrorContext",
    "NamespaceConflictError",
    "NamespaceError",
    "NamespaceNotFoundError",
    "ParseError",
    "PrivilegeCodecError",
    "UnsupportedFormatError",
    "ValidationError",
]
