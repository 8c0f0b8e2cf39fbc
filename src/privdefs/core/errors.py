"""
Error types for privilege definition reading, writing and configuration.
"""

from dataclasses import dataclass


class PrivilegeCodecError(Exception):
    """Base exception for all privdefs errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class UnsupportedFormatError(PrivilegeCodecError):
    """
    Raised when a format identifier has no registered reader or writer.

    Always raised before the input or output stream is touched.
    """

    def __init__(self, format_id: str):
        self.format_id = format_id
        super().__init__(f"Unsupported format: {format_id!r}")


class ParseError(PrivilegeCodecError):
    """
    Raised when a privilege document cannot be parsed.

    Examples:
    - Malformed XML
    - Unexpected root element
    - Missing required ``name`` attribute
    - Name whose prefix is not bound in the namespace table
    - Conflicting namespace declarations
    """

    pass


class ValidationError(PrivilegeCodecError):
    """
    Raised when a well-formed document violates a document-level rule.

    Examples:
    - The same privilege name declared twice
    """

    pass


class NamespaceError(PrivilegeCodecError):
    """Raised for invalid namespace table operations."""

    pass


class NamespaceConflictError(NamespaceError):
    """Raised when a binding would map a prefix or URI a second way."""

    def __init__(self, prefix: str, uri: str, existing: str):
        self.prefix = prefix
        self.uri = uri
        self.existing = existing
        super().__init__(
            f"Cannot bind prefix {prefix!r} to {uri!r}: conflicts with existing binding {existing}"
        )


class NamespaceNotFoundError(NamespaceError, KeyError):
    """Raised when a prefix or URI has no binding."""

    def __str__(self) -> str:
        return self.message


class ConfigError(PrivilegeCodecError):
    """Raised when a configuration file cannot be loaded."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        source: Name of the document (file path or ``<stream>``)
        line: Line number (1-indexed), if known
        column: Column number (1-indexed), if known
    """

    source: str
    line: int | None = None
    column: int | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "privileges.xml:10:5"
        """
        location = self.source
        if self.line is not None:
            location += f":{self.line}"
            if self.column is not None:
                location += f":{self.column}"
        return location


def make_parse_error(
    message: str,
    source: str,
    line: int | None = None,
    column: int | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        source: Document name
        line: Line number (1-indexed)
        column: Column number (1-indexed)

    Returns:
        ParseError with context attached
    """
    return ParseError(message, ErrorContext(source=source, line=line, column=column))


def make_validation_error(
    message: str,
    source: str,
    line: int | None = None,
) -> ValidationError:
    """Helper to create a ValidationError with context."""
    return ValidationError(message, ErrorContext(source=source, line=line))
