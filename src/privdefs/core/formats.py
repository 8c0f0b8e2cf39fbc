"""
Format registry.

Maps format identifiers (MIME types) to the privilege document formats the
reader and writer know how to handle.
"""

from __future__ import annotations

from enum import StrEnum

from .errors import UnsupportedFormatError


class PrivilegeFormat(StrEnum):
    """Supported privilege document syntaxes."""

    XML = "xml"


TEXT_XML = "text/xml"
APPLICATION_XML = "application/xml"

DEFAULT_FORMAT_ID = TEXT_XML

_FORMATS: dict[str, PrivilegeFormat] = {
    TEXT_XML: PrivilegeFormat.XML,
    APPLICATION_XML: PrivilegeFormat.XML,
}


def resolve_format(format_id: str) -> PrivilegeFormat:
    """
    Look up the format for a format identifier.

    The lookup ignores case and MIME parameters, so ``text/xml; charset=UTF-8``
    selects the same format as ``text/xml``.

    Raises:
        UnsupportedFormatError: If no format is registered for the identifier
    """
    media_type = format_id.split(";", 1)[0].strip().lower()
    fmt = _FORMATS.get(media_type)
    if fmt is None:
        raise UnsupportedFormatError(format_id)
    return fmt


def supported_formats() -> list[str]:
    """Return all registered format identifiers."""
    return sorted(_FORMATS)


# XML vocabulary shared by the reader and the writer.
ROOT_ELEMENT = "privileges"
PRIVILEGE_ELEMENT = "privilege"
CONTAINS_ELEMENT = "contains"
NAME_ATTRIBUTE = "name"
ABSTRACT_ATTRIBUTE = "abstract"
