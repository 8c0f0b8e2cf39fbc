"""
Privilege definition writer.

Serializes privilege definitions into the canonical document form: every
namespace of the supplied mapping declared on the root element (ordered by
prefix), one element per definition in the given order, ``abstract`` written
only when true and placed before ``name``, and one ``contains`` element per
aggregated privilege.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Mapping
from typing import IO, Any

from lxml import etree
from pydantic import BaseModel, ConfigDict

from .formats import (
    ABSTRACT_ATTRIBUTE,
    CONTAINS_ELEMENT,
    DEFAULT_FORMAT_ID,
    NAME_ATTRIBUTE,
    PRIVILEGE_ELEMENT,
    ROOT_ELEMENT,
    PrivilegeFormat,
    resolve_format,
)
from .model import PrivilegeDefinition
from .namespaces import XML_PREFIX

logger = logging.getLogger(__name__)


class WriterOptions(BaseModel):
    """
    Output options for the writer.

    Attributes:
        indent: Indentation unit; empty string writes the document on one line
        encoding: Output character encoding
        xml_declaration: Whether to start the document with an XML declaration
    """

    indent: str = "    "
    encoding: str = "UTF-8"
    xml_declaration: bool = True

    model_config = ConfigDict(frozen=True)


class PrivilegeDefinitionWriter:
    """Writes privilege definitions to a stream."""

    def __init__(
        self,
        format_id: str = DEFAULT_FORMAT_ID,
        options: WriterOptions | None = None,
    ):
        """
        Initialize writer.

        Raises:
            UnsupportedFormatError: If the format identifier is not registered
        """
        self.format = resolve_format(format_id)
        self.options = options or WriterOptions()

    def write_definitions(
        self,
        out: IO[Any],
        definitions: Iterable[PrivilegeDefinition],
        namespaces: Mapping[str, str],
    ) -> None:
        """
        Write a complete document to ``out``.

        Args:
            out: Binary stream, or a text stream which receives decoded text
            definitions: Definitions in output order
            namespaces: Prefix to URI bindings to declare
        """
        data = self.to_bytes(definitions, namespaces)
        if isinstance(out, io.TextIOBase):
            out.write(data.decode(self.options.encoding))
        else:
            out.write(data)

    def to_bytes(
        self,
        definitions: Iterable[PrivilegeDefinition],
        namespaces: Mapping[str, str],
    ) -> bytes:
        """Serialize to an encoded document."""
        definitions = list(definitions)
        _warn_on_caller_errors(definitions, namespaces)

        if self.format is PrivilegeFormat.XML:
            data = self._xml_bytes(definitions, namespaces)
        else:  # pragma: no cover - every registered format is handled above
            raise NotImplementedError(self.format)

        logger.debug(
            "Wrote %d privilege definitions with %d namespaces (%d bytes)",
            len(definitions),
            len(namespaces),
            len(data),
        )
        return data

    def _xml_bytes(
        self, definitions: list[PrivilegeDefinition], namespaces: Mapping[str, str]
    ) -> bytes:
        nsmap = {
            prefix: uri
            for prefix, uri in sorted(namespaces.items())
            if prefix and prefix != XML_PREFIX and uri
        }
        root = etree.Element(ROOT_ELEMENT, nsmap=nsmap)

        for definition in definitions:
            elem = etree.SubElement(root, PRIVILEGE_ELEMENT)
            if definition.is_abstract:
                elem.set(ABSTRACT_ATTRIBUTE, "true")
            elem.set(NAME_ATTRIBUTE, definition.name)
            for name in definition.aggregates:
                etree.SubElement(elem, CONTAINS_ELEMENT).set(NAME_ATTRIBUTE, name)

        if self.options.indent:
            etree.indent(root, space=self.options.indent)

        data = etree.tostring(
            root,
            encoding=self.options.encoding,
            xml_declaration=self.options.xml_declaration,
        )
        return data + "\n".encode(self.options.encoding)


def _warn_on_caller_errors(
    definitions: list[PrivilegeDefinition], namespaces: Mapping[str, str]
) -> None:
    """Log names and bindings that would not read back."""
    for prefix, uri in namespaces.items():
        if prefix and prefix != XML_PREFIX and not uri:
            logger.warning("Namespace prefix %r has an empty URI and is not declared", prefix)

    seen: set[str] = set()
    for definition in definitions:
        if definition.name in seen:
            logger.warning("Duplicate privilege definition %r", definition.name)
        seen.add(definition.name)
        for prefix in sorted(definition.referenced_prefixes()):
            if prefix and prefix not in namespaces:
                logger.warning(
                    "Privilege %r uses prefix %r which is not in the namespace mapping",
                    definition.name,
                    prefix,
                )


def write_definitions(
    out: IO[Any],
    definitions: Iterable[PrivilegeDefinition],
    namespaces: Mapping[str, str],
    format_id: str = DEFAULT_FORMAT_ID,
) -> None:
    """Write a privilege document in one call."""
    PrivilegeDefinitionWriter(format_id).write_definitions(out, definitions, namespaces)
