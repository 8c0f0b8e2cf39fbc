"""
Privilege definition reader.

Parses a privilege document into an ordered sequence of
:class:`PrivilegeDefinition` values plus the namespace table discovered while
scanning it.

XML format::

    <privileges xmlns:foo="http://www.foo.com/1.0">
        <privilege name="foo:testRead"/>
        <privilege abstract="true" name="foo:testAbstract"/>
        <privilege name="foo:testAll">
            <contains name="foo:testRead"/>
        </privilege>
    </privileges>

Namespace declarations are document-scoped: every ``xmlns:prefix`` in the
document is bound into a single table, wherever it appears. Well-known
bindings fill in only prefixes and URIs the document leaves free.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import IO, Any

from lxml import etree

from .errors import (
    NamespaceConflictError,
    PrivilegeCodecError,
    make_parse_error,
    make_validation_error,
)
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
from .namespaces import NamespaceTable, split_qualified_name

logger = logging.getLogger(__name__)


@dataclass
class _RawPrivilege:
    """A privilege element as scanned, before prefixes are resolved."""

    name: str
    is_abstract: bool
    line: int | None
    aggregates: list[tuple[str, int | None]] = field(default_factory=list)


class PrivilegeDefinitionReader:
    """
    Reads privilege definitions from a stream.

    The format identifier is checked on construction, before the stream is
    read. The document is parsed and validated in full on the first call to
    :meth:`privilege_definitions` or :meth:`namespaces`; a failed parse never
    yields partial results.
    """

    def __init__(
        self,
        stream: IO[Any],
        format_id: str = DEFAULT_FORMAT_ID,
        *,
        source: str | None = None,
    ):
        """
        Initialize reader.

        Args:
            stream: Binary or text file-like object holding the document
            format_id: MIME type selecting the document syntax
            source: Document name used in error messages

        Raises:
            UnsupportedFormatError: If the format identifier is not registered
        """
        self.format = resolve_format(format_id)
        self.source = source or str(getattr(stream, "name", "<stream>"))
        self._stream = stream
        self._result: tuple[tuple[PrivilegeDefinition, ...], NamespaceTable] | None = None
        self._error: PrivilegeCodecError | None = None

    def privilege_definitions(self) -> tuple[PrivilegeDefinition, ...]:
        """
        Return the definitions in document order.

        Raises:
            ParseError: If the document is malformed
            ValidationError: If a privilege name is declared twice
        """
        return self._parsed()[0]

    def namespaces(self) -> NamespaceTable:
        """Return the frozen namespace table built while reading."""
        return self._parsed()[1]

    def _parsed(self) -> tuple[tuple[PrivilegeDefinition, ...], NamespaceTable]:
        if self._error is not None:
            raise self._error
        if self._result is not None:
            return self._result

        try:
            if self.format is PrivilegeFormat.XML:
                definitions, namespaces = self._read_xml()
            else:  # pragma: no cover - every registered format is handled above
                raise NotImplementedError(self.format)
        except PrivilegeCodecError as exc:
            self._error = exc
            raise

        namespaces.freeze()
        self._result = (tuple(definitions), namespaces)
        logger.debug(
            "Read %d privilege definitions and %d namespaces from %s",
            len(definitions),
            len(namespaces),
            self.source,
        )
        return self._result

    # ------------------------------------------------------------------ XML

    def _read_xml(self) -> tuple[list[PrivilegeDefinition], NamespaceTable]:
        data = self._stream.read()
        # Decoded text: its XML declaration no longer describes the bytes.
        encoding = None
        if isinstance(data, str):
            data = data.encode("utf-8")
            encoding = "utf-8"
        if not data.strip():
            raise make_parse_error("Empty privilege document", self.source)

        table = NamespaceTable()
        raw_privileges: list[_RawPrivilege] = []
        seen: dict[str, int | None] = {}
        depth = 0

        events = etree.iterparse(
            io.BytesIO(data),
            events=("start-ns", "start", "end"),
            resolve_entities=False,
            no_network=True,
            remove_comments=True,
            remove_pis=True,
            encoding=encoding,
        )
        try:
            for event, payload in events:
                if event == "start-ns":
                    self._bind_declaration(table, *payload)
                elif event == "start":
                    depth += 1
                    if depth == 1 and _local_name(payload) != ROOT_ELEMENT:
                        raise make_parse_error(
                            f"Expected root element '{ROOT_ELEMENT}', "
                            f"got '{_local_name(payload)}'",
                            self.source,
                            payload.sourceline,
                        )
                elif event == "end":
                    if depth == 2:
                        raw = self._scan_child(payload)
                        if raw is not None:
                            if raw.name in seen:
                                raise make_validation_error(
                                    f"Duplicate privilege definition {raw.name!r} "
                                    f"(first declared on line {seen[raw.name]})",
                                    self.source,
                                    raw.line,
                                )
                            seen[raw.name] = raw.line
                            raw_privileges.append(raw)
                        payload.clear()
                        while payload.getprevious() is not None:
                            del payload.getparent()[0]
                    depth -= 1
        except etree.XMLSyntaxError as exc:
            line, column = exc.position
            raise make_parse_error(f"Malformed XML: {exc.msg}", self.source, line, column) from exc

        table.add_defaults()
        definitions = [self._resolve(raw, table) for raw in raw_privileges]
        return definitions, table

    def _bind_declaration(self, table: NamespaceTable, prefix: str, uri: str) -> None:
        if not prefix:
            logger.debug("Ignoring default namespace declaration %r in %s", uri, self.source)
            return
        try:
            table.bind(prefix, uri)
        except NamespaceConflictError as exc:
            raise make_parse_error(exc.message, self.source) from exc

    def _scan_child(self, elem: Any) -> _RawPrivilege | None:
        """Scan a direct child of the root element."""
        tag = _local_name(elem)
        if tag != PRIVILEGE_ELEMENT:
            logger.warning(
                "Skipping unexpected element '%s' in %s (line %s)",
                tag,
                self.source,
                elem.sourceline,
            )
            return None

        raw = _RawPrivilege(
            name=self._name_attribute(elem),
            is_abstract=self._abstract_attribute(elem),
            line=elem.sourceline,
        )
        for child in elem:
            if not isinstance(child.tag, str):
                continue
            if _local_name(child) != CONTAINS_ELEMENT:
                logger.warning(
                    "Skipping unexpected element '%s' in privilege %r",
                    _local_name(child),
                    raw.name,
                )
                continue
            raw.aggregates.append((self._name_attribute(child), child.sourceline))
        return raw

    def _name_attribute(self, elem: Any) -> str:
        name = (elem.get(NAME_ATTRIBUTE) or "").strip()
        if not name:
            raise make_parse_error(
                f"Element '{_local_name(elem)}' is missing the required '{NAME_ATTRIBUTE}' attribute",
                self.source,
                elem.sourceline,
            )
        try:
            split_qualified_name(name)
        except ValueError as exc:
            raise make_parse_error(str(exc), self.source, elem.sourceline) from exc
        return name

    def _abstract_attribute(self, elem: Any) -> bool:
        value = elem.get(ABSTRACT_ATTRIBUTE)
        if value is None:
            return False
        normalized = value.strip().lower()
        if normalized == "true":
            return True
        if normalized == "false":
            return False
        raise make_parse_error(
            f"Invalid value for '{ABSTRACT_ATTRIBUTE}': {value!r} (expected 'true' or 'false')",
            self.source,
            elem.sourceline,
        )

    def _resolve(self, raw: _RawPrivilege, table: NamespaceTable) -> PrivilegeDefinition:
        """Check every prefix against the complete table and build the definition."""
        for name, line in [(raw.name, raw.line), *raw.aggregates]:
            prefix = split_qualified_name(name)[0]
            if prefix not in table:
                raise make_parse_error(
                    f"Unknown namespace prefix {prefix!r} in name {name!r}",
                    self.source,
                    line,
                )
        return PrivilegeDefinition(
            name=raw.name,
            is_abstract=raw.is_abstract,
            aggregates=tuple(name for name, _ in raw.aggregates),
        )


def _local_name(elem: Any) -> str:
    return etree.QName(elem).localname


def read_definitions(
    stream: IO[Any], format_id: str = DEFAULT_FORMAT_ID
) -> tuple[tuple[PrivilegeDefinition, ...], NamespaceTable]:
    """
    Read a privilege document in one call.

    Returns:
        The definitions in document order and the discovered namespace table
    """
    reader = PrivilegeDefinitionReader(stream, format_id)
    return reader.privilege_definitions(), reader.namespaces()
