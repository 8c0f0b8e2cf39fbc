"""
Namespace table and qualified-name helpers.

A privilege name is written ``prefix:localName``; the prefix is resolved
through a :class:`NamespaceTable` holding the prefix/URI bindings in force for
a single read or write operation.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

from .errors import NamespaceConflictError, NamespaceError, NamespaceNotFoundError

logger = logging.getLogger(__name__)

XML_PREFIX = "xml"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# Bindings every repository knows about before any document is read.
WELL_KNOWN_NAMESPACES: dict[str, str] = {
    "": "",
    "jcr": "http://www.jcp.org/jcr/1.0",
    "nt": "http://www.jcp.org/jcr/nt/1.0",
    "mix": "http://www.jcp.org/jcr/mix/1.0",
    "sv": "http://www.jcp.org/jcr/sv/1.0",
    XML_PREFIX: XML_NAMESPACE,
    "rep": "internal",
}

_LOCAL_NAME_RE = re.compile(r"^[^\s:/\[\]|*{}]+$")
_PREFIX_RE = re.compile(r"^[^\W\d][\w.\-]*$")


def split_qualified_name(name: str) -> tuple[str, str]:
    """
    Split ``prefix:local`` into its parts.

    A name without a colon has the empty prefix.

    Raises:
        ValueError: If the name is not a well-formed qualified name
    """
    prefix, sep, local = name.partition(":")
    if not sep:
        prefix, local = "", name
    elif not _PREFIX_RE.match(prefix):
        raise ValueError(f"Invalid namespace prefix in name {name!r}")
    if not _LOCAL_NAME_RE.match(local):
        raise ValueError(f"Invalid local name in name {name!r}")
    return prefix, local


def expanded_name(name: str, table: NamespaceTable) -> str:
    """Return the ``{uri}local`` form of a qualified name."""
    prefix, local = split_qualified_name(name)
    return f"{{{table.resolve_prefix(prefix)}}}{local}"


class NamespaceTable(Mapping[str, str]):
    """
    Bidirectional prefix <-> URI mapping.

    Each prefix maps to exactly one URI and each URI to exactly one prefix.
    Tables handed back to callers are frozen and reject further bindings.
    """

    def __init__(self, bindings: Mapping[str, str] | None = None):
        self._prefix_to_uri: dict[str, str] = {}
        self._uri_to_prefix: dict[str, str] = {}
        self._frozen = False
        for prefix, uri in (bindings or {}).items():
            self.bind(prefix, uri)

    @classmethod
    def with_defaults(cls) -> NamespaceTable:
        """Create a table pre-populated with the well-known bindings."""
        return cls(WELL_KNOWN_NAMESPACES)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> NamespaceTable:
        """Build a frozen table from a plain mapping (or copy another table)."""
        table = cls(mapping)
        table.freeze()
        return table

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the table read-only."""
        self._frozen = True

    def bind(self, prefix: str, uri: str) -> None:
        """
        Bind a prefix to a URI.

        Re-binding an identical pair is a no-op.

        Raises:
            NamespaceError: If the table is frozen
            NamespaceConflictError: If prefix or URI is already bound differently
        """
        if self._frozen:
            raise NamespaceError(f"Namespace table is frozen; cannot bind {prefix!r}")

        existing_uri = self._prefix_to_uri.get(prefix)
        if existing_uri is not None and existing_uri != uri:
            raise NamespaceConflictError(prefix, uri, f"{prefix!r} -> {existing_uri!r}")

        existing_prefix = self._uri_to_prefix.get(uri)
        if existing_prefix is not None and existing_prefix != prefix:
            raise NamespaceConflictError(prefix, uri, f"{existing_prefix!r} -> {uri!r}")

        if existing_uri is None:
            logger.debug("Binding namespace prefix %r to %r", prefix, uri)
            self._prefix_to_uri[prefix] = uri
            self._uri_to_prefix[uri] = prefix

    def add_defaults(self, defaults: Mapping[str, str] = WELL_KNOWN_NAMESPACES) -> None:
        """
        Add fallback bindings whose prefix and URI are both still free.

        Existing bindings always win, so a document may rebind a well-known
        prefix or declare a well-known URI under a prefix of its own.
        """
        for prefix, uri in defaults.items():
            if prefix in self._prefix_to_uri or uri in self._uri_to_prefix:
                logger.debug("Skipping default binding %r -> %r: already taken", prefix, uri)
                continue
            self.bind(prefix, uri)

    def resolve_prefix(self, prefix: str) -> str:
        """Return the URI bound to ``prefix``."""
        try:
            return self._prefix_to_uri[prefix]
        except KeyError:
            raise NamespaceNotFoundError(f"Unknown namespace prefix: {prefix!r}") from None

    def resolve_uri(self, uri: str) -> str:
        """Return the prefix bound to ``uri``."""
        try:
            return self._uri_to_prefix[uri]
        except KeyError:
            raise NamespaceNotFoundError(f"Unknown namespace URI: {uri!r}") from None

    def prefixes(self) -> list[str]:
        return list(self._prefix_to_uri)

    def to_dict(self) -> dict[str, str]:
        return dict(self._prefix_to_uri)

    def __getitem__(self, prefix: str) -> str:
        return self.resolve_prefix(prefix)

    def __iter__(self) -> Iterator[str]:
        return iter(self._prefix_to_uri)

    def __len__(self) -> int:
        return len(self._prefix_to_uri)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._prefix_to_uri

    def __repr__(self) -> str:
        state = ", frozen" if self._frozen else ""
        return f"NamespaceTable({self._prefix_to_uri!r}{state})"
