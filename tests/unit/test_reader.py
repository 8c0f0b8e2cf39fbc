"""Tests for PrivilegeDefinitionReader."""

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from privdefs.core.errors import ParseError, UnsupportedFormatError, ValidationError
from privdefs.core.model import PrivilegeDefinition
from privdefs.core.reader import PrivilegeDefinitionReader, read_definitions

FOO = "http://www.foo.com/1.0"


def _reader(xml: str, format_id: str = "text/xml") -> PrivilegeDefinitionReader:
    return PrivilegeDefinitionReader(io.BytesIO(xml.encode("utf-8")), format_id)


def _document(body: str, declarations: str = f' xmlns:foo="{FOO}"') -> str:
    return f"<?xml version='1.0' encoding='UTF-8'?>\n<privileges{declarations}>{body}</privileges>"


class TestReadFixture:
    def test_reads_all_definitions_in_order(
        self, fixtures_dir: Path, expected_definitions: list[PrivilegeDefinition]
    ) -> None:
        with open(fixtures_dir / "readtest.xml", "rb") as f:
            reader = PrivilegeDefinitionReader(f, "text/xml")
            definitions = reader.privilege_definitions()

        assert list(definitions) == expected_definitions

    def test_discovers_namespace(self, fixtures_dir: Path) -> None:
        with open(fixtures_dir / "readtest.xml", "rb") as f:
            reader = PrivilegeDefinitionReader(f, "text/xml")
            assert reader.namespaces()["foo"] == FOO

    def test_namespace_table_is_frozen(self, fixtures_dir: Path) -> None:
        with open(fixtures_dir / "readtest.xml", "rb") as f:
            namespaces = PrivilegeDefinitionReader(f).namespaces()
        assert namespaces.frozen

    def test_source_defaults_to_file_name(self, fixtures_dir: Path) -> None:
        with open(fixtures_dir / "readtest.xml", "rb") as f:
            reader = PrivilegeDefinitionReader(f)
        assert reader.source.endswith("readtest.xml")


class TestAttributes:
    def test_abstract_defaults_to_false(self) -> None:
        (definition,) = _reader(_document('<privilege name="foo:a"/>')).privilege_definitions()
        assert definition.is_abstract is False

    @pytest.mark.parametrize("value, expected", [("true", True), ("TRUE", True), ("false", False)])
    def test_abstract_values(self, value: str, expected: bool) -> None:
        body = f'<privilege abstract="{value}" name="foo:a"/>'
        (definition,) = _reader(_document(body)).privilege_definitions()
        assert definition.is_abstract is expected

    def test_invalid_abstract_value(self) -> None:
        body = '<privilege abstract="maybe" name="foo:a"/>'
        with pytest.raises(ParseError, match="maybe"):
            _reader(_document(body)).privilege_definitions()

    def test_aggregation_order_preserved(self) -> None:
        body = (
            '<privilege name="foo:testAll">'
            '<contains name="foo:testRead"/><contains name="foo:testWrite"/>'
            "</privilege>"
        )
        (definition,) = _reader(_document(body)).privilege_definitions()
        assert definition.aggregates == ("foo:testRead", "foo:testWrite")

    def test_aggregates_not_checked_for_existence(self) -> None:
        body = '<privilege name="foo:all"><contains name="foo:undeclared"/></privilege>'
        (definition,) = _reader(_document(body)).privilege_definitions()
        assert definition.aggregates == ("foo:undeclared",)

    def test_unprefixed_name_uses_empty_namespace(self) -> None:
        (definition,) = _reader(_document('<privilege name="plain"/>')).privilege_definitions()
        assert definition.name == "plain"


class TestNamespaces:
    def test_well_known_prefixes_resolve(self) -> None:
        body = '<privilege name="jcr:read"/>'
        reader = _reader(_document(body, declarations=""))
        assert reader.privilege_definitions()[0].name == "jcr:read"
        assert reader.namespaces()["jcr"] == "http://www.jcp.org/jcr/1.0"

    def test_declarations_are_document_scoped(self) -> None:
        body = (
            '<privilege name="bar:a"/>'
            '<privilege xmlns:bar="http://www.bar.com/1.0" name="bar:b"/>'
        )
        reader = _reader(_document(body, declarations=""))
        assert [d.name for d in reader.privilege_definitions()] == ["bar:a", "bar:b"]
        assert reader.namespaces()["bar"] == "http://www.bar.com/1.0"

    def test_unused_declarations_are_reported(self) -> None:
        declarations = f' xmlns:foo="{FOO}" xmlns:unused="http://unused.example/"'
        reader = _reader(_document("", declarations=declarations))
        assert reader.privilege_definitions() == ()
        assert reader.namespaces()["unused"] == "http://unused.example/"

    def test_conflicting_declarations(self) -> None:
        body = '<privilege xmlns:foo="http://other.example/" name="foo:a"/>'
        with pytest.raises(ParseError, match="foo"):
            _reader(_document(body)).privilege_definitions()

    def test_document_may_rebind_well_known_prefix(self) -> None:
        declarations = ' xmlns:jcr="http://example.com/myjcr"'
        reader = _reader(_document('<privilege name="jcr:read"/>', declarations=declarations))
        assert reader.privilege_definitions()[0].name == "jcr:read"
        namespaces = reader.namespaces()
        assert namespaces["jcr"] == "http://example.com/myjcr"
        assert namespaces["nt"] == "http://www.jcp.org/jcr/nt/1.0"

    def test_document_may_alias_well_known_uri(self) -> None:
        declarations = ' xmlns:j="http://www.jcp.org/jcr/1.0"'
        reader = _reader(_document('<privilege name="j:read"/>', declarations=declarations))
        namespaces = reader.namespaces()
        assert namespaces.resolve_uri("http://www.jcp.org/jcr/1.0") == "j"
        assert "jcr" not in namespaces

    def test_unicode_prefix(self) -> None:
        xml = '<privileges xmlns:été="urn:ete"><privilege name="été:read"/></privileges>'
        reader = _reader(xml)
        assert reader.privilege_definitions()[0].name == "été:read"
        assert reader.namespaces()["été"] == "urn:ete"

    def test_default_namespace_ignored(self) -> None:
        xml = '<privileges xmlns="http://default.example/"><privilege name="jcr:read"/></privileges>'
        reader = _reader(xml)
        assert [d.name for d in reader.privilege_definitions()] == ["jcr:read"]
        assert "http://default.example/" not in reader.namespaces().values()

    def test_unknown_prefix_in_name(self) -> None:
        with pytest.raises(ParseError, match="'baz'"):
            _reader(_document('<privilege name="baz:a"/>')).privilege_definitions()

    def test_unknown_prefix_in_contains(self) -> None:
        body = '<privilege name="foo:all"><contains name="baz:a"/></privilege>'
        with pytest.raises(ParseError, match="baz:a"):
            _reader(_document(body)).privilege_definitions()


class TestErrors:
    def test_unsupported_format_does_not_read_stream(self) -> None:
        stream = MagicMock()
        with pytest.raises(UnsupportedFormatError):
            PrivilegeDefinitionReader(stream, "application/unknown")
        stream.read.assert_not_called()

    def test_duplicate_name(self) -> None:
        body = '<privilege name="foo:testRead"/><privilege name="foo:testRead"/>'
        with pytest.raises(ValidationError, match="foo:testRead"):
            _reader(_document(body)).privilege_definitions()

    def test_missing_name(self) -> None:
        with pytest.raises(ParseError, match="name"):
            _reader(_document('<privilege abstract="true"/>')).privilege_definitions()

    def test_contains_missing_name(self) -> None:
        body = '<privilege name="foo:all"><contains/></privilege>'
        with pytest.raises(ParseError):
            _reader(_document(body)).privilege_definitions()

    def test_malformed_name(self) -> None:
        with pytest.raises(ParseError, match="foo:"):
            _reader(_document('<privilege name="foo:"/>')).privilege_definitions()

    def test_malformed_xml_reports_location(self) -> None:
        reader = PrivilegeDefinitionReader(
            io.BytesIO(b"<privileges>\n<privilege name='foo:a'>\n</privileges>"),
            source="broken.xml",
        )
        with pytest.raises(ParseError) as exc_info:
            reader.privilege_definitions()
        assert exc_info.value.context is not None
        assert exc_info.value.context.source == "broken.xml"
        assert exc_info.value.context.line is not None
        assert str(exc_info.value).startswith("broken.xml:")

    def test_empty_document(self) -> None:
        with pytest.raises(ParseError, match="Empty"):
            _reader("").privilege_definitions()

    def test_wrong_root_element(self) -> None:
        with pytest.raises(ParseError, match="privileges"):
            _reader('<privilege name="jcr:read"/>').privilege_definitions()

    def test_failure_is_sticky(self) -> None:
        reader = _reader(_document('<privilege name="baz:a"/>'))
        with pytest.raises(ParseError):
            reader.privilege_definitions()
        with pytest.raises(ParseError):
            reader.namespaces()


class TestStreams:
    def test_text_stream(self) -> None:
        reader = PrivilegeDefinitionReader(io.StringIO(_document('<privilege name="foo:a"/>')))
        assert reader.privilege_definitions() == (PrivilegeDefinition(name="foo:a"),)

    def test_text_stream_ignores_declared_encoding(self) -> None:
        xml = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>'
            f'<privileges xmlns:foo="{FOO}"><privilege name="foo:café"/></privileges>'
        )
        reader = PrivilegeDefinitionReader(io.StringIO(xml))
        assert reader.privilege_definitions()[0].name == "foo:café"

    def test_binary_stream_uses_declared_encoding(self) -> None:
        xml = (
            '<?xml version="1.0" encoding="ISO-8859-1"?>'
            f'<privileges xmlns:foo="{FOO}"><privilege name="foo:café"/></privileges>'
        )
        reader = PrivilegeDefinitionReader(io.BytesIO(xml.encode("iso-8859-1")))
        assert reader.privilege_definitions()[0].name == "foo:café"

    def test_unknown_elements_skipped(self) -> None:
        body = '<comment/><privilege name="foo:a"><note/><contains name="foo:b"/></privilege>'
        (definition,) = _reader(_document(body)).privilege_definitions()
        assert definition.aggregates == ("foo:b",)

    def test_repeated_calls_return_same_result(self) -> None:
        reader = _reader(_document('<privilege name="foo:a"/>'))
        assert reader.privilege_definitions() is reader.privilege_definitions()

    def test_read_definitions_helper(self) -> None:
        definitions, namespaces = read_definitions(
            io.BytesIO(_document('<privilege name="foo:a"/>').encode()), "application/xml"
        )
        assert definitions == (PrivilegeDefinition(name="foo:a"),)
        assert namespaces["foo"] == FOO
