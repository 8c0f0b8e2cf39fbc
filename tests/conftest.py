"""Shared pytest fixtures for privdefs tests."""

from pathlib import Path

import pytest

from privdefs.core import PrivilegeDefinition

FOO_URI = "http://www.foo.com/1.0"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to the privilege document fixtures."""
    return Path(__file__).parent / "fixtures" / "privileges"


@pytest.fixture
def foo_namespaces() -> dict[str, str]:
    return {"foo": FOO_URI}


@pytest.fixture
def expected_definitions() -> list[PrivilegeDefinition]:
    """The five definitions held by readtest.xml, in document order."""
    return [
        PrivilegeDefinition(name="foo:testRead"),
        PrivilegeDefinition(name="foo:testWrite"),
        PrivilegeDefinition(name="foo:testAbstract", is_abstract=True),
        PrivilegeDefinition(name="foo:testNonAbstract", is_abstract=False),
        PrivilegeDefinition(
            name="foo:testAll",
            aggregates=("foo:testRead", "foo:testWrite"),
        ),
    ]
