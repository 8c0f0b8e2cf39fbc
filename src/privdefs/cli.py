"""
privdefs command line interface.

Host-side tooling around the codec: check, inspect and canonically reformat
privilege documents.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from privdefs import __version__
from privdefs.core import (
    WELL_KNOWN_NAMESPACES,
    CodecConfig,
    NamespaceTable,
    PrivilegeCodecError,
    PrivilegeDefinition,
    PrivilegeDefinitionReader,
    PrivilegeDefinitionWriter,
    find_config,
    load_config,
)

app = typer.Typer(
    help="Read, check and format privilege definition documents",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

FormatOption = Annotated[
    str | None,
    typer.Option("--format", "-f", help="Format identifier (MIME type). Defaults to config or text/xml"),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="privdefs.toml or pyproject.toml to load"),
]
DocumentArgument = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="Privilege document"),
]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"privdefs {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Read, check and format privilege definition documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(config_path: Path | None, document: Path) -> CodecConfig:
    if config_path is None:
        config_path = find_config(document.resolve().parent)
    if config_path is None:
        return CodecConfig()
    return load_config(config_path)


def _read(
    document: Path, format_id: str | None, config: CodecConfig
) -> tuple[tuple[PrivilegeDefinition, ...], NamespaceTable]:
    with open(document, "rb") as f:
        reader = PrivilegeDefinitionReader(f, format_id or config.format_id, source=str(document))
        return reader.privilege_definitions(), reader.namespaces()


def _fail(exc: PrivilegeCodecError) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {exc}", highlight=False, soft_wrap=True)
    return typer.Exit(code=1)


def _document_namespaces(
    definitions: tuple[PrivilegeDefinition, ...],
    namespaces: NamespaceTable,
    extra: dict[str, str],
) -> NamespaceTable:
    """Declared namespaces plus the well-known ones actually referenced."""
    used = set().union(*(d.referenced_prefixes() for d in definitions))
    table = NamespaceTable(
        {
            prefix: uri
            for prefix, uri in namespaces.items()
            if WELL_KNOWN_NAMESPACES.get(prefix) != uri or prefix in used
        }
    )
    for prefix, uri in extra.items():
        table.bind(prefix, uri)
    table.freeze()
    return table


@app.command()
def check(
    document: DocumentArgument,
    format_id: FormatOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Parse a document and report whether it is valid."""
    try:
        config = _load(config_path, document)
        definitions, _ = _read(document, format_id, config)
    except PrivilegeCodecError as exc:
        raise _fail(exc) from exc

    console.print(
        f"[green]OK[/green] {document}: {len(definitions)} privilege definitions", soft_wrap=True
    )


@app.command()
def show(
    document: DocumentArgument,
    format_id: FormatOption = None,
    config_path: ConfigOption = None,
) -> None:
    """List the definitions and namespaces of a document."""
    try:
        config = _load(config_path, document)
        definitions, namespaces = _read(document, format_id, config)
    except PrivilegeCodecError as exc:
        raise _fail(exc) from exc

    table = Table(title=str(document))
    table.add_column("Name", style="cyan")
    table.add_column("Abstract")
    table.add_column("Aggregates")
    for definition in definitions:
        table.add_row(
            definition.name,
            "yes" if definition.is_abstract else "",
            ", ".join(definition.aggregates),
        )
    console.print(table)

    ns_table = Table(title="Namespaces")
    ns_table.add_column("Prefix", style="cyan")
    ns_table.add_column("URI")
    for prefix, uri in _document_namespaces(definitions, namespaces, {}).items():
        ns_table.add_row(prefix, uri)
    console.print(ns_table)


@app.command("format")
def format_document(
    document: DocumentArgument,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write here instead of standard output"),
    ] = None,
    format_id: FormatOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Rewrite a document in canonical form."""
    try:
        config = _load(config_path, document)
        definitions, namespaces = _read(document, format_id, config)
        table = _document_namespaces(definitions, namespaces, config.namespaces)
        writer = PrivilegeDefinitionWriter(format_id or config.format_id, config.writer)
        data = writer.to_bytes(definitions, table)
    except PrivilegeCodecError as exc:
        raise _fail(exc) from exc

    if output is None:
        typer.echo(data.decode(config.writer.encoding), nl=False)
    else:
        output.write_bytes(data)
        err_console.print(f"Wrote {len(definitions)} privilege definitions to {output}")


if __name__ == "__main__":
    app()
