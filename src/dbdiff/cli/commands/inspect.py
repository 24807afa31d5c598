"""Commands inspecting a single source or capturing it to a snapshot."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from dbdiff.cli.common.context import SourceContext
from dbdiff.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit
from dbdiff.cli.common.options import ProfileOpt, SchemaOpt, YesOpt
from dbdiff.cli.common.output import out
from dbdiff.core.errors import DiffError
from dbdiff.core.snapshot import save_snapshot
from dbdiff.core.sources import schema_full_names


def schemas(
    source: str = typer.Argument(..., help="Source: [alias=]location"),
    profile: str | None = ProfileOpt,
):
    """List the schemas of a source (catalog.schema)."""
    with SourceContext(profile) as ctx:
        opened = ctx.open(source)
        try:
            with out.status("Loading schemas..."):
                names = schema_full_names(opened.database)
        except DiffError as exc:
            exit_from_exc(exc, message=f"Could not read {opened.label}: {exc}")

    if not names:
        warn_exit("No schemas found.")

    out.header("Schemas")
    out.info(f"Source: {opened.label} | Schemas: {len(names)}")
    out.schemas_table(names)


def tables(
    source: str = typer.Argument(..., help="Source: [alias=]location[#schema]"),
    schema: str | None = SchemaOpt,
    profile: str | None = ProfileOpt,
):
    """List the tables of one schema with type and column count."""
    with SourceContext(profile) as ctx:
        opened = ctx.open(source)
        picked = ctx.schema(opened, schema)
        try:
            with out.status("Loading tables..."):
                count = len(picked.tables)
                column_count = sum(len(t.columns) for t in picked.tables)
        except DiffError as exc:
            exit_from_exc(exc, message=f"Could not read {opened.label}: {exc}")

        if not count:
            warn_exit("No tables found.")

        out.header("Tables")
        out.info(
            f"Source: {opened.label} | Schema: {picked.name} "
            f"| Tables: {count} | Columns: {column_count}"
        )
        out.tables_table(picked)


def snapshot(
    source: str = typer.Argument(..., help="Source: [alias=]location"),
    output: Path = typer.Option(
        ..., "--output", "-o", help="Snapshot file to write", show_default=False
    ),
    yes: bool = YesOpt,
    profile: str | None = ProfileOpt,
):
    """Capture the full metadata tree of a source into a snapshot file."""
    if output.exists() and not yes:
        if not (sys.stdin.isatty() and sys.stdout.isatty()):
            die(f"'{output}' already exists. Use --yes to overwrite.", code=EXIT_USAGE)
        if not out.confirm(f"Overwrite '{output}'?"):
            warn_exit("Cancelled.")

    with SourceContext(profile) as ctx:
        opened = ctx.open(source)
        try:
            with out.status(f"Capturing {opened.label}..."):
                path = save_snapshot(opened.database, output)
        except DiffError as exc:
            exit_from_exc(exc, message=f"Could not capture {opened.label}: {exc}")
        except OSError as exc:
            exit_from_exc(exc, message=f"Could not write '{output}': {exc}")

    out.success(f"Snapshot written to {path.resolve()}")
