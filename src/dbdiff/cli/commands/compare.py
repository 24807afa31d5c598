"""Commands comparing schemas across sources."""

from __future__ import annotations

import time
from pathlib import Path

import typer

from dbdiff.cli.common.context import SourceContext
from dbdiff.cli.common.exits import EXIT_FAILURE, EXIT_USAGE, die, exit_from_exc
from dbdiff.cli.common.options import (
    FailOnDiffOpt,
    IgnoreColumnOpt,
    IgnoreColumnRegexOpt,
    IgnoreTableOpt,
    IgnoreTableRegexOpt,
    OutputOpt,
    ProfileOpt,
    SchemaOpt,
)
from dbdiff.cli.common.output import format_interval, out
from dbdiff.cli.common.progress import collect_table_diffs_with_progress
from dbdiff.core.diff import SchemaDiff
from dbdiff.core.errors import DiffError
from dbdiff.core.filters import build_filter
from dbdiff.core.pairwise import compare_schemas_pairwise, compare_tables_pairwise
from dbdiff.report.excel import export_workbook, reportable


def compare(
    sources: list[str] = typer.Argument(
        ...,
        help="Two or more sources: [alias=]location[#schema]",
        show_default=False,
    ),
    schema: str | None = SchemaOpt,
    output: Path = OutputOpt,
    ignore_column: list[str] = IgnoreColumnOpt,
    ignore_table: list[str] = IgnoreTableOpt,
    ignore_table_regex: str | None = IgnoreTableRegexOpt,
    ignore_column_regex: str | None = IgnoreColumnRegexOpt,
    fail_on_diff: bool = FailOnDiffOpt,
    profile: str | None = ProfileOpt,
):
    """
    Compare one schema of every source and write an Excel report.

    Examples:
      dbdiff compare dev=sqlite:///dev.db#main prod=sqlite:///prod.db#main
      dbdiff compare a.dbsnap b.dbsnap c.dbsnap --schema sales -o sales.xlsx
    """
    if len(sources) < 2:
        die("At least two sources are required.", code=EXIT_USAGE)

    try:
        diff_filter = build_filter(
            ignore_tables=ignore_table,
            ignore_columns=ignore_column,
            ignore_table_regex=ignore_table_regex,
            ignore_column_regex=ignore_column_regex,
        )
    except ValueError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)

    started = time.monotonic()
    with SourceContext(profile) as ctx:
        opened = ctx.open_all(sources)
        schemas = [ctx.schema(source, schema) for source in opened]

        try:
            with out.status("Comparing schemas..."):
                diff = SchemaDiff(schemas, diff_filter)
            table_diffs = collect_table_diffs_with_progress(diff)
            reported = [td for td in table_diffs if reportable(td)]

            out.header("Schema comparison")
            out.participants_table(diff)
            out.presence_table(diff)
            if reported:
                out.table_diffs_table(reported)

            with out.status("Writing Excel report..."):
                path = export_workbook(diff, output, table_diffs=table_diffs)
        except DiffError as exc:
            exit_from_exc(exc, message=f"Comparison failed: {exc}")
        except OSError as exc:
            exit_from_exc(exc, message=f"Could not write report '{output}': {exc}")

    out.kv(
        {
            "Tables": len(diff.table_names),
            "Tables with differences": len(reported),
            "Report": path.resolve(),
            "Elapsed": format_interval(time.monotonic() - started),
        }
    )

    if diff.has_differences or reported:
        out.warn("Differences found.")
        if fail_on_diff:
            raise typer.Exit(EXIT_FAILURE)
        return
    out.success("No differences found.")


def pairwise(
    left: str = typer.Argument(..., help="Left source: [alias=]location[#schema]"),
    right: str = typer.Argument(..., help="Right source: [alias=]location[#schema]"),
    schema: str | None = SchemaOpt,
    table: str | None = typer.Option(
        None, "--table", "-t", help="Compare the columns of this table instead"
    ),
    fail_on_diff: bool = FailOnDiffOpt,
    profile: str | None = ProfileOpt,
):
    """Two-way comparison listing what is missing on the left and on the right."""
    with SourceContext(profile) as ctx:
        left_src, right_src = ctx.open_all([left, right])
        left_schema = ctx.schema(left_src, schema)
        right_schema = ctx.schema(right_src, schema)

        try:
            if table:
                left_table = left_schema.get_table(table)
                right_table = right_schema.get_table(table)
                for found, source in ((left_table, left_src), (right_table, right_src)):
                    if found is None:
                        die(
                            f"Table '{table}' not found in {source.label}.",
                            code=EXIT_USAGE,
                        )
                comparison = compare_tables_pairwise(left_table, right_table)
                title = f"Table {left_table.name}"
            else:
                comparison = compare_schemas_pairwise(left_schema, right_schema)
                title = f"Schema {left_schema.name}"
        except DiffError as exc:
            exit_from_exc(exc, message=f"Comparison failed: {exc}")

        out.pairwise_table(
            comparison, left=left_src.label, right=right_src.label, title=title
        )

    missing = len(comparison.missing_on_left) + len(comparison.missing_on_right)
    out.kv(
        {
            f"Missing on {left_src.label}": len(comparison.missing_on_left),
            f"Missing on {right_src.label}": len(comparison.missing_on_right),
        }
    )
    if missing:
        out.warn("Differences found.")
        if fail_on_diff:
            raise typer.Exit(EXIT_FAILURE)
        return
    out.success("No differences found.")
