"""Common CLI options for the CLI."""

import typer

ProfileOpt = typer.Option(
    None,
    "--profile",
    "-p",
    envvar="DATABRICKS_CONFIG_PROFILE",
    help="Databricks CLI profile for databricks:// sources without one",
)

SchemaOpt = typer.Option(
    None,
    "--schema",
    "-s",
    help="Schema to use for sources without '#schema' (schema or catalog.schema)",
)

OutputOpt = typer.Option(
    "dbdiff-report.xlsx",
    "--output",
    "-o",
    envvar="DBDIFF_OUTPUT",
    help="Path of the Excel report to write",
)

IgnoreColumnOpt = typer.Option(
    [],
    "--ignore-column",
    help="Column name to leave out of the comparison. This is reusable.",
    show_default=False,
)

IgnoreTableOpt = typer.Option(
    [],
    "--ignore-table",
    help="Table name to leave out of the comparison. This is reusable.",
    show_default=False,
)

IgnoreTableRegexOpt = typer.Option(
    None,
    "--ignore-table-regex",
    help="Regex; matching table names are left out (case-insensitive)",
)

IgnoreColumnRegexOpt = typer.Option(
    None,
    "--ignore-column-regex",
    help="Regex; matching column names are left out (case-insensitive)",
)

FailOnDiffOpt = typer.Option(
    False,
    "--fail-on-diff",
    help="Exit with code 1 when differences are found",
)

YesOpt = typer.Option(
    False,
    "--yes",
    "-y",
    help="Skip confirmation prompts",
)
