"""CLI application for comparing database schemas."""

import typer

from dbdiff.cli.commands.compare import compare, pairwise
from dbdiff.cli.commands.inspect import schemas, snapshot, tables

app = typer.Typer(
    help="dbdiff - compare schemas across databases, Unity Catalog and snapshots",
    no_args_is_help=True,
)

app.command("compare")(compare)
app.command("pairwise")(pairwise)
app.command("snapshot")(snapshot)
app.command("schemas")(schemas)
app.command("tables")(tables)


if __name__ == "__main__":
    app()
