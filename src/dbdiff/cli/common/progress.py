"""Progress display while table diffs are computed."""

from __future__ import annotations

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from dbdiff.cli.common.output import console
from dbdiff.core.diff import SchemaDiff, TableDiff

_MAX_TABLE_NAME_WIDTH = 40


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def collect_table_diffs_with_progress(diff: SchemaDiff) -> list[TableDiff]:
    """
    Compute every TableDiff of `diff` behind a progress bar.

    Loading columns is the slow part for live sources, so each table name
    advances the bar once its diff (or its absence) is known.

    Returns the available TableDiffs in table-name order.
    """
    names = diff.table_names
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]Comparing tables[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("[dim]{task.fields[table]}[/]"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    out: list[TableDiff] = []
    with progress:
        task_id = progress.add_task("tables", total=max(len(names), 1), table="")
        for name in names:
            progress.update(task_id, table=_truncate(name, _MAX_TABLE_NAME_WIDTH))
            table_diff = diff.table_diff_between_all_schemas(name)
            if table_diff is not None:
                out.append(table_diff)
            progress.advance(task_id, 1)
        progress.update(task_id, completed=max(len(names), 1), table="")
    return out
