"""Spreadsheet report for a SchemaDiff.

The first sheet lists every table name side by side for each schema; each
table with differences gets its own sheet listing columns side by side.
Cells are green when every participant agrees, yellow when the object is
present but not everywhere (or not equal everywhere) and red with a merged
"MISSING" where it is absent.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from dbdiff.core.diff import SchemaDiff, TableDiff
from dbdiff.core.model import Table

MISSING = "MISSING"

SCHEMA_COLUMNS = (("Type", 25), ("Name", 55))
TABLE_COLUMNS = (("Column", 40), ("Type", 20), ("Size", 10), ("Scale", 10))

_MAX_TITLE = 31
_BAD_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")

_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


GREEN_FILL_COLOR = "CCFFCC"
YELLOW_FILL_COLOR = "FFFFCC"
CORAL_FILL_COLOR = "FF8080"
GREY_FILL_COLOR = "C0C0C0"

GREEN = _fill(GREEN_FILL_COLOR)
YELLOW = _fill(YELLOW_FILL_COLOR)
RED = _fill(CORAL_FILL_COLOR)
GREY = _fill(GREY_FILL_COLOR)


def _style(cell, fill: PatternFill, *, header: bool = False, center: bool = False):
    cell.fill = fill
    cell.border = _BORDER
    if header:
        cell.font = Font(bold=True)
    if header or center:
        cell.alignment = Alignment(horizontal="center", vertical="center")


def sheet_title(name: str | None, used: set[str]) -> str:
    """Excel-safe, workbook-unique sheet title derived from `name`."""
    base = _BAD_TITLE_CHARS.sub("_", name or "").strip("'") or "Sheet"
    base = base[:_MAX_TITLE]
    title, n = base, 1
    while title.casefold() in used:
        n += 1
        suffix = f" ({n})"
        title = f"{base[: _MAX_TITLE - len(suffix)]}{suffix}"
    used.add(title.casefold())
    return title


def _set_widths(ws: Worksheet, spec: Sequence[tuple[str, int]], groups: int) -> None:
    for group in range(groups):
        for offset, (_, width) in enumerate(spec):
            letter = get_column_letter(group * len(spec) + offset + 1)
            ws.column_dimensions[letter].width = width


def _header_rows(
    ws: Worksheet,
    title: str,
    labels: Sequence[str],
    spec: Sequence[tuple[str, int]],
) -> None:
    width = len(spec)
    last_col = width * len(labels)

    for col in range(1, last_col + 1):
        _style(ws.cell(row=1, column=col), GREY, header=True)
    ws.cell(row=1, column=1, value=title)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_col)

    for index, label in enumerate(labels):
        first = index * width + 1
        for offset, (heading, _) in enumerate(spec):
            _style(ws.cell(row=2, column=first + offset), GREY, header=True)
            cell = ws.cell(row=3, column=first + offset, value=heading)
            _style(cell, GREY, header=True)
        ws.cell(row=2, column=first, value=label)
        ws.merge_cells(
            start_row=2, start_column=first, end_row=2, end_column=first + width - 1
        )


def _missing(ws: Worksheet, row: int, first: int, width: int) -> None:
    for col in range(first, first + width):
        _style(ws.cell(row=row, column=col), RED, center=True)
    ws.cell(row=row, column=first, value=MISSING)
    ws.merge_cells(
        start_row=row, start_column=first, end_row=row, end_column=first + width - 1
    )


def _table_label(table: Table) -> str:
    schema = table.schema
    return schema.label if schema is not None else table.name


def write_schema_sheet(ws: Worksheet, diff: SchemaDiff) -> None:
    """Fill `ws` with the table-presence grid of `diff`."""
    width = len(SCHEMA_COLUMNS)
    _set_widths(ws, SCHEMA_COLUMNS, len(diff.schemas))
    _header_rows(
        ws,
        f"Schema {diff.schemas[0].name}",
        [s.label for s in diff.schemas],
        SCHEMA_COLUMNS,
    )

    for row, table_name in enumerate(diff.table_names, start=4):
        everywhere = diff.all_schemas_contain(table_name)
        for index, schema in enumerate(diff.schemas):
            first = index * width + 1
            table = schema.get_table(table_name)
            if table is None:
                _missing(ws, row, first, width)
                continue
            fill = GREEN if everywhere else YELLOW
            for offset, value in enumerate((table.table_type, table.name)):
                cell = ws.cell(row=row, column=first + offset, value=value)
                _style(cell, fill)


def write_table_sheet(ws: Worksheet, diff: TableDiff) -> None:
    """Fill `ws` with the column grid of `diff`."""
    width = len(TABLE_COLUMNS)
    _set_widths(ws, TABLE_COLUMNS, len(diff.tables))
    _header_rows(
        ws,
        f"Table {diff.name}",
        [_table_label(t) for t in diff.tables],
        TABLE_COLUMNS,
    )

    for row, column_name in enumerate(diff.column_names, start=4):
        matching = diff.columns_match(column_name)
        for index, table in enumerate(diff.tables):
            first = index * width + 1
            column = table.get_column(column_name)
            if column is None:
                _missing(ws, row, first, width)
                continue
            fill = GREEN if matching else YELLOW
            values = (
                column.name,
                column.type_name,
                column.size if column.size > 0 else None,
                column.scale if column.scale > 0 else None,
            )
            for offset, value in enumerate(values):
                cell = ws.cell(row=row, column=first + offset, value=value)
                _style(cell, fill)


def reportable(table_diff: TableDiff) -> bool:
    """True when the table deserves its own sheet."""
    return table_diff.has_differences or bool(table_diff.mismatched_column_names())


def build_workbook(
    diff: SchemaDiff, table_diffs: Iterable[TableDiff] | None = None
) -> Workbook:
    """
    Build the report workbook in memory.

    Args:
        diff: Schema comparison to render.
        table_diffs: Precomputed table diffs (e.g. collected behind a progress
            bar); taken from `diff` when None.
    """
    if table_diffs is None:
        table_diffs = diff.table_diffs()

    used: set[str] = set()
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title(diff.schemas[0].name, used)
    write_schema_sheet(ws, diff)

    for table_diff in table_diffs:
        if not reportable(table_diff):
            continue
        ws = wb.create_sheet(title=sheet_title(table_diff.name, used))
        write_table_sheet(ws, table_diff)
    return wb


def export_workbook(
    diff: SchemaDiff,
    path: Path,
    *,
    table_diffs: Iterable[TableDiff] | None = None,
) -> Path:
    """Write the report to `path` (.xlsx) and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb = build_workbook(diff, table_diffs)
    wb.save(path)
    return path
