"""Two-way comparison with explicit missing-on-left / missing-on-right partitions.

These helpers wrap the N-way diff with exactly two participants and repackage
its result into three sorted tuples, which is what simple side-by-side
reports want.
"""

from __future__ import annotations

from dataclasses import dataclass

from dbdiff.core.diff import SchemaDiff, TableDiff
from dbdiff.core.model import Column, Schema, Table


@dataclass(frozen=True)
class SchemaComparison:
    """
    Result of comparing two schemas.

    Attributes:
        all_tables: Every table, matched tables represented by the left one.
        missing_on_left: Tables only present on the right.
        missing_on_right: Tables only present on the left.
    """

    all_tables: tuple[Table, ...]
    missing_on_left: tuple[Table, ...]
    missing_on_right: tuple[Table, ...]


@dataclass(frozen=True)
class TableComparison:
    """
    Result of comparing two tables.

    Attributes:
        all_columns: Every column, matched columns represented by the left one.
        missing_on_left: Columns only present on the right.
        missing_on_right: Columns only present on the left.
    """

    all_columns: tuple[Column, ...]
    missing_on_left: tuple[Column, ...]
    missing_on_right: tuple[Column, ...]


def _table_sort_key(table: Table) -> tuple[str, str]:
    return table.name, table.table_type or ""


def _column_sort_key(column: Column) -> tuple[str, str]:
    return column.name, column.type_name or ""


def compare_schemas_pairwise(left: Schema, right: Schema) -> SchemaComparison:
    """Partition the tables of two schemas into matched and one-sided sets."""
    diff = SchemaDiff([left, right])
    everything: list[Table] = []
    missing_on_left: list[Table] = []
    missing_on_right: list[Table] = []

    for name in diff.table_names:
        left_table = left.get_table(name)
        right_table = right.get_table(name)
        if left_table is None:
            missing_on_left.append(right_table)
            everything.append(right_table)
        else:
            if right_table is None:
                missing_on_right.append(left_table)
            everything.append(left_table)

    return SchemaComparison(
        all_tables=tuple(sorted(everything, key=_table_sort_key)),
        missing_on_left=tuple(sorted(missing_on_left, key=_table_sort_key)),
        missing_on_right=tuple(sorted(missing_on_right, key=_table_sort_key)),
    )


def compare_tables_pairwise(left: Table, right: Table) -> TableComparison:
    """Partition the columns of two tables into matched and one-sided sets."""
    diff = TableDiff([left, right])
    everything: list[Column] = []
    missing_on_left: list[Column] = []
    missing_on_right: list[Column] = []

    for name in diff.column_names:
        left_column = left.get_column(name)
        right_column = right.get_column(name)
        if left_column is None:
            missing_on_left.append(right_column)
            everything.append(right_column)
        else:
            if right_column is None:
                missing_on_right.append(left_column)
            everything.append(left_column)

    return TableComparison(
        all_columns=tuple(sorted(everything, key=_column_sort_key)),
        missing_on_left=tuple(sorted(missing_on_left, key=_column_sort_key)),
        missing_on_right=tuple(sorted(missing_on_right, key=_column_sort_key)),
    )
