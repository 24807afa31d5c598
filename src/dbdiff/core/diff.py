"""N-way schema and table comparison.

A SchemaDiff compares two or more schemas: it builds the sorted union of
their table names and derives, on demand, one TableDiff per table name
present in at least two of them. A TableDiff does the same one level down
for column names.

Both objects are read-only once built. The only state filled later is the
TableDiff memo inside SchemaDiff; filling it twice would produce an equal
result.

``has_differences`` is presence-based at both levels: a column present in
every table with a different type, size or scale does not count. Such
mismatches are reported by :meth:`TableDiff.columns_match` and
:meth:`TableDiff.mismatched_column_names`.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from dbdiff.core.errors import ComparisonPreconditionError
from dbdiff.core.filters import DiffFilter
from dbdiff.core.model import Schema, Table
from dbdiff.core.names import columns_equal, name_key


def _name_union(
    groups: Iterable[Iterable], accepts: Callable[[str], bool]
) -> tuple[str, ...]:
    """Sorted union of accepted names; the first casing seen is kept."""
    seen: dict[str, str] = {}
    for group in groups:
        for node in group:
            name = node.name
            if not accepts(name):
                continue
            seen.setdefault(name_key(name), name)
    return tuple(sorted(seen.values()))


def _require_participants(items: Sequence, kind: str) -> None:
    if len(items) < 2:
        raise ComparisonPreconditionError(
            f"At least two {kind} are required for a comparison (got {len(items)})."
        )


class TableDiff:
    """
    Differences between two or more tables representing the same logical table.

    Args:
        tables: Tables to compare (at least two), already matched by name.
        diff_filter: Optional filter; defaults to accept-all.

    Raises:
        ComparisonPreconditionError: If fewer than two tables are given.
    """

    def __init__(
        self, tables: Iterable[Table], diff_filter: DiffFilter | None = None
    ) -> None:
        self._tables = tuple(tables)
        _require_participants(self._tables, "tables")
        self._filter = diff_filter or DiffFilter.accept_all()
        self._column_names = _name_union(
            (t.columns for t in self._tables), self._filter.accepts_column
        )
        self._has_differences = any(
            not self.all_tables_contain(name) for name in self._column_names
        )

    @property
    def tables(self) -> tuple[Table, ...]:
        return self._tables

    @property
    def diff_filter(self) -> DiffFilter:
        return self._filter

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._column_names

    @property
    def has_differences(self) -> bool:
        """True if some accepted column is missing from at least one table."""
        return self._has_differences

    @property
    def name(self) -> str:
        return self._tables[0].name

    def all_tables_contain(self, column_name: str) -> bool:
        if not self._filter.accepts_column(column_name):
            return False
        return all(t.contains(column_name) for t in self._tables)

    def tables_with_column(self, column_name: str) -> tuple[Table, ...]:
        """Tables containing the column; empty when the filter rejects it."""
        if not self._filter.accepts_column(column_name):
            return ()
        return tuple(t for t in self._tables if t.contains(column_name))

    def columns_match(self, column_name: str) -> bool:
        """True if every table has the column with the same type, size and scale."""
        if not self.all_tables_contain(column_name):
            return False
        first = self._tables[0].get_column(column_name)
        return all(
            columns_equal(first, t.get_column(column_name)) for t in self._tables[1:]
        )

    def mismatched_column_names(self) -> tuple[str, ...]:
        """Columns present in every table but not equal everywhere."""
        return tuple(
            name
            for name in self._column_names
            if self.all_tables_contain(name) and not self.columns_match(name)
        )

    def __repr__(self) -> str:
        return f"TableDiff({self.name!r}, tables={len(self._tables)})"


class SchemaDiff:
    """
    Differences between two or more schemas.

    Args:
        schemas: Schemas to compare (at least two), in report order.
        diff_filter: Optional filter; defaults to accept-all.

    Raises:
        ComparisonPreconditionError: If fewer than two schemas are given.
    """

    def __init__(
        self, schemas: Iterable[Schema], diff_filter: DiffFilter | None = None
    ) -> None:
        self._schemas = tuple(schemas)
        _require_participants(self._schemas, "schemas")
        self._filter = diff_filter or DiffFilter.accept_all()
        self._table_names = _name_union(
            (s.tables for s in self._schemas), self._filter.accepts_table
        )
        self._has_differences = self._check_differences()
        self._table_diffs: dict[str, TableDiff | None] = {}

    def _check_differences(self) -> bool:
        first, others = self._schemas[0], self._schemas[1:]
        for name in self._table_names:
            first_contains = first.contains(name)
            if any(s.contains(name) != first_contains for s in others):
                return True
        return False

    @property
    def schemas(self) -> tuple[Schema, ...]:
        return self._schemas

    @property
    def diff_filter(self) -> DiffFilter:
        return self._filter

    @property
    def table_names(self) -> tuple[str, ...]:
        return self._table_names

    @property
    def has_differences(self) -> bool:
        """True if some accepted table is missing from at least one schema."""
        return self._has_differences

    def all_schemas_contain(self, table_name: str) -> bool:
        if not self._filter.accepts_table(table_name):
            return False
        return all(s.contains(table_name) for s in self._schemas)

    def schemas_with_table(self, table_name: str) -> tuple[Schema, ...]:
        """Schemas containing the table; empty when the filter rejects it."""
        if not self._filter.accepts_table(table_name):
            return ()
        return tuple(s for s in self._schemas if s.contains(table_name))

    def table_diff_between_all_schemas(self, table_name: str) -> TableDiff | None:
        """
        Return the memoized TableDiff for `table_name`.

        None when the filter rejects the name or fewer than two schemas
        contain the table.
        """
        if not self._filter.accepts_table(table_name):
            return None

        key = name_key(table_name)
        if key in self._table_diffs:
            return self._table_diffs[key]

        containing = self.schemas_with_table(table_name)
        table_diff = None
        if len(containing) > 1:
            table_diff = TableDiff(
                [s.get_table(table_name) for s in containing], self._filter
            )
        self._table_diffs[key] = table_diff
        return table_diff

    def table_diffs(self) -> list[TableDiff]:
        """Every available TableDiff, in table-name order."""
        out: list[TableDiff] = []
        for name in self._table_names:
            table_diff = self.table_diff_between_all_schemas(name)
            if table_diff is not None:
                out.append(table_diff)
        return out

    def __repr__(self) -> str:
        names = ", ".join(s.name for s in self._schemas)
        return f"SchemaDiff([{names}], tables={len(self._table_names)})"


def compare_schemas(
    first: Schema,
    second: Schema,
    *more: Schema,
    diff_filter: DiffFilter | None = None,
) -> SchemaDiff:
    """Compare two or more schemas."""
    return SchemaDiff([first, second, *more], diff_filter)


def compare_tables(
    first: Table,
    second: Table,
    *more: Table,
    diff_filter: DiffFilter | None = None,
) -> TableDiff:
    """Compare two or more tables."""
    return TableDiff([first, second, *more], diff_filter)
