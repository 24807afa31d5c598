"""Filters restricting which tables and columns take part in a comparison.

A DiffFilter is a pair of pure predicates, one for table names and one for
column names. Filters are built from plain functions and combined with a
logical AND, so exclusion lists compose naturally::

    f = DiffFilter.ignore_column_named("CREATED_AT") & DiffFilter.ignore_table_named(
        "AUDIT_LOG"
    )

Filters are immutable and side-effect free; one instance can be shared by
any number of comparisons.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable

from dbdiff.core.names import same_name

NamePredicate = Callable[[str], bool]


def _accept(_name: str) -> bool:
    return True


@dataclass(frozen=True)
class DiffFilter:
    """Pair of name predicates gating tables and columns."""

    table_predicate: NamePredicate = _accept
    column_predicate: NamePredicate = _accept

    @classmethod
    def accept_all(cls) -> DiffFilter:
        return cls()

    @classmethod
    def ignore_column_named(cls, name: str) -> DiffFilter:
        """Reject columns called `name` (case-insensitive); accept every table."""
        return cls(column_predicate=lambda candidate: not same_name(candidate, name))

    @classmethod
    def ignore_table_named(cls, name: str) -> DiffFilter:
        """Reject tables called `name` (case-insensitive); accept every column."""
        return cls(table_predicate=lambda candidate: not same_name(candidate, name))

    @classmethod
    def ignore_tables_matching(cls, pattern: str) -> DiffFilter:
        """Reject tables whose name matches the regex (searched, case-insensitive)."""
        regex = _compile(pattern)
        return cls(table_predicate=lambda candidate: not regex.search(candidate))

    @classmethod
    def ignore_columns_matching(cls, pattern: str) -> DiffFilter:
        """Reject columns whose name matches the regex (searched, case-insensitive)."""
        regex = _compile(pattern)
        return cls(column_predicate=lambda candidate: not regex.search(candidate))

    def accepts_table(self, name: str) -> bool:
        return self.table_predicate(name)

    def accepts_column(self, name: str) -> bool:
        return self.column_predicate(name)

    def and_(self, other: DiffFilter) -> DiffFilter:
        """Return a filter accepting only what both filters accept."""
        left, right = self, other
        return DiffFilter(
            table_predicate=lambda n: left.accepts_table(n) and right.accepts_table(n),
            column_predicate=lambda n: left.accepts_column(n)
            and right.accepts_column(n),
        )

    __and__ = and_


def _compile(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ValueError(f"Invalid regex expression: {exc}") from exc


def build_filter(
    *,
    ignore_tables: Iterable[str] = (),
    ignore_columns: Iterable[str] = (),
    ignore_table_regex: str | None = None,
    ignore_column_regex: str | None = None,
) -> DiffFilter:
    """
    Build one composed DiffFilter from user-provided exclusions.

    Args:
        ignore_tables: Table names to leave out of the comparison.
        ignore_columns: Column names to leave out (e.g. audit columns).
        ignore_table_regex: Optional regex excluding matching table names.
        ignore_column_regex: Optional regex excluding matching column names.

    Returns:
        The accept-all filter when nothing is excluded, otherwise the AND of
        every exclusion.

    Raises:
        ValueError: If a regex is invalid.
    """
    filters: list[DiffFilter] = []
    filters.extend(DiffFilter.ignore_table_named(n) for n in ignore_tables if n)
    filters.extend(DiffFilter.ignore_column_named(n) for n in ignore_columns if n)
    if ignore_table_regex:
        filters.append(DiffFilter.ignore_tables_matching(ignore_table_regex))
    if ignore_column_regex:
        filters.append(DiffFilter.ignore_columns_matching(ignore_column_regex))

    if not filters:
        return DiffFilter.accept_all()

    combined = filters[0]
    for f in filters[1:]:
        combined = combined & f
    return combined
