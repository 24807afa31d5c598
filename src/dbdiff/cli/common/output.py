"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from dbdiff.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM
from dbdiff.core.diff import SchemaDiff, TableDiff
from dbdiff.core.model import Schema
from dbdiff.core.pairwise import SchemaComparison, TableComparison

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


def format_interval(seconds: float) -> str:
    """Format an elapsed time as HH:MM:SS.mmm."""
    millis = int(round(seconds * 1000))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def _schema_ref(schema: Schema) -> str:
    catalog = schema.catalog
    if catalog is not None and catalog.name:
        return f"{catalog.name}.{schema.name}"
    return schema.name


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts so they stand out from rich output."""
        return f"[dbdiff] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask a yes/no question with the shared confirmation style."""
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def schemas_table(self, schemas: Iterable[str], title: str = "Schemas") -> None:
        """Render a table of schema names (catalog.schema)."""
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")

        for s in schemas:
            t.add_row(str(s))

        console.print(t)

    def tables_table(self, schema: Schema, title: str = "Tables") -> None:
        """Render the tables of a schema with type and column count."""
        t = Table(title=title, show_lines=False)
        t.add_column("Table", style="ok")
        t.add_column("Type", style="meta")
        t.add_column("Columns", justify="right")

        for table in schema.tables:
            t.add_row(table.name, table.table_type or "", str(len(table.columns)))

        console.print(t)

    def participants_table(
        self, diff: SchemaDiff, title: str = "Compared schemas"
    ) -> None:
        """Render one row per compared schema."""
        t = Table(title=title, show_lines=False)
        t.add_column("#", style="meta", justify="right")
        t.add_column("Source", style="ok")
        t.add_column("Schema")
        t.add_column("Tables", justify="right")

        for index, schema in enumerate(diff.schemas, start=1):
            t.add_row(
                str(index),
                schema.label,
                _schema_ref(schema),
                str(len(schema.tables)),
            )

        console.print(t)

    def presence_table(self, diff: SchemaDiff, title: str = "Table presence") -> None:
        """
        Render the tables not present in every schema.

        One column per schema shows ✓ or MISSING.
        """
        partial = [n for n in diff.table_names if not diff.all_schemas_contain(n)]
        if not partial:
            return

        t = Table(title=title, show_lines=False)
        t.add_column("Table", style="ok")
        for schema in diff.schemas:
            t.add_column(schema.label, justify="center")

        for name in partial:
            cells = [
                "[ok]✓[/]" if schema.contains(name) else "[err]MISSING[/]"
                for schema in diff.schemas
            ]
            t.add_row(name, *cells)

        console.print(t)

    def table_diffs_table(
        self, table_diffs: Iterable[TableDiff], title: str = "Tables with differences"
    ) -> None:
        """Render missing and mismatched columns per table diff."""
        t = Table(title=title, show_lines=False)
        t.add_column("Table", style="ok")
        t.add_column("Missing columns", style="err")
        t.add_column("Mismatched columns", style="warn")

        for table_diff in table_diffs:
            missing = [
                n
                for n in table_diff.column_names
                if not table_diff.all_tables_contain(n)
            ]
            t.add_row(
                table_diff.name,
                ", ".join(missing),
                ", ".join(table_diff.mismatched_column_names()),
            )

        console.print(t)

    def pairwise_table(
        self,
        comparison: SchemaComparison | TableComparison,
        *,
        left: str,
        right: str,
        title: str = "Pairwise comparison",
    ) -> None:
        """
        Render a two-way partition of tables or columns.

        Matched entries show ✓ on both sides; one-sided entries show MISSING
        on the side that lacks them.
        """
        if isinstance(comparison, SchemaComparison):
            kind = "Table"
            items = comparison.all_tables
            type_attr = "table_type"
        else:
            kind = "Column"
            items = comparison.all_columns
            type_attr = "type_name"
        missing_left = {id(item) for item in comparison.missing_on_left}
        missing_right = {id(item) for item in comparison.missing_on_right}

        t = Table(title=title, show_lines=False)
        t.add_column(kind, style="ok")
        t.add_column("Type", style="meta")
        t.add_column(left, justify="center")
        t.add_column(right, justify="center")

        for item in items:
            on_left = "[err]MISSING[/]" if id(item) in missing_left else "[ok]✓[/]"
            on_right = "[err]MISSING[/]" if id(item) in missing_right else "[ok]✓[/]"
            t.add_row(item.name, getattr(item, type_attr) or "", on_left, on_right)

        console.print(t)


out = Out()
