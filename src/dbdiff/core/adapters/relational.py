"""Metadata adapter for relational databases reachable through SQLAlchemy.

The adapter exposes a database as a single catalog (named after the URL
database) whose schemas, tables, views and columns are read through the
SQLAlchemy Inspector on first access.
"""

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, SQLAlchemyError

from dbdiff.core.adapters.sqltypes import OTHER, sql_type_code
from dbdiff.core.errors import MetadataUnavailable
from dbdiff.core.model import Catalog, Column, Database, Schema, Table


@contextmanager
def _metadata_errors(what: str):
    try:
        yield
    except SQLAlchemyError as exc:
        raise MetadataUnavailable(f"Could not list {what}: {exc}") from exc


class SqlAlchemyMetadataAdapter:
    """Read catalog metadata from a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._inspector = None

    @property
    def inspector(self):
        if self._inspector is None:
            with _metadata_errors("database metadata"):
                self._inspector = inspect(self.engine)
        return self._inspector

    @property
    def catalog_name(self) -> str:
        url = self.engine.url
        return url.database or url.get_backend_name()

    def list_schema_names(self) -> list[str]:
        with _metadata_errors("schemas"):
            return list(self.inspector.get_schema_names())

    def list_tables(self, schema: str) -> list[Table]:
        """List tables then views of a schema; columns load on first access."""
        with _metadata_errors(f"tables of schema '{schema}'"):
            table_names = self.inspector.get_table_names(schema=schema)
            view_names = self.inspector.get_view_names(schema=schema)
        tables = [
            Table(name, "TABLE", self._column_loader(name, schema))
            for name in table_names
        ]
        views = [
            Table(name, "VIEW", self._column_loader(name, schema))
            for name in view_names
        ]
        return tables + views

    def list_columns(self, table: str, schema: str) -> list[Column]:
        with _metadata_errors(f"columns of '{schema}.{table}'"):
            infos = self.inspector.get_columns(table, schema=schema)
        return [self._column(info) for info in infos]

    def _column_loader(self, table: str, schema: str):
        return lambda: self.list_columns(table, schema)

    def _type_name(self, col_type) -> str:
        try:
            compiled = col_type.compile(dialect=self.engine.dialect)
        except (CompileError, NotImplementedError):
            compiled = type(col_type).__name__
        # VARCHAR(50) -> VARCHAR, NUMERIC(10, 2) -> NUMERIC
        return compiled.split("(", 1)[0].strip().upper()

    def _column(self, info: dict) -> Column:
        col_type = info["type"]
        type_name = self._type_name(col_type)
        size = getattr(col_type, "length", None) or getattr(col_type, "precision", None)
        code = sql_type_code(type_name)
        if code == OTHER:
            affinity = getattr(col_type, "_type_affinity", None)
            code = sql_type_code(getattr(affinity, "__name__", None))
        return Column(
            name=info["name"],
            type_name=type_name,
            size=int(size or 0),
            scale=int(getattr(col_type, "scale", None) or 0),
            sql_type=code,
        )

    def load_database(self, *, alias: str | None = None) -> Database:
        """Build a lazily populated Database; closing it disposes the engine."""
        url = self.engine.url

        def load_catalogs() -> list[Catalog]:
            return [Catalog(self.catalog_name, load_schemas)]

        def load_schemas() -> list[Schema]:
            return [
                Schema(name, self._table_loader(name))
                for name in self.list_schema_names()
            ]

        return Database(
            driver=url.drivername,
            protocol=url.get_backend_name(),
            host=url.host,
            port=url.port or 0,
            name=url.database,
            user=url.username,
            alias=alias,
            catalogs=load_catalogs,
            closer=self.engine.dispose,
        )

    def _table_loader(self, schema: str):
        return lambda: self.list_tables(schema)


def open_sqlalchemy_database(url: str, *, alias: str | None = None) -> Database:
    """Create an engine for `url` and return its lazily loaded Database."""
    try:
        engine = create_engine(url)
    except (SQLAlchemyError, ImportError) as exc:
        raise MetadataUnavailable(f"Could not open database: {exc}") from exc
    return SqlAlchemyMetadataAdapter(engine).load_database(alias=alias)
