"""Unity Catalog metadata through the Databricks SDK."""

from __future__ import annotations

from contextlib import contextmanager

from databricks.sdk import WorkspaceClient
from databricks.sdk.errors import DatabricksError

from dbdiff.core.adapters.sqltypes import sql_type_code
from dbdiff.core.errors import MetadataUnavailable
from dbdiff.core.model import Catalog, Column, Database, Schema, Table


@contextmanager
def _metadata_errors(what: str):
    try:
        yield
    except DatabricksError as exc:
        raise MetadataUnavailable(f"Could not list {what}: {exc}") from exc


def _enum_value(value) -> str | None:
    if value is None:
        return None
    return str(getattr(value, "value", value))


class UnityCatalogAdapter:
    """Adapter around Databricks SDK Unity Catalog APIs (catalogs/schemas/tables)."""

    def __init__(self, client: WorkspaceClient) -> None:
        self.client = client

    def list_catalog_names(self) -> list[str]:
        """List catalogs visible to the current principal."""
        with _metadata_errors("catalogs"):
            return [
                c.name for c in self.client.catalogs.list() if getattr(c, "name", None)
            ]

    def list_schema_names(self, catalog: str) -> list[str]:
        """List schema names in a catalog."""
        out: list[str] = []
        with _metadata_errors(f"schemas of catalog '{catalog}'"):
            for s in self.client.schemas.list(catalog_name=catalog):
                name = getattr(s, "name", None)
                full_name = getattr(s, "full_name", None)
                if not name and full_name:
                    name = full_name.split(".")[-1]
                if name:
                    out.append(name)
        return out

    def list_tables(self, catalog: str, schema: str) -> list[Table]:
        """List tables of catalog.schema, columns included."""
        out: list[Table] = []
        with _metadata_errors(f"tables of schema '{catalog}.{schema}'"):
            for t in self.client.tables.list(catalog_name=catalog, schema_name=schema):
                name = getattr(t, "name", None)
                if not name:
                    continue
                # TableInfo.table_type is an enum (MANAGED, EXTERNAL, VIEW, ...)
                table_type = _enum_value(getattr(t, "table_type", None)) or "TABLE"
                columns = [self._column(c) for c in (getattr(t, "columns", None) or [])]
                out.append(Table(name, table_type, columns))
        return out

    @staticmethod
    def _column(info) -> Column:
        type_name = _enum_value(getattr(info, "type_name", None)) or (
            getattr(info, "type_text", None) or ""
        ).upper()
        return Column(
            name=info.name,
            type_name=type_name,
            size=getattr(info, "type_precision", None) or 0,
            scale=getattr(info, "type_scale", None) or 0,
            sql_type=sql_type_code(type_name),
        )

    def load_database(
        self,
        *,
        alias: str | None = None,
        catalogs: list[str] | None = None,
    ) -> Database:
        """
        Build a lazily populated Database over the workspace metastore.

        Args:
            alias: Label used in reports (defaults to the workspace host).
            catalogs: Restrict the tree to these catalogs (all visible ones
                when None).
        """
        host = getattr(self.client.config, "host", None)

        def load_catalogs() -> list[Catalog]:
            names = catalogs if catalogs else self.list_catalog_names()
            return [Catalog(name, self._schema_loader(name)) for name in names]

        return Database(
            driver="databricks-sdk",
            protocol="https",
            host=host,
            port=443,
            name="unity-catalog",
            alias=alias or host,
            catalogs=load_catalogs,
        )

    def _schema_loader(self, catalog: str):
        def load_schemas() -> list[Schema]:
            return [
                Schema(name, self._table_loader(catalog, name))
                for name in self.list_schema_names(catalog)
            ]

        return load_schemas

    def _table_loader(self, catalog: str, schema: str):
        return lambda: self.list_tables(catalog, schema)
