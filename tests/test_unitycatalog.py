from enum import Enum
from types import SimpleNamespace

import pytest
from databricks.sdk.errors import PermissionDenied

from dbdiff.core.adapters.unitycatalog import UnityCatalogAdapter
from dbdiff.core.auth import normalize_host
from dbdiff.core.errors import MetadataUnavailable


class _TableType(Enum):
    MANAGED = "MANAGED"
    VIEW = "VIEW"


class _ColumnType(Enum):
    INT = "INT"
    DECIMAL = "DECIMAL"
    STRING = "STRING"


def _column(name, type_name, precision=None, scale=None):
    return SimpleNamespace(
        name=name,
        type_name=type_name,
        type_text=type_name.value.lower(),
        type_precision=precision,
        type_scale=scale,
    )


class _Client:
    def __init__(self):
        self.calls: list[str] = []
        self.config = SimpleNamespace(host="https://adb-123.azuredatabricks.net")
        self.catalogs = SimpleNamespace(list=self._list_catalogs)
        self.schemas = SimpleNamespace(list=self._list_schemas)
        self.tables = SimpleNamespace(list=self._list_tables)

    def _list_catalogs(self):
        self.calls.append("catalogs")
        return [SimpleNamespace(name="main"), SimpleNamespace(name="dev")]

    def _list_schemas(self, catalog_name):
        self.calls.append(f"schemas:{catalog_name}")
        return [
            SimpleNamespace(name="sales", full_name=f"{catalog_name}.sales"),
            SimpleNamespace(name=None, full_name=f"{catalog_name}.hr"),
        ]

    def _list_tables(self, catalog_name, schema_name):
        self.calls.append(f"tables:{catalog_name}.{schema_name}")
        if schema_name != "sales":
            return []
        return [
            SimpleNamespace(
                name="orders",
                table_type=_TableType.MANAGED,
                columns=[
                    _column("id", _ColumnType.INT),
                    _column("total", _ColumnType.DECIMAL, 10, 2),
                ],
            ),
            SimpleNamespace(name="v_orders", table_type=_TableType.VIEW, columns=None),
        ]


def test_tree_is_loaded_lazily_per_level():
    client = _Client()
    db = UnityCatalogAdapter(client).load_database(alias="uc")

    assert client.calls == []
    assert [c.name for c in db.catalogs] == ["main", "dev"]
    assert client.calls == ["catalogs"]

    schema = db.get_catalog("main").get_schema("SALES")
    assert client.calls == ["catalogs", "schemas:main"]
    assert [t.name for t in schema.tables] == ["orders", "v_orders"]
    assert client.calls[-1] == "tables:main.sales"


def test_columns_and_types_are_mapped():
    db = UnityCatalogAdapter(_Client()).load_database()
    schema = db.get_catalog("main").get_schema("sales")

    orders = schema.get_table("orders")
    assert orders.table_type == "MANAGED"
    total = orders.get_column("TOTAL")
    assert (total.type_name, total.size, total.scale, total.sql_type) == (
        "DECIMAL",
        10,
        2,
        3,
    )
    assert orders.get_column("id").size == 0
    assert schema.get_table("v_orders").table_type == "VIEW"
    assert schema.get_table("v_orders").columns == ()


def test_schema_names_fall_back_to_full_name():
    db = UnityCatalogAdapter(_Client()).load_database()

    assert [s.name for s in db.get_catalog("dev").schemas] == ["sales", "hr"]


def test_catalog_restriction_skips_listing():
    client = _Client()
    db = UnityCatalogAdapter(client).load_database(catalogs=["main"])

    assert [c.name for c in db.catalogs] == ["main"]
    assert "catalogs" not in client.calls


def test_database_metadata_and_default_alias():
    db = UnityCatalogAdapter(_Client()).load_database()

    assert db.alias == "https://adb-123.azuredatabricks.net"
    assert db.driver == "databricks-sdk"
    assert db.port == 443


def test_sdk_errors_become_metadata_unavailable():
    client = _Client()

    def denied(catalog_name):
        raise PermissionDenied("no access")

    client.schemas = SimpleNamespace(list=denied)
    db = UnityCatalogAdapter(client).load_database()

    with pytest.raises(MetadataUnavailable, match="schemas of catalog 'main'"):
        db.get_catalog("main").schemas


@pytest.mark.parametrize(
    ("host", "expected"),
    [
        (
            "https://adb-1.azuredatabricks.net/?o=123",
            "https://adb-1.azuredatabricks.net",
        ),
        ("https://adb-1.azuredatabricks.net/", "https://adb-1.azuredatabricks.net"),
        (None, None),
    ],
)
def test_normalize_host(host, expected):
    assert normalize_host(host) == expected
