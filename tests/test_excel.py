from openpyxl import load_workbook

from dbdiff.core.diff import SchemaDiff
from dbdiff.core.filters import DiffFilter
from dbdiff.core.model import Catalog, Column, Database, Schema, Table
from dbdiff.report.excel import (
    CORAL_FILL_COLOR,
    GREEN_FILL_COLOR,
    YELLOW_FILL_COLOR,
    MISSING,
    build_workbook,
    export_workbook,
    sheet_title,
)


def _database(alias, *tables):
    return Database(
        name=alias,
        alias=alias,
        catalogs=[Catalog("cat", [Schema("SALES", list(tables))])],
    )


def _fixtures():
    dev = _database(
        "dev",
        Table(
            "ORDERS",
            "TABLE",
            [Column("ID", "INTEGER"), Column("TOTAL", "DECIMAL", 10, 2)],
        ),
        Table("CUSTOMERS", "TABLE", [Column("ID", "INTEGER")]),
        Table("SAME", "TABLE", [Column("ID", "INTEGER")]),
    )
    prod = _database(
        "prod",
        Table(
            "ORDERS",
            "TABLE",
            [Column("ID", "INTEGER"), Column("TOTAL", "DECIMAL", 12, 2)],
        ),
        Table("PRODUCTS", "VIEW", [Column("SKU", "VARCHAR", 20)]),
        Table("SAME", "TABLE", [Column("ID", "INTEGER"), Column("EXTRA", "DATE")]),
    )
    return dev, prod


def _schemas(*databases):
    return [db.catalogs[0].schemas[0] for db in databases]


def _fill(cell):
    return cell.fill.start_color.rgb[-6:]


def test_schema_sheet_layout():
    dev, prod = _fixtures()
    wb = build_workbook(SchemaDiff(_schemas(dev, prod)))
    ws = wb["SALES"]

    assert ws["A1"].value == "Schema SALES"
    assert ws["A1"].font.bold
    assert ws["A2"].value == "dev"
    assert ws["C2"].value == "prod"
    assert [ws.cell(row=3, column=c).value for c in range(1, 5)] == [
        "Type",
        "Name",
        "Type",
        "Name",
    ]
    merged = {str(r) for r in ws.merged_cells.ranges}
    assert {"A1:D1", "A2:B2", "C2:D2"} <= merged
    assert ws.column_dimensions["A"].width == 25
    assert ws.column_dimensions["D"].width == 55

    # CUSTOMERS, ORDERS, PRODUCTS, SAME
    assert ws["B4"].value == "CUSTOMERS"
    assert _fill(ws["B4"]) == YELLOW_FILL_COLOR
    assert ws["C4"].value == MISSING
    assert _fill(ws["C4"]) == CORAL_FILL_COLOR
    assert "C4:D4" in merged

    assert (ws["A5"].value, ws["B5"].value) == ("TABLE", "ORDERS")
    assert _fill(ws["D5"]) == GREEN_FILL_COLOR

    assert ws["A6"].value == MISSING
    assert (ws["C6"].value, ws["D6"].value) == ("VIEW", "PRODUCTS")


def test_table_sheets_for_missing_and_mismatched_columns():
    dev, prod = _fixtures()
    wb = build_workbook(SchemaDiff(_schemas(dev, prod)))

    assert wb.sheetnames == ["SALES", "ORDERS", "SAME"]

    orders = wb["ORDERS"]
    assert orders["A1"].value == "Table ORDERS"
    assert (orders["A2"].value, orders["E2"].value) == ("dev", "prod")
    assert [orders.cell(row=3, column=c).value for c in range(1, 5)] == [
        "Column",
        "Type",
        "Size",
        "Scale",
    ]
    # ID matches everywhere, TOTAL differs in size
    assert orders["A4"].value == "ID"
    assert orders["C4"].value is None
    assert _fill(orders["A4"]) == GREEN_FILL_COLOR
    assert (orders["A5"].value, orders["C5"].value, orders["D5"].value) == (
        "TOTAL",
        10,
        2,
    )
    assert orders["G5"].value == 12
    assert _fill(orders["E5"]) == YELLOW_FILL_COLOR
    assert orders.column_dimensions["A"].width == 40
    assert orders.column_dimensions["B"].width == 20

    same = wb["SAME"]
    assert same["A4"].value == MISSING
    assert "A4:D4" in {str(r) for r in same.merged_cells.ranges}
    assert same["E4"].value == "EXTRA"


def test_identical_schemas_only_get_the_schema_sheet():
    dev, _ = _fixtures()
    other = _database(
        "copy",
        Table(
            "ORDERS",
            "TABLE",
            [Column("ID", "INTEGER"), Column("TOTAL", "DECIMAL", 10, 2)],
        ),
        Table("CUSTOMERS", "TABLE", [Column("ID", "INTEGER")]),
        Table("SAME", "TABLE", [Column("ID", "INTEGER")]),
    )

    wb = build_workbook(SchemaDiff(_schemas(dev, other)))

    assert wb.sheetnames == ["SALES"]


def test_filtered_columns_do_not_produce_sheets():
    dev, prod = _fixtures()
    diff = SchemaDiff(
        _schemas(dev, prod),
        DiffFilter.ignore_column_named("total")
        & DiffFilter.ignore_column_named("extra"),
    )

    assert build_workbook(diff).sheetnames == ["SALES"]


def test_export_writes_xlsx(tmp_path):
    dev, prod = _fixtures()
    target = tmp_path / "out" / "r.xlsx"
    path = export_workbook(SchemaDiff(_schemas(dev, prod)), target)

    wb = load_workbook(path)
    assert wb.sheetnames == ["SALES", "ORDERS", "SAME"]
    assert wb["ORDERS"]["A1"].value == "Table ORDERS"


def test_sheet_titles_are_sanitized_and_unique():
    used: set[str] = set()

    assert sheet_title("a/b:c", used) == "a_b_c"
    assert sheet_title("A/B:C", used) == "A_B_C (2)"
    long_title = sheet_title("x" * 40, used)
    assert len(long_title) == 31
    assert len(sheet_title("x" * 40, used)) == 31
    assert sheet_title("", used) == "Sheet"
