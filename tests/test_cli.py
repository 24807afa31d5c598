import pytest
from openpyxl import load_workbook
from sqlalchemy import create_engine, text
from typer.testing import CliRunner

from dbdiff.cli.cli import app
from dbdiff.core.model import Catalog, Column, Database, Schema, Table
from dbdiff.core.snapshot import load_snapshot, save_snapshot

runner = CliRunner()


def _flat(result):
    return " ".join(result.output.split())


def _snapshot(path, alias, tables, *, extra_schema=False):
    schemas = [Schema("SALES", tables)]
    if extra_schema:
        schemas.append(Schema("HR", []))
    db = Database(name=alias, alias=alias, catalogs=[Catalog("shop", schemas)])
    return save_snapshot(db, path)


@pytest.fixture()
def snapshots(tmp_path):
    dev = _snapshot(
        tmp_path / "dev.dbsnap",
        "dev",
        [
            Table(
                "ORDERS",
                "TABLE",
                [Column("ID", "INTEGER"), Column("TOTAL", "DECIMAL", 10, 2)],
            ),
            Table("CUSTOMERS", "TABLE", [Column("ID", "INTEGER")]),
        ],
    )
    prod = _snapshot(
        tmp_path / "prod.dbsnap",
        "prod",
        [
            Table(
                "ORDERS",
                "TABLE",
                [Column("ID", "INTEGER"), Column("TOTAL", "DECIMAL", 12, 2)],
            ),
            Table("PRODUCTS", "TABLE", [Column("SKU", "VARCHAR", 20)]),
        ],
        extra_schema=True,
    )
    return dev, prod


def test_compare_writes_report(snapshots, tmp_path):
    dev, prod = snapshots
    report = tmp_path / "report.xlsx"

    result = runner.invoke(
        app, ["compare", str(dev), f"{prod}#sales", "-o", str(report)]
    )

    assert result.exit_code == 0, result.output
    assert "Differences found" in _flat(result)
    wb = load_workbook(report)
    assert wb.sheetnames == ["SALES", "ORDERS"]


def test_compare_fail_on_diff_exits_with_one(snapshots, tmp_path):
    dev, prod = snapshots

    result = runner.invoke(
        app,
        [
            "compare",
            str(dev),
            str(prod),
            "--schema",
            "shop.sales",
            "-o",
            str(tmp_path / "r.xlsx"),
            "--fail-on-diff",
        ],
    )

    assert result.exit_code == 1


def test_compare_identical_sources(snapshots, tmp_path):
    dev, _ = snapshots

    result = runner.invoke(
        app,
        [
            "compare",
            f"a={dev}",
            f"b={dev}",
            "-o",
            str(tmp_path / "same.xlsx"),
            "--fail-on-diff",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "No differences found" in _flat(result)


def test_compare_ignores_filtered_tables(snapshots, tmp_path):
    dev, prod = snapshots
    report = tmp_path / "filtered.xlsx"

    result = runner.invoke(
        app,
        [
            "compare",
            str(dev),
            f"{prod}#SALES",
            "-o",
            str(report),
            "--ignore-table",
            "customers",
            "--ignore-table-regex",
            "^prod",
            "--ignore-column",
            "total",
            "--fail-on-diff",
        ],
    )

    assert result.exit_code == 0, result.output
    assert load_workbook(report).sheetnames == ["SALES"]


def test_compare_output_from_environment(snapshots, tmp_path, monkeypatch):
    dev, _ = snapshots
    report = tmp_path / "env.xlsx"
    monkeypatch.setenv("DBDIFF_OUTPUT", str(report))

    result = runner.invoke(app, ["compare", str(dev), str(dev)])

    assert result.exit_code == 0, result.output
    assert report.is_file()


def test_compare_requires_two_sources(snapshots):
    dev, _ = snapshots

    result = runner.invoke(app, ["compare", str(dev)])

    assert result.exit_code == 2


def test_compare_rejects_invalid_regex(snapshots):
    dev, prod = snapshots

    result = runner.invoke(
        app, ["compare", str(dev), str(prod), "--ignore-table-regex", "("]
    )

    assert result.exit_code == 2
    assert "Invalid regex" in _flat(result)


def test_compare_unknown_schema_is_input_error(snapshots):
    dev, prod = snapshots

    result = runner.invoke(app, ["compare", f"{dev}#nope", f"{prod}#sales"])

    assert result.exit_code == 2
    assert "not found" in _flat(result)


def test_compare_ambiguous_schema_without_terminal(snapshots):
    dev, prod = snapshots

    result = runner.invoke(app, ["compare", str(dev), str(prod)])

    assert result.exit_code == 2
    assert "Missing schema" in _flat(result)


def test_compare_missing_snapshot_file(tmp_path, snapshots):
    dev, _ = snapshots
    gone = tmp_path / "gone.dbsnap"

    result = runner.invoke(app, ["compare", str(dev), str(gone)])

    assert result.exit_code == 2
    assert "does not exist" in _flat(result)


def test_compare_corrupt_snapshot_is_runtime_error(tmp_path, snapshots):
    dev, _ = snapshots
    broken = tmp_path / "broken.dbsnap"
    broken.write_bytes(dev.read_bytes()[:20])

    result = runner.invoke(app, ["compare", str(dev), str(broken)])

    assert result.exit_code == 1


def test_pairwise_lists_one_sided_tables(snapshots):
    dev, prod = snapshots

    result = runner.invoke(app, ["pairwise", f"dev={dev}", f"prod={prod}#SALES"])

    assert result.exit_code == 0, result.output
    assert "CUSTOMERS" in _flat(result)
    assert "PRODUCTS" in _flat(result)
    assert "MISSING" in _flat(result)
    assert "Differences found" in _flat(result)


def test_pairwise_single_table(snapshots):
    dev, prod = snapshots

    result = runner.invoke(
        app,
        [
            "pairwise",
            str(dev),
            f"{prod}#SALES",
            "--table",
            "orders",
            "--fail-on-diff",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "TOTAL" in _flat(result)


def test_pairwise_unknown_table(snapshots):
    dev, prod = snapshots

    result = runner.invoke(
        app, ["pairwise", str(dev), f"{prod}#SALES", "--table", "customers"]
    )

    assert result.exit_code == 2
    assert "not found" in _flat(result)


def test_snapshot_captures_sqlite(tmp_path):
    url = f"sqlite:///{tmp_path / 'live.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE items (id INTEGER, label VARCHAR(30))"))
    engine.dispose()
    target = tmp_path / "live.dbsnap"

    result = runner.invoke(app, ["snapshot", f"live={url}", "-o", str(target)])

    assert result.exit_code == 0, result.output
    db = load_snapshot(target)
    assert db.alias == "live"
    items = db.catalogs[0].get_schema("main").get_table("ITEMS")
    assert items.get_column("label").size == 30

    again = runner.invoke(app, ["snapshot", url, "-o", str(target)])
    assert again.exit_code == 2
    assert "--yes" in _flat(again)

    forced = runner.invoke(app, ["snapshot", url, "-o", str(target), "--yes"])
    assert forced.exit_code == 0, forced.output


def test_schemas_lists_full_names(snapshots):
    _, prod = snapshots

    result = runner.invoke(app, ["schemas", str(prod)])

    assert result.exit_code == 0, result.output
    assert "shop.SALES" in _flat(result)
    assert "shop.HR" in _flat(result)


def test_tables_lists_tables_of_a_schema(snapshots):
    dev, _ = snapshots

    result = runner.invoke(app, ["tables", str(dev)])

    assert result.exit_code == 0, result.output
    assert "ORDERS" in _flat(result)
    assert "CUSTOMERS" in _flat(result)


def test_tables_of_empty_schema_warns(snapshots):
    _, prod = snapshots

    result = runner.invoke(app, ["tables", str(prod), "--schema", "hr"])

    assert result.exit_code == 0
    assert "No tables found" in _flat(result)
