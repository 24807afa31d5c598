from dbdiff.core.model import Column, Schema, Table
from dbdiff.core.pairwise import compare_schemas_pairwise, compare_tables_pairwise


def _names(items):
    return [item.name for item in items]


def test_compare_tables_pairwise_partitions_columns():
    left = Table("T1", "TABLE", [Column(n, "INT") for n in ("a", "b", "c")])
    right = Table("T2", "TABLE", [Column(n, "INT") for n in ("b", "c", "d")])

    result = compare_tables_pairwise(left, right)

    assert _names(result.all_columns) == ["a", "b", "c", "d"]
    assert _names(result.missing_on_right) == ["a"]
    assert _names(result.missing_on_left) == ["d"]


def test_matched_entries_use_left_instances():
    left = Table("t", "TABLE", [Column("ID", "INT")])
    right = Table("t", "TABLE", [Column("id", "BIGINT")])

    result = compare_tables_pairwise(left, right)

    assert result.all_columns == (left.get_column("id"),)
    assert result.all_columns[0].type_name == "INT"
    assert result.missing_on_left == ()
    assert result.missing_on_right == ()


def test_compare_schemas_pairwise_partitions_tables():
    left = Schema("L", [Table("orders"), Table("customers", "VIEW")])
    right = Schema("R", [Table("ORDERS"), Table("products")])

    result = compare_schemas_pairwise(left, right)

    assert _names(result.all_tables) == ["customers", "orders", "products"]
    assert result.all_tables[1] is left.get_table("orders")
    assert _names(result.missing_on_right) == ["customers"]
    assert _names(result.missing_on_left) == ["products"]


def test_identical_schemas_have_empty_partitions():
    left = Schema("L", [Table("a"), Table("b")])
    right = Schema("R", [Table("B"), Table("A")])

    result = compare_schemas_pairwise(left, right)

    assert _names(result.all_tables) == ["a", "b"]
    assert result.missing_on_left == ()
    assert result.missing_on_right == ()
