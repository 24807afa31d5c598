import pytest

from dbdiff.core.model import Column
from dbdiff.core.names import columns_equal, name_key, same_name


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ("orders", "ORDERS", True),
        ("Orders", "orders", True),
        ("orders", "order", False),
        (None, None, True),
        (None, "orders", False),
        ("orders", None, False),
    ],
)
def test_same_name(a, b, expected):
    assert same_name(a, b) is expected


def test_name_key_is_case_insensitive():
    assert name_key("Customer_ID") == name_key("CUSTOMER_id")


def test_case_folding_does_not_merge_distinct_letters():
    assert not same_name("STRASSE", "Straße")
    assert name_key("Straße") == "straße"


def test_columns_equal_ignores_names_but_not_type_size_scale():
    base = Column("amount", "DECIMAL", 10, 2)

    assert columns_equal(base, Column("AMOUNT", "DECIMAL", 10, 2))
    assert not columns_equal(base, Column("amount", "NUMERIC", 10, 2))
    assert not columns_equal(base, Column("amount", "DECIMAL", 12, 2))
    assert not columns_equal(base, Column("amount", "DECIMAL", 10, 4))


def test_columns_equal_handles_identity_and_none():
    col = Column("id", "INTEGER")

    assert columns_equal(col, col)
    assert columns_equal(None, None)
    assert not columns_equal(col, None)
    assert not columns_equal(None, col)


def test_columns_equal_type_name_is_case_sensitive():
    assert not columns_equal(Column("id", "integer"), Column("id", "INTEGER"))
