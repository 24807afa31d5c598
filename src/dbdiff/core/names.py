"""Identity and equality rules shared by every comparison.

Database engines report identifiers with different casing, so identity is
always case-insensitive. Display names keep whatever casing the metadata
reported.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dbdiff.core.model import Column


def name_key(name: str) -> str:
    """Return the normalized lookup key for an identifier."""
    return name.lower()


def same_name(a: str | None, b: str | None) -> bool:
    """Return True if both names are None or equal ignoring case."""
    if a is None or b is None:
        return a is b
    return name_key(a) == name_key(b)


def columns_equal(c1: Column | None, c2: Column | None) -> bool:
    """
    Compare two columns by type name, size and scale.

    Column names are not compared: callers match names with
    :func:`same_name` before asking whether the columns are equal. Type
    names are compared case-sensitively since drivers normalize them.
    """
    if c1 is c2:
        return True
    if c1 is None or c2 is None:
        return False
    return (
        c1.type_name == c2.type_name
        and c1.size == c2.size
        and c1.scale == c2.scale
    )
