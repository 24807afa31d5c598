"""Numeric type codes attached to columns.

Codes follow the java.sql.Types numbering, which the snapshot format stores
next to each column so snapshots stay readable by JDBC-based tooling.
Unknown types map to OTHER.
"""

OTHER = 1111

_CODES = {
    "BIT": -7,
    "TINYINT": -6,
    "BYTE": -6,
    "SMALLINT": 5,
    "SHORT": 5,
    "INT": 4,
    "INTEGER": 4,
    "BIGINT": -5,
    "LONG": -5,
    "FLOAT": 6,
    "REAL": 7,
    "DOUBLE": 8,
    "DOUBLE PRECISION": 8,
    "NUMERIC": 2,
    "DECIMAL": 3,
    "CHAR": 1,
    "VARCHAR": 12,
    "STRING": 12,
    "TEXT": -1,
    "NCHAR": -15,
    "NVARCHAR": -9,
    "DATE": 91,
    "TIME": 92,
    "DATETIME": 93,
    "TIMESTAMP": 93,
    "TIMESTAMP_NTZ": 93,
    "BINARY": -2,
    "VARBINARY": -3,
    "BLOB": 2004,
    "CLOB": 2005,
    "BOOLEAN": 16,
    "ARRAY": 2003,
    "STRUCT": 2002,
}


def sql_type_code(type_name: str | None) -> int:
    """Return the type code for a driver type name (case-insensitive)."""
    if not type_name:
        return OTHER
    return _CODES.get(type_name.strip().upper(), OTHER)
