"""Binary snapshots of a metadata tree.

A snapshot captures a whole Database so it can be compared later without a
connection. The layout is big-endian and nested::

    Database: driver, protocol, host, port, name, user, alias, n, Catalog * n
    Catalog:  name, n, Schema * n
    Schema:   name, n, Table * n
    Table:    name, type, n, Column * n
    Column:   name, type, size, scale, sql_type

Integers are 4-byte signed. Strings are a 1-byte "present" flag followed, when
present, by a 2-byte length and modified UTF-8 bytes (the encoding of Java's
DataOutput.writeUTF), so snapshots stay readable by JVM tooling.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO

from dbdiff.core.errors import SnapshotFormatError
from dbdiff.core.model import Catalog, Column, Database, Schema, Table

_INT = struct.Struct(">i")
_USHORT = struct.Struct(">H")
_MAX_UTF_LENGTH = 0xFFFF


def _encode_modified_utf8(value: str) -> bytes:
    units = value.encode("utf-16-be", "surrogatepass")
    out = bytearray()
    for i in range(0, len(units), 2):
        unit = (units[i] << 8) | units[i + 1]
        if 0x0001 <= unit <= 0x007F:
            out.append(unit)
        elif unit <= 0x07FF:
            out.append(0xC0 | (unit >> 6))
            out.append(0x80 | (unit & 0x3F))
        else:
            out.append(0xE0 | (unit >> 12))
            out.append(0x80 | ((unit >> 6) & 0x3F))
            out.append(0x80 | (unit & 0x3F))
    return bytes(out)


def _decode_modified_utf8(data: bytes) -> str:
    units = bytearray()
    i = 0
    try:
        while i < len(data):
            byte = data[i]
            if byte < 0x80:
                unit = byte
                i += 1
            elif byte >> 5 == 0b110:
                unit = ((byte & 0x1F) << 6) | (data[i + 1] & 0x3F)
                i += 2
            elif byte >> 4 == 0b1110:
                unit = (
                    ((byte & 0x0F) << 12)
                    | ((data[i + 1] & 0x3F) << 6)
                    | (data[i + 2] & 0x3F)
                )
                i += 3
            else:
                raise SnapshotFormatError(f"Malformed string byte 0x{byte:02x}.")
            units += _USHORT.pack(unit)
    except IndexError as exc:
        raise SnapshotFormatError("Truncated string in snapshot.") from exc
    return units.decode("utf-16-be", "surrogatepass")


class _Writer:
    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def write_int(self, value: int) -> None:
        self.stream.write(_INT.pack(value))

    def write_str(self, value: str | None) -> None:
        if value is None:
            self.stream.write(b"\x00")
            return
        data = _encode_modified_utf8(value)
        if len(data) > _MAX_UTF_LENGTH:
            raise SnapshotFormatError(
                f"String too long for snapshot: {value[:40]!r}..."
            )
        self.stream.write(b"\x01")
        self.stream.write(_USHORT.pack(len(data)))
        self.stream.write(data)


class _Reader:
    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def _read(self, size: int) -> bytes:
        data = self.stream.read(size)
        if len(data) != size:
            raise SnapshotFormatError("Unexpected end of snapshot.")
        return data

    def read_int(self) -> int:
        return _INT.unpack(self._read(_INT.size))[0]

    def count(self) -> int:
        value = self.read_int()
        if value < 0:
            raise SnapshotFormatError(f"Negative element count {value}.")
        return value

    def read_str(self) -> str | None:
        if self._read(1) == b"\x00":
            return None
        (length,) = _USHORT.unpack(self._read(_USHORT.size))
        return _decode_modified_utf8(self._read(length))


def write_snapshot(database: Database, stream: BinaryIO) -> None:
    """Write the whole tree of `database` to a binary stream (loads everything)."""
    w = _Writer(stream)
    w.write_str(database.driver)
    w.write_str(database.protocol)
    w.write_str(database.host)
    w.write_int(database.port)
    w.write_str(database.name)
    w.write_str(database.user)
    w.write_str(database.alias)
    catalogs = database.catalogs
    w.write_int(len(catalogs))
    for catalog in catalogs:
        w.write_str(catalog.name)
        schemas = catalog.schemas
        w.write_int(len(schemas))
        for schema in schemas:
            w.write_str(schema.name)
            tables = schema.tables
            w.write_int(len(tables))
            for table in tables:
                w.write_str(table.name)
                w.write_str(table.table_type)
                columns = table.columns
                w.write_int(len(columns))
                for column in columns:
                    w.write_str(column.name)
                    w.write_str(column.type_name)
                    w.write_int(column.size)
                    w.write_int(column.scale)
                    w.write_int(column.sql_type)


def _read_column(r: _Reader) -> Column:
    name = r.read_str()
    type_name = r.read_str()
    size = r.read_int()
    scale = r.read_int()
    sql_type = r.read_int()
    return Column(name, type_name, size, scale, sql_type)


def _read_table(r: _Reader) -> Table:
    name = r.read_str()
    table_type = r.read_str()
    columns = [_read_column(r) for _ in range(r.count())]
    return Table(name, table_type, columns)


def _read_schema(r: _Reader) -> Schema:
    name = r.read_str()
    return Schema(name, [_read_table(r) for _ in range(r.count())])


def _read_catalog(r: _Reader) -> Catalog:
    name = r.read_str()
    return Catalog(name, [_read_schema(r) for _ in range(r.count())])


def read_snapshot(stream: BinaryIO) -> Database:
    """Read a fully populated Database from a binary stream."""
    r = _Reader(stream)
    driver = r.read_str()
    protocol = r.read_str()
    host = r.read_str()
    port = r.read_int()
    name = r.read_str()
    user = r.read_str()
    alias = r.read_str()
    catalogs = [_read_catalog(r) for _ in range(r.count())]
    return Database(
        driver=driver,
        protocol=protocol,
        host=host,
        port=port,
        name=name,
        user=user,
        alias=alias,
        catalogs=catalogs,
    )


def save_snapshot(database: Database, path: Path) -> Path:
    """
    Write a snapshot file and return its path.

    The tree is written to a sibling temporary file first, so a load error
    half-way through leaves any existing snapshot untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp")
    try:
        with tmp.open("wb") as fh:
            write_snapshot(database, fh)
        tmp.replace(path)
    finally:
        tmp.unlink(missing_ok=True)
    return path


def load_snapshot(path: Path, *, alias: str | None = None) -> Database:
    """Read a snapshot file; `alias` overrides the stored alias."""
    with Path(path).open("rb") as fh:
        database = read_snapshot(fh)
    if alias:
        database.alias = alias
    return database
