"""Source specifications: where a metadata tree comes from.

A source is written as ``[alias=]location[#schema]`` where location is one of:

- a SQLAlchemy URL, e.g. ``postgresql+psycopg2://user:pw@host/db``;
- ``databricks://`` optionally followed by a profile name, for Unity Catalog;
- a path to a snapshot file written by :mod:`dbdiff.core.snapshot`.

The optional ``#schema`` suffix names the schema to compare, either as
``schema`` or ``catalog.schema``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from dbdiff.core.errors import SourceError
from dbdiff.core.model import Database, Schema

_ALIAS_RE = re.compile(r"^(?P<alias>[A-Za-z_][\w.-]*)=(?P<rest>.+)$")
_DATABRICKS_PREFIX = "databricks://"


class SourceKind(str, Enum):
    """Kinds of metadata sources."""

    SQLALCHEMY = "SQLALCHEMY"
    DATABRICKS = "DATABRICKS"
    SNAPSHOT = "SNAPSHOT"


@dataclass(frozen=True)
class SourceSpec:
    """
    Parsed source specification.

    Attributes:
        kind: Which adapter opens the source.
        location: URL, Databricks profile (may be empty) or snapshot path.
        alias: Optional label shown in reports.
        schema: Optional schema reference (`schema` or `catalog.schema`).
    """

    kind: SourceKind
    location: str
    alias: str | None = None
    schema: str | None = None

    @property
    def display(self) -> str:
        if self.alias:
            return self.alias
        if self.kind is SourceKind.SQLALCHEMY:
            return _hide_password(self.location)
        if self.kind is SourceKind.DATABRICKS:
            return f"{_DATABRICKS_PREFIX}{self.location}"
        return self.location


def _hide_password(url: str) -> str:
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url


def parse_source(text: str) -> SourceSpec:
    """Parse ``[alias=]location[#schema]``."""
    raw = (text or "").strip()
    if not raw:
        raise SourceError("Source must not be empty.")

    alias = None
    match = _ALIAS_RE.match(raw)
    if match:
        alias, raw = match.group("alias"), match.group("rest")

    schema = None
    if "#" in raw:
        raw, schema = raw.rsplit("#", 1)
        schema = schema.strip() or None
    raw = raw.strip()
    if not raw:
        raise SourceError(f"Source '{text}' has no location.")

    if raw == "databricks" or raw.startswith(_DATABRICKS_PREFIX):
        profile = raw[len(_DATABRICKS_PREFIX):] if raw != "databricks" else ""
        return SourceSpec(SourceKind.DATABRICKS, profile.strip("/"), alias, schema)
    if "://" in raw:
        return SourceSpec(SourceKind.SQLALCHEMY, raw, alias, schema)
    return SourceSpec(SourceKind.SNAPSHOT, raw, alias, schema)


def parse_schema_full_name(schema_full_name: str) -> tuple[str, str]:
    """Split `catalog.schema` into (catalog, schema)."""
    parts = schema_full_name.strip().split(".")
    if len(parts) != 2 or not all(parts):
        raise SourceError("Schema must be in the form `catalog.schema`.")
    catalog, schema = parts
    return catalog, schema


def open_database(spec: SourceSpec, *, default_profile: str | None = None) -> Database:
    """
    Open the Database described by `spec` (metadata loads lazily).

    `default_profile` is used for Databricks sources that name no profile.
    """
    if spec.kind is SourceKind.SNAPSHOT:
        from dbdiff.core.snapshot import load_snapshot

        path = Path(spec.location).expanduser()
        if not path.is_file():
            raise SourceError(f"Snapshot file '{path}' does not exist.")
        return load_snapshot(path, alias=spec.alias)

    if spec.kind is SourceKind.DATABRICKS:
        from dbdiff.core.adapters.unitycatalog import UnityCatalogAdapter
        from dbdiff.core.auth import get_client

        catalogs = None
        if spec.schema and "." in spec.schema:
            catalogs = [parse_schema_full_name(spec.schema)[0]]
        adapter = UnityCatalogAdapter(get_client(spec.location or default_profile))
        return adapter.load_database(alias=spec.alias, catalogs=catalogs)

    from dbdiff.core.adapters.relational import open_sqlalchemy_database

    return open_sqlalchemy_database(spec.location, alias=spec.alias)


def schema_full_names(database: Database) -> list[str]:
    """Return `catalog.schema` (or bare schema) names in tree order."""
    names: list[str] = []
    for catalog in database.catalogs:
        for schema in catalog.schemas:
            if catalog.name:
                names.append(f"{catalog.name}.{schema.name}")
            else:
                names.append(schema.name)
    return names


def resolve_schema(database: Database, ref: str) -> Schema:
    """
    Find a schema by `schema` or `catalog.schema` (case-insensitive).

    A bare schema name resolves to the first catalog that has it.

    Raises:
        SourceError: If no schema matches.
    """
    ref = ref.strip()
    if "." in ref:
        try:
            catalog_name, schema_name = parse_schema_full_name(ref)
        except SourceError:
            catalog_name = schema_name = None
        if catalog_name is not None:
            catalog = database.get_catalog(catalog_name)
            schema = catalog.get_schema(schema_name) if catalog is not None else None
            if schema is not None:
                return schema

    for catalog in database.catalogs:
        schema = catalog.get_schema(ref)
        if schema is not None:
            return schema

    label = database.alias or database.name or "database"
    raise SourceError(f"Schema '{ref}' not found in {label}.")
