"""Read-only metadata tree: Database > Catalog > Schema > Table > Column.

Nodes are created by metadata adapters (live connections or snapshots) and
are never mutated by the diff engine. Child collections can be supplied
eagerly or through a zero-argument loader that runs on first access; either
way a collection is populated exactly once.

Ownership flows downward. Children only keep a weak reference to their
parent, so holding a Table does not keep its Schema alive.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Generic, Iterable, TypeVar, Union

from dbdiff.core.errors import MetadataUnavailable
from dbdiff.core.names import name_key

if TYPE_CHECKING:
    from dbdiff.core.diff import SchemaDiff, TableDiff
    from dbdiff.core.filters import DiffFilter

T = TypeVar("T")

Loader = Callable[[], Iterable[T]]
ChildrenSource = Union[Iterable[T], Loader]


class LoadState(str, Enum):
    """Population state of a child collection."""

    PENDING = "PENDING"
    LOADED = "LOADED"


class LazyChildren(Generic[T]):
    """
    Ordered, name-unique collection populated at most once.

    Args:
        source: Either the children themselves or a loader returning them.
        owner: Node adopting the children as their parent (optional).
        kind: Label used in error messages ("table", "column", ...).
    """

    def __init__(self, source: ChildrenSource, *, owner=None, kind: str = "object"):
        self._loader: Loader | None
        if callable(source):
            self._loader = source
            self._pending: Iterable[T] | None = None
        else:
            self._loader = None
            self._pending = list(source)
        self._owner = owner
        self._kind = kind
        self._state = LoadState.PENDING
        self._items: tuple[T, ...] = ()
        self._by_key: dict[str, T] = {}
        if self._pending is not None:
            self.load()

    @property
    def state(self) -> LoadState:
        return self._state

    def load(self) -> tuple[T, ...]:
        """Populate the collection on first call and return it."""
        if self._state is LoadState.LOADED:
            return self._items

        raw = self._loader() if self._loader is not None else self._pending
        items: list[T] = []
        by_key: dict[str, T] = {}
        for item in raw or ():
            key = name_key(item.name or "")
            if key in by_key:
                raise MetadataUnavailable(
                    f"Duplicate {self._kind} name {item.name!r} "
                    f"(already seen as {by_key[key].name!r})."
                )
            if self._owner is not None:
                item._set_parent(self._owner)
            by_key[key] = item
            items.append(item)

        self._items = tuple(items)
        self._by_key = by_key
        self._state = LoadState.LOADED
        self._loader = None
        self._pending = None
        return self._items

    def get(self, name: str | None) -> T | None:
        """Return the child named `name` (case-insensitive), or None."""
        self.load()
        return self._by_key.get(name_key(name or ""))


class _Node:
    """Common parent back-reference handling."""

    _parent: weakref.ReferenceType | None = None

    def _set_parent(self, parent) -> None:
        self._parent = weakref.ref(parent)

    def _get_parent(self):
        return self._parent() if self._parent is not None else None


@dataclass(frozen=True)
class Column:
    """
    A table column.

    Attributes:
        name: Column name as reported by the source.
        type_name: Driver-normalized type name (e.g. VARCHAR, DECIMAL).
        size: Declared length or precision (0 when not applicable).
        scale: Decimal digits (0 when not applicable).
        sql_type: Vendor/JDBC numeric type code.
    """

    name: str
    type_name: str
    size: int = 0
    scale: int = 0
    sql_type: int = 0


class Table(_Node):
    """A table or view owning its columns."""

    def __init__(
        self,
        name: str,
        table_type: str = "TABLE",
        columns: ChildrenSource = (),
    ) -> None:
        self.name = name
        self.table_type = table_type
        self._columns: LazyChildren[Column] = LazyChildren(columns, kind="column")

    @property
    def schema(self) -> Schema | None:
        return self._get_parent()

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._columns.load()

    def get_column(self, name: str | None) -> Column | None:
        return self._columns.get(name)

    def contains(self, column_name: str | None) -> bool:
        return self.get_column(column_name) is not None

    def compare_with(
        self, *others: Table, diff_filter: DiffFilter | None = None
    ) -> TableDiff:
        """Compare this table with one or more tables."""
        from dbdiff.core.diff import TableDiff

        return TableDiff([self, *others], diff_filter)

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {self.table_type!r})"


class Schema(_Node):
    """A named group of tables."""

    def __init__(self, name: str, tables: ChildrenSource = ()) -> None:
        self.name = name
        self._tables: LazyChildren[Table] = LazyChildren(
            tables, owner=self, kind="table"
        )

    @property
    def catalog(self) -> Catalog | None:
        return self._get_parent()

    @property
    def database(self) -> Database | None:
        catalog = self.catalog
        return catalog.database if catalog is not None else None

    @property
    def label(self) -> str:
        """Display label for report headers: database alias, else schema name."""
        database = self.database
        if database is not None and database.alias:
            return database.alias
        return self.name

    @property
    def tables(self) -> tuple[Table, ...]:
        return self._tables.load()

    def get_table(self, name: str | None) -> Table | None:
        return self._tables.get(name)

    def contains(self, table_name: str | None) -> bool:
        return self.get_table(table_name) is not None

    def compare_with(
        self, *others: Schema, diff_filter: DiffFilter | None = None
    ) -> SchemaDiff:
        """Compare this schema with one or more schemas."""
        from dbdiff.core.diff import SchemaDiff

        return SchemaDiff([self, *others], diff_filter)

    def __repr__(self) -> str:
        return f"Schema({self.name!r})"


class Catalog(_Node):
    """Top-level grouping of schemas inside a database."""

    def __init__(self, name: str | None, schemas: ChildrenSource = ()) -> None:
        self.name = name
        self._schemas: LazyChildren[Schema] = LazyChildren(
            schemas, owner=self, kind="schema"
        )

    @property
    def database(self) -> Database | None:
        return self._get_parent()

    @property
    def schemas(self) -> tuple[Schema, ...]:
        return self._schemas.load()

    def get_schema(self, name: str | None) -> Schema | None:
        return self._schemas.get(name)

    def __repr__(self) -> str:
        return f"Catalog({self.name or '<unnamed>'!r})"


class Database:
    """
    Root of a metadata tree plus the description of where it came from.

    `closer` releases whatever resource backs lazy loading (engine, client).
    """

    def __init__(
        self,
        *,
        driver: str | None = None,
        protocol: str | None = None,
        host: str | None = None,
        port: int = 0,
        name: str | None = None,
        user: str | None = None,
        alias: str | None = None,
        catalogs: ChildrenSource = (),
        closer: Callable[[], None] | None = None,
    ) -> None:
        self.driver = driver
        self.protocol = protocol
        self.host = host
        self.port = port
        self.name = name
        self.user = user
        self.alias = alias or name
        self._catalogs: LazyChildren[Catalog] = LazyChildren(
            catalogs, owner=self, kind="catalog"
        )
        self._closer = closer

    @property
    def url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}/{self.name}"

    @property
    def catalogs(self) -> tuple[Catalog, ...]:
        return self._catalogs.load()

    def get_catalog(self, name: str | None) -> Catalog | None:
        return self._catalogs.get(name)

    def close(self) -> None:
        """Release the underlying connection resource (idempotent)."""
        closer, self._closer = self._closer, None
        if closer is not None:
            closer()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database(user={self.user!r}, url={self.url!r}, driver={self.driver!r})"
