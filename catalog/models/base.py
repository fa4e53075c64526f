"""
Resource descriptors and the storage-shape Record.

Tables are not declared through ORM annotations. Each resource module
writes a small static table of ColumnSpec entries plus its Relation
descriptors; ``Resource`` turns that into a SQLAlchemy Core ``Table`` and
the same descriptors drive eager relation loading in the query builder.

Every table carries the audit and soft-delete columns from
``audit_columns()``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    false,
)
from sqlalchemy.types import TypeEngine


# Shared metadata for every catalog table
metadata = MetaData()

AUDIT_FIELDS: Tuple[str, ...] = (
    "created_by",
    "modified_by",
    "created_at",
    "modified_at",
    "deleted",
    "deleted_by",
    "deleted_at",
)


def utc_now() -> datetime:
    """Current UTC time; used to stamp audit columns."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ColumnSpec:
    """
    One column of a resource table.

    Attributes:
        name: Column name (also the Record/Entity field name)
        type_: SQLAlchemy column type
        nullable: Whether NULL is allowed
        default: Python-side default applied on insert
        foreign_key: "table.column" target, if any
        index: Whether to index the column
        unique: Whether the column is unique
    """

    name: str
    type_: TypeEngine | type
    nullable: bool = True
    default: Any = None
    foreign_key: Optional[str] = None
    index: bool = False
    unique: bool = False

    def to_column(self) -> Column:
        args: list = [self.name, self.type_]
        if self.foreign_key:
            args.append(ForeignKey(self.foreign_key))
        return Column(
            *args,
            nullable=self.nullable,
            default=self.default,
            index=self.index,
            unique=self.unique,
        )


def audit_columns() -> Tuple[ColumnSpec, ...]:
    """Audit and soft-delete columns carried by every table."""
    return (
        ColumnSpec("created_by", String(100), nullable=True),
        ColumnSpec("modified_by", String(100), nullable=True),
        ColumnSpec("created_at", DateTime(timezone=True), nullable=False, default=utc_now),
        ColumnSpec("modified_at", DateTime(timezone=True), nullable=True),
        ColumnSpec("deleted", Boolean, nullable=False, default=False, index=True),
        ColumnSpec("deleted_by", String(100), nullable=True),
        ColumnSpec("deleted_at", DateTime(timezone=True), nullable=True),
    )


@dataclass(frozen=True)
class Relation:
    """
    A declared foreign-key relation between two resources.

    ``local_key`` on the owning record is matched against ``remote_key`` on
    the target resource. For one-to-many relations (a category's
    subcategories) local_key is "id" and remote_key is the child's foreign
    key; for many-to-one relations (a product's subcategory) it is the other
    way round.
    """

    name: str
    target: str
    local_key: str
    remote_key: str
    many: bool = True
    order_by: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Resource:
    """
    Static description of one resource type.

    Attributes:
        name: Resource name, used in logs and messages
        table_name: Backing table name
        columns: Resource-specific columns (id and audit columns are added)
        relations: Declared relations keyed by name
        default_order: Column names for the default sort (ascending)
    """

    name: str
    table_name: str
    columns: Tuple[ColumnSpec, ...]
    relations: Tuple[Relation, ...] = ()
    default_order: Tuple[str, ...] = ()
    table: Table = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        columns = [Column("id", Integer, primary_key=True, autoincrement=True)]
        columns.extend(spec.to_column() for spec in (*self.columns, *audit_columns()))
        # frozen dataclass: bypass __setattr__ for the derived table
        object.__setattr__(self, "table", Table(self.table_name, metadata, *columns))
        _REGISTRY[self.name] = self

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.table.columns)

    @property
    def writable_fields(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.columns)

    @property
    def deleted_column(self):
        return self.table.c.deleted

    def relation(self, name: str) -> Optional[Relation]:
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None

    def column(self, name: str):
        return self.table.c[name]


_REGISTRY: Dict[str, Resource] = {}


def get_resource(name: str) -> Resource:
    """
    Look up a registered resource by name.

    Raises:
        KeyError: If no resource module registered that name
    """
    return _REGISTRY[name]


class Record(Mapping):
    """
    Storage-shape row.

    A read-only mapping of column name to value, plus ``related``: the
    records of each included relation, filled in by the query builder before
    projection. Many-relations hold a list, one-relations a Record or None.
    """

    __slots__ = ("_values", "related")

    def __init__(self, values: Mapping[str, Any], related: Optional[Dict[str, Any]] = None):
        self._values = dict(values)
        self.related: Dict[str, Any] = related if related is not None else {}

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def is_deleted(self) -> bool:
        return bool(self._values.get("deleted", False))

    def __repr__(self) -> str:
        return f"Record(id={self._values.get('id')!r}, related={sorted(self.related)!r})"


def not_deleted(resource: Resource):
    """Boolean clause selecting the live (non soft-deleted) rows of a resource."""
    return resource.deleted_column == false()
