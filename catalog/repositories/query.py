"""
Immutable query builder over one resource table.

Each chain step returns a new QueryBuilder carrying the accumulated plan
(predicates, sort, relation includes, window); nothing touches the store
until a terminal operation (count, to_records, first,
to_entity_projection) compiles and executes the plan.

Relation includes are loaded with one batched ``IN (...)`` round-trip per
relation level, never per parent row.
"""

from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from sqlalchemy import Select, func, select
from sqlalchemy.sql import ColumnElement

from catalog.core.context import StorageContext
from catalog.core.errors import ContextUnavailableError, InvalidArgumentError
from catalog.models.base import Record, Resource, get_resource, not_deleted

if TYPE_CHECKING:
    from catalog.repositories.projection import Projection


# Upper bound on the number of keys sent in one IN (...) clause
IN_BATCH_SIZE = 500


@dataclass(frozen=True)
class Include:
    """A relation path to load eagerly, e.g. ("subcategories", "products")."""

    path: Tuple[str, ...]
    with_deleted: bool = False


@dataclass
class _IncludeNode:
    with_deleted: bool = False
    children: Dict[str, "_IncludeNode"] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class QueryBuilder:
    """
    Composable, immutable query over one resource.

    Attributes:
        context: Storage context the query runs against
        resource: Resource descriptor for the queried table
        exclude_deleted: Whether the soft-delete filter is applied
        predicates: Additional boolean clauses, in the order added
        ordering: Explicit ORDER BY clauses
        includes: Relation paths to load eagerly
        offset: Rows to skip
        limit: Maximum rows to return

    Example:
        builder = (
            QueryBuilder.query_all(context, CATEGORY)
            .filter_out_deleted()
            .order_by("name")
            .include("subcategories")
            .skip(10)
            .take(10)
        )
        records = await builder.to_records()
    """

    context: Optional[StorageContext]
    resource: Resource
    exclude_deleted: bool = False
    predicates: Tuple[ColumnElement, ...] = ()
    ordering: Tuple[ColumnElement, ...] = ()
    includes: Tuple[Include, ...] = ()
    offset: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def query_all(cls, context: Optional[StorageContext], resource: Resource) -> "QueryBuilder":
        """Start a query over the full table of ``resource``."""
        builder = cls(context=context, resource=resource)
        builder._require_context()
        return builder

    def _require_context(self) -> StorageContext:
        if self.context is None:
            raise ContextUnavailableError(
                f"No storage context bound to {self.resource.name} query"
            )
        self.context.ensure_available()
        return self.context

    # Chain steps

    def filter_out_deleted(self) -> "QueryBuilder":
        """Exclude soft-deleted rows. Always compiled as the first predicate."""
        self._require_context()
        if self.exclude_deleted:
            return self
        return replace(self, exclude_deleted=True)

    def where(self, *criteria: Optional[ColumnElement]) -> "QueryBuilder":
        """Narrow the query; ``None`` criteria are ignored so optional filters chain cleanly."""
        self._require_context()
        added = tuple(criterion for criterion in criteria if criterion is not None)
        if not added:
            return self
        return replace(self, predicates=self.predicates + added)

    def order_by(self, *columns: Any) -> "QueryBuilder":
        """
        Append sort keys.

        Accepts column names ("name", or "-price" for descending) or
        SQLAlchemy order expressions.
        """
        self._require_context()
        resolved = tuple(self._resolve_order(column) for column in columns)
        return replace(self, ordering=self.ordering + resolved)

    def include(self, path: str | Iterable[str], with_deleted: bool = False) -> "QueryBuilder":
        """
        Eagerly load a declared relation path.

        Args:
            path: Dotted relation path ("subcategories.products") or a sequence of names
            with_deleted: Keep soft-deleted rows of the last relation in the path;
                earlier levels keep their own setting (live rows by default)

        Raises:
            InvalidArgumentError: If a name in the path is not a declared relation
        """
        self._require_context()
        names = tuple(path.split(".")) if isinstance(path, str) else tuple(path)
        self._validate_path(names)
        include = Include(path=names, with_deleted=with_deleted)
        if include in self.includes:
            return self
        return replace(self, includes=self.includes + (include,))

    def skip(self, count: int) -> "QueryBuilder":
        self._require_context()
        if count < 0:
            raise InvalidArgumentError(f"skip count must be >= 0, got {count}")
        return replace(self, offset=count)

    def take(self, count: int) -> "QueryBuilder":
        self._require_context()
        if count < 0:
            raise InvalidArgumentError(f"take count must be >= 0, got {count}")
        return replace(self, limit=count)

    # Compilation

    def _resolve_order(self, column: Any) -> ColumnElement:
        if isinstance(column, str):
            descending = column.startswith("-")
            name = column.lstrip("-")
            if name not in self.resource.table.c:
                raise InvalidArgumentError(
                    f"{self.resource.name} has no column {name!r} to sort by"
                )
            col = self.resource.column(name)
            return col.desc() if descending else col.asc()
        return column

    def _validate_path(self, names: Tuple[str, ...]) -> None:
        if not names or any(not name for name in names):
            raise InvalidArgumentError("Relation path cannot be empty")
        resource = self.resource
        for name in names:
            relation = resource.relation(name)
            if relation is None:
                raise InvalidArgumentError(
                    f"{resource.name} has no relation named {name!r}"
                )
            resource = get_resource(relation.target)

    def _criteria(self) -> List[ColumnElement]:
        criteria: List[ColumnElement] = []
        if self.exclude_deleted:
            criteria.append(not_deleted(self.resource))
        criteria.extend(self.predicates)
        return criteria

    def _order_clauses(self) -> List[ColumnElement]:
        primary_key = self.resource.table.c.id
        clauses = list(self.ordering)
        # primary key keeps the order total so windows never overlap
        clauses.append(primary_key.asc())
        return clauses

    def compile_select(self, windowed: bool = True, ordered: bool = True) -> Select:
        """Build the SELECT for the accumulated plan without executing it."""
        statement = select(self.resource.table)
        criteria = self._criteria()
        if criteria:
            statement = statement.where(*criteria)
        if ordered:
            statement = statement.order_by(*self._order_clauses())
        if windowed:
            if self.offset:
                statement = statement.offset(self.offset)
            if self.limit is not None:
                statement = statement.limit(self.limit)
        return statement

    # Terminal operations

    async def count(self) -> int:
        """Count the rows the plan selects (window included)."""
        context = self._require_context()
        inner = self.compile_select(ordered=False).subquery()
        statement = select(func.count()).select_from(inner)
        total = await context.fetch_scalar(statement, operation=f"count {self.resource.name}")
        return int(total or 0)

    async def to_records(self) -> List[Record]:
        """Execute the plan and materialize records with their included relations."""
        context = self._require_context()
        rows = await context.fetch_all(
            self.compile_select(), operation=f"select {self.resource.name}"
        )
        records = [Record(row) for row in rows]
        if records and self.includes:
            await self._load_includes(context, records, self.resource, self._include_tree())
        return records

    async def first(self) -> Optional[Record]:
        records = await self.take(1).to_records()
        return records[0] if records else None

    async def to_entity_projection(self, projection: "Projection") -> List[Any]:
        """
        Materialize and project every record.

        Relation paths the projection embeds are added to the includes so
        projection always runs on fully materialized data.
        """
        builder = self
        for path, with_deleted in projection.include_paths:
            builder = builder.include(path, with_deleted=with_deleted)
        records = await builder.to_records()
        return [projection(record) for record in records]

    # Relation loading

    def _include_tree(self) -> Dict[str, _IncludeNode]:
        tree: Dict[str, _IncludeNode] = {}
        for include in self.includes:
            level = tree
            last = len(include.path) - 1
            for position, name in enumerate(include.path):
                node = level.setdefault(name, _IncludeNode())
                if position == last:
                    node.with_deleted = node.with_deleted or include.with_deleted
                level = node.children
        return tree

    async def _load_includes(
        self,
        context: StorageContext,
        records: List[Record],
        resource: Resource,
        tree: Dict[str, _IncludeNode],
    ) -> None:
        for name, node in tree.items():
            relation = resource.relation(name)
            target = get_resource(relation.target)

            keys = sorted({
                record[relation.local_key]
                for record in records
                if record[relation.local_key] is not None
            })
            children: List[Record] = []
            for start in range(0, len(keys), IN_BATCH_SIZE):
                batch = keys[start:start + IN_BATCH_SIZE]
                statement = select(target.table)
                if not node.with_deleted:
                    statement = statement.where(not_deleted(target))
                statement = statement.where(target.column(relation.remote_key).in_(batch))
                sort = relation.order_by or target.default_order
                statement = statement.order_by(
                    *(target.column(column).asc() for column in sort),
                    target.table.c.id.asc(),
                )
                rows = await context.fetch_all(
                    statement, operation=f"include {resource.name}.{name}"
                )
                children.extend(Record(row) for row in rows)

            grouped: Dict[Any, List[Record]] = defaultdict(list)
            for child in children:
                grouped[child[relation.remote_key]].append(child)

            for record in records:
                matches = grouped.get(record[relation.local_key], [])
                if relation.many:
                    record.related[name] = list(matches)
                else:
                    record.related[name] = matches[0] if matches else None

            if node.children and children:
                await self._load_includes(context, children, target, node.children)
