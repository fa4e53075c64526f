"""
Generic repository over one resource.

A repository is the only component services call for data access. Every
read goes through ``query()``, which starts from the full table, filters
out soft-deleted rows first and applies the resource's default sort.
Writes stamp the audit columns and never physically delete rows.
"""

from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import insert, true, update
from sqlalchemy.sql import ColumnElement

from catalog.core.context import StorageContext
from catalog.core.errors import InvalidArgumentError
from catalog.core.logging_config import get_logger, log_with_context
from catalog.models.base import Record, Resource, not_deleted, utc_now
from catalog.repositories.projection import Projection
from catalog.repositories.query import QueryBuilder
from catalog.schemas.paging import PagedResult


logger = get_logger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)


def validate_page(page_number: int, page_size: int) -> None:
    """
    Reject a page request before any store access.

    Raises:
        InvalidArgumentError: If page_number < 1 or page_size < 1
    """
    if page_number < 1:
        raise InvalidArgumentError(f"page_number must be >= 1, got {page_number}")
    if page_size < 1:
        raise InvalidArgumentError(f"page_size must be >= 1, got {page_size}")


class BaseRepository(Generic[EntityT]):
    """
    Repository for one resource.

    Subclasses set ``resource`` and ``default_projection`` and add their
    resource-specific filtered queries on top of ``query()`` and
    ``get_page()``.

    Attributes:
        context: Storage context of the unit of work (not owned)
    """

    resource: Resource
    default_projection: Projection

    def __init__(self, context: StorageContext):
        self.context = context

    def query(self) -> QueryBuilder:
        """Fresh builder: full table, soft-deleted rows removed, default sort."""
        return (
            QueryBuilder.query_all(self.context, self.resource)
            .filter_out_deleted()
            .order_by(*self.resource.default_order)
        )

    async def get_page(
        self,
        page_number: int,
        page_size: int,
        *criteria: Optional[ColumnElement],
        projection: Optional[Projection] = None,
        builder: Optional[QueryBuilder] = None,
    ) -> PagedResult[EntityT]:
        """
        Return one page of live entities.

        Args:
            page_number: 1-based page number
            page_size: Maximum entities on the page
            *criteria: Extra filters applied after the soft-delete filter
            projection: Projection variant (defaults to the shallow one)
            builder: Pre-composed builder to paginate instead of ``query()``

        Returns:
            PagedResult whose total_row_count covers the whole filtered set;
            a page past the end has empty results, not an error

        Raises:
            InvalidArgumentError: If page_number or page_size is below 1
            StorageFailureError: If a round-trip fails

        Note:
            Count and window are two separate round-trips and are not
            wrapped in one transaction; a concurrent write between them
            can make the two slightly inconsistent.
        """
        validate_page(page_number, page_size)
        projection = projection or self.default_projection

        filtered = (builder or self.query()).where(*criteria)
        total = await filtered.count()

        offset = (page_number - 1) * page_size
        if offset >= total:
            results: List[EntityT] = []
        else:
            window = filtered.skip(offset).take(page_size)
            results = await window.to_entity_projection(projection)

        log_with_context(
            logger,
            "debug",
            "Page served",
            unit_of_work=self.context.id,
            resource=self.resource.name,
            operation="get_page",
            page=page_number,
            page_size=page_size,
            total_row_count=total,
        )
        return PagedResult(
            current_page=page_number,
            page_size=page_size,
            total_row_count=total,
            results=results,
        )

    async def get_by_id(
        self,
        entity_id: int,
        projection: Optional[Projection] = None,
    ) -> Optional[EntityT]:
        """Return the live entity with ``entity_id``, or None."""
        projection = projection or self.default_projection
        builder = self.query().where(self.resource.table.c.id == entity_id).take(1)
        entities = await builder.to_entity_projection(projection)
        return entities[0] if entities else None

    async def list_all(self, projection: Optional[Projection] = None) -> List[EntityT]:
        return await self.query().to_entity_projection(projection or self.default_projection)

    async def exists(self, entity_id: int) -> bool:
        count = await self.query().where(self.resource.table.c.id == entity_id).count()
        return count > 0

    async def count(self, *criteria: Optional[ColumnElement]) -> int:
        return await self.query().where(*criteria).count()

    # Writes

    def _writable(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        allowed = set(self.resource.writable_fields)
        unknown = set(values) - allowed
        if unknown:
            raise InvalidArgumentError(
                f"Unknown {self.resource.name} fields: {', '.join(sorted(unknown))}"
            )
        nulls = [
            spec.name for spec in self.resource.columns
            if not spec.nullable and spec.name in values and values[spec.name] is None
        ]
        if nulls:
            raise InvalidArgumentError(
                f"{self.resource.name} fields cannot be null: {', '.join(nulls)}"
            )
        return dict(values)

    async def add(self, values: Mapping[str, Any], actor: Optional[str] = None) -> EntityT:
        """
        Insert a new record and return its shallow entity.

        Raises:
            InvalidArgumentError: If values contain non-writable fields or
                null for a required column
            StorageFailureError: On constraint violations or store faults
        """
        row = self._writable(values)
        row.update(created_by=actor, created_at=utc_now(), deleted=False)
        table = self.resource.table
        statement = insert(table).values(**row).returning(*table.c)
        result = await self.context.execute(statement, operation=f"insert {self.resource.name}")
        record = Record(result.mappings().one())
        return self.default_projection(record)

    async def update(
        self,
        entity_id: int,
        values: Mapping[str, Any],
        actor: Optional[str] = None,
    ) -> Optional[EntityT]:
        """Update a live record; returns None when no live record has ``entity_id``."""
        row = self._writable(values)
        if not row:
            return await self.get_by_id(entity_id)
        row.update(modified_by=actor, modified_at=utc_now())
        return await self._update_where(entity_id, row)

    async def soft_delete(self, entity_id: int, actor: Optional[str] = None) -> bool:
        """Mark a live record deleted. Returns False when there was nothing to delete."""
        row = {"deleted": True, "deleted_by": actor, "deleted_at": utc_now()}
        return await self._update_where(entity_id, row) is not None

    async def restore(self, entity_id: int, actor: Optional[str] = None) -> Optional[EntityT]:
        """Clear the soft-delete flag of a deleted record."""
        table = self.resource.table
        row = {
            "deleted": False,
            "deleted_by": None,
            "deleted_at": None,
            "modified_by": actor,
            "modified_at": utc_now(),
        }
        statement = (
            update(table)
            .where(table.c.deleted == true(), table.c.id == entity_id)
            .values(**row)
            .returning(*table.c)
        )
        mapping = await self.context.fetch_one(statement, operation=f"restore {self.resource.name}")
        return self.default_projection(Record(mapping)) if mapping is not None else None

    async def _update_where(self, entity_id: int, row: Dict[str, Any]) -> Optional[EntityT]:
        # only live rows are updated; restore() handles deleted ones
        table = self.resource.table
        statement = (
            update(table)
            .where(not_deleted(self.resource), table.c.id == entity_id)
            .values(**row)
            .returning(*table.c)
        )
        mapping = await self.context.fetch_one(statement, operation=f"update {self.resource.name}")
        return self.default_projection(Record(mapping)) if mapping is not None else None
