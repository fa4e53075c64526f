"""
Entity projection: records to API-shape entities.

A Projection is a pure callable. It copies the scalar and audit fields the
entity declares, and projects each embedded relation with a child
Projection, excluding soft-deleted related records unless the child
projection was built with ``with_deleted=True``. It performs no I/O: the
relation data must already sit in ``Record.related``, which the query
builder fills for every path in ``include_paths``.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from catalog.models.base import Record, Resource, get_resource


class Projection:
    """
    One projection variant for a resource.

    Args:
        resource: Resource whose records are projected
        entity: Pydantic entity type to build
        relations: Embedded relations, relation name to child Projection
        with_deleted: When embedded as a relation, keep soft-deleted records

    Example:
        shallow = Projection(SUBCATEGORY, SubcategoryEntity)
        deep = Projection(
            CATEGORY,
            CategoryWithSubcategories,
            relations={"subcategories": shallow},
        )
        entity = deep(record)
    """

    def __init__(
        self,
        resource: Resource,
        entity: Type[BaseModel],
        relations: Optional[Mapping[str, "Projection"]] = None,
        with_deleted: bool = False,
    ):
        self.resource = resource
        self.entity = entity
        self.relations: Dict[str, Projection] = dict(relations or {})
        self.with_deleted = with_deleted

        for name, child in self.relations.items():
            relation = resource.relation(name)
            if relation is None:
                raise ValueError(f"{resource.name} has no relation named {name!r}")
            if get_resource(relation.target) is not child.resource:
                raise ValueError(
                    f"Relation {resource.name}.{name} targets {relation.target}, "
                    f"not {child.resource.name}"
                )
            if name not in entity.model_fields:
                raise ValueError(f"{entity.__name__} has no field for relation {name!r}")

        self._scalar_fields: Tuple[str, ...] = tuple(
            name for name in entity.model_fields
            if name in resource.field_names and name not in self.relations
        )

    @property
    def include_paths(self) -> Tuple[Tuple[str, bool], ...]:
        """Relation paths (dotted) this projection needs, with their deleted-row setting."""
        paths: List[Tuple[str, bool]] = []
        for name, child in self.relations.items():
            paths.append((name, child.with_deleted))
            for sub_path, with_deleted in child.include_paths:
                paths.append((f"{name}.{sub_path}", with_deleted))
        return tuple(paths)

    def including_deleted(self) -> "Projection":
        """Copy of this projection that keeps soft-deleted records when embedded."""
        return Projection(self.resource, self.entity, self.relations, with_deleted=True)

    def __call__(self, record: Record) -> BaseModel:
        values: Dict[str, Any] = {
            name: record[name] for name in self._scalar_fields if name in record
        }
        for name, child in self.relations.items():
            related = record.related.get(name)
            if self.resource.relation(name).many:
                values[name] = child.project_many(related or ())
            else:
                values[name] = child.project_one(related)
        return self.entity.model_validate(values)

    def keeps(self, record: Record) -> bool:
        return self.with_deleted or not record.is_deleted

    def project_many(self, records: Iterable[Record]) -> List[BaseModel]:
        return [self(record) for record in records if self.keeps(record)]

    def project_one(self, record: Optional[Record]) -> Optional[BaseModel]:
        if record is None or not self.keeps(record):
            return None
        return self(record)

    def __repr__(self) -> str:
        return f"Projection({self.resource.name} -> {self.entity.__name__})"
