"""
API-shape entities.

Entities are read-mostly projections of one or more records. Shallow
entities carry only their own columns; the deep variants embed related
entities. Embedded collections hold live (non soft-deleted) rows unless a
projection explicitly asks for deleted ones.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditedEntity(BaseModel):
    """
    Fields shared by every entity: identifier plus audit and soft-delete
    metadata, copied verbatim from the record.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    created_by: Optional[str] = None
    modified_by: Optional[str] = None
    created_at: datetime
    modified_at: Optional[datetime] = None
    deleted: bool = False
    deleted_by: Optional[str] = None
    deleted_at: Optional[datetime] = None


class CategoryEntity(AuditedEntity):
    name: str
    description: Optional[str] = None
    display_order: int = 0


class SubcategoryEntity(AuditedEntity):
    category_id: int
    name: str
    description: Optional[str] = None


class ProductEntity(AuditedEntity):
    subcategory_id: int
    sku: str
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: int = 0


class CategoryWithSubcategories(CategoryEntity):
    subcategories: List[SubcategoryEntity] = Field(default_factory=list)


class SubcategoryWithProducts(SubcategoryEntity):
    products: List[ProductEntity] = Field(default_factory=list)


class SubcategoryWithCategory(SubcategoryEntity):
    category: Optional[CategoryEntity] = None


class CategoryTree(CategoryEntity):
    """Category with its subcategories, each with its products."""

    subcategories: List[SubcategoryWithProducts] = Field(default_factory=list)


class ProductWithSubcategory(ProductEntity):
    subcategory: Optional[SubcategoryEntity] = None
