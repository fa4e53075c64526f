"""
Request schemas for write operations.

Routers validate incoming JSON with these models; services pass the
dumped values to repositories, which stamp the audit columns.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be blank")
    return v


def reject_null(v: Any) -> Any:
    # Unset fields never reach validators, so None here is an explicit null
    if v is None:
        raise ValueError("field cannot be null")
    return v


class CategoryCreateRequest(BaseModel):
    """
    Request schema for creating a category.

    Attributes:
        name: Category name (1-200 chars)
        description: Optional free text
        display_order: Position in curated listings (lower first)
    """

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    display_order: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Outdoor",
                "description": "Camping, hiking and garden gear",
                "display_order": 1,
            }
        }
    }


class CategoryUpdateRequest(BaseModel):
    """
    Partial update; only fields that are set are written.

    ``name`` and ``display_order`` may be omitted but not set to null.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    display_order: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", "display_order", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)


class SubcategoryCreateRequest(BaseModel):
    category_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)


class ProductCreateRequest(BaseModel):
    """
    Request schema for creating a product.

    Attributes:
        subcategory_id: Owning subcategory
        sku: Stock keeping unit, unique across the catalog
        name: Product name
        description: Optional free text
        price: Unit price, two decimal places, non-negative
        stock: Units on hand
    """

    subcategory_id: int = Field(..., ge=1)
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v: str) -> str:
        """SKUs are stored upper-case without surrounding whitespace."""
        v = v.strip().upper()
        if " " in v:
            raise ValueError("sku cannot contain spaces")
        return v


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", "price", "stock", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        return reject_null(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return clean_name(v)
