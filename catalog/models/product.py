"""
Product resource.

Products hang off a subcategory. ``sku`` is unique across the catalog,
soft-deleted rows included, so a deleted SKU cannot be reused.
"""

from sqlalchemy import Integer, Numeric, String, Text

from catalog.models.base import ColumnSpec, Relation, Resource


PRODUCT = Resource(
    name="product",
    table_name="products",
    columns=(
        ColumnSpec("subcategory_id", Integer, nullable=False, foreign_key="subcategories.id", index=True),
        ColumnSpec("sku", String(64), nullable=False, unique=True),
        ColumnSpec("name", String(200), nullable=False, index=True),
        ColumnSpec("description", Text, nullable=True),
        ColumnSpec("price", Numeric(12, 2), nullable=False),
        ColumnSpec("stock", Integer, nullable=False, default=0),
    ),
    relations=(
        Relation(
            name="subcategory",
            target="subcategory",
            local_key="subcategory_id",
            remote_key="id",
            many=False,
        ),
    ),
    default_order=("name",),
)
