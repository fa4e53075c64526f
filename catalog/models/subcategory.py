"""Subcategory resource: belongs to one category, owns products."""

from sqlalchemy import Integer, String, Text

from catalog.models.base import ColumnSpec, Relation, Resource


SUBCATEGORY = Resource(
    name="subcategory",
    table_name="subcategories",
    columns=(
        ColumnSpec("category_id", Integer, nullable=False, foreign_key="categories.id", index=True),
        ColumnSpec("name", String(200), nullable=False, index=True),
        ColumnSpec("description", Text, nullable=True),
    ),
    relations=(
        Relation(
            name="category",
            target="category",
            local_key="category_id",
            remote_key="id",
            many=False,
        ),
        Relation(
            name="products",
            target="product",
            local_key="id",
            remote_key="subcategory_id",
            many=True,
            order_by=("name",),
        ),
    ),
    default_order=("name",),
)
