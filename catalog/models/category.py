"""
Category resource.

Top level of the catalog. A category owns subcategories; the default
listing order is the curated ``display_order`` followed by name.
"""

from sqlalchemy import Integer, String, Text

from catalog.models.base import ColumnSpec, Relation, Resource


CATEGORY = Resource(
    name="category",
    table_name="categories",
    columns=(
        ColumnSpec("name", String(200), nullable=False, index=True),
        ColumnSpec("description", Text, nullable=True),
        ColumnSpec("display_order", Integer, nullable=False, default=0),
    ),
    relations=(
        Relation(
            name="subcategories",
            target="subcategory",
            local_key="id",
            remote_key="category_id",
            many=True,
            order_by=("name",),
        ),
    ),
    default_order=("display_order", "name"),
)
