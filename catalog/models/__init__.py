"""
Resource descriptors for the catalog tables.

This module exports every resource and the shared metadata.
Import resources from this module to ensure they're registered before
relations are resolved or tables are created.
"""

from catalog.models.base import (
    AUDIT_FIELDS,
    ColumnSpec,
    Record,
    Relation,
    Resource,
    get_resource,
    metadata,
    not_deleted,
    utc_now,
)
from catalog.models.category import CATEGORY
from catalog.models.subcategory import SUBCATEGORY
from catalog.models.product import PRODUCT

__all__ = [
    # Descriptors
    "AUDIT_FIELDS",
    "ColumnSpec",
    "Record",
    "Relation",
    "Resource",
    "get_resource",
    "metadata",
    "not_deleted",
    "utc_now",
    # Resources
    "CATEGORY",
    "SUBCATEGORY",
    "PRODUCT",
]
