"""
Business services.

Services are the catch boundary: every public method returns a
ServiceResponse and never raises.
"""

from catalog.services.base import BaseService
from catalog.services.categories import CategoryService
from catalog.services.products import ProductService
from catalog.services.subcategories import SubcategoryService

__all__ = [
    "BaseService",
    "CategoryService",
    "ProductService",
    "SubcategoryService",
]
