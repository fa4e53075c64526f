"""
Projection variants for each catalog resource.

Callers pick the variant matching what they need: the shallow ones carry
no relations, the deep ones embed the named relation sets.
"""

from catalog.models import CATEGORY, PRODUCT, SUBCATEGORY
from catalog.repositories.projection import Projection
from catalog.schemas.entities import (
    CategoryEntity,
    CategoryTree,
    CategoryWithSubcategories,
    ProductEntity,
    ProductWithSubcategory,
    SubcategoryEntity,
    SubcategoryWithCategory,
    SubcategoryWithProducts,
)


# Shallow
CATEGORY_SHALLOW = Projection(CATEGORY, CategoryEntity)
SUBCATEGORY_SHALLOW = Projection(SUBCATEGORY, SubcategoryEntity)
PRODUCT_SHALLOW = Projection(PRODUCT, ProductEntity)

# Deep
CATEGORY_WITH_SUBCATEGORIES = Projection(
    CATEGORY,
    CategoryWithSubcategories,
    relations={"subcategories": SUBCATEGORY_SHALLOW},
)

SUBCATEGORY_WITH_PRODUCTS = Projection(
    SUBCATEGORY,
    SubcategoryWithProducts,
    relations={"products": PRODUCT_SHALLOW},
)

SUBCATEGORY_WITH_CATEGORY = Projection(
    SUBCATEGORY,
    SubcategoryWithCategory,
    relations={"category": CATEGORY_SHALLOW},
)

CATEGORY_TREE = Projection(
    CATEGORY,
    CategoryTree,
    relations={"subcategories": SUBCATEGORY_WITH_PRODUCTS},
)

PRODUCT_WITH_SUBCATEGORY = Projection(
    PRODUCT,
    ProductWithSubcategory,
    relations={"subcategory": SUBCATEGORY_SHALLOW},
)

# Audit view: embedded subcategories include soft-deleted ones
CATEGORY_WITH_ALL_SUBCATEGORIES = Projection(
    CATEGORY,
    CategoryWithSubcategories,
    relations={"subcategories": SUBCATEGORY_SHALLOW.including_deleted()},
)
