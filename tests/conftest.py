"""
Pytest configuration and shared fixtures.

This module provides:
- Environment setup so tests never pick up a developer's DATABASE_URL
- A ready ServiceFactory per test on a private in-memory SQLite database
- Seeding fixtures for categories, subcategories and products
"""

import os
import string
from decimal import Decimal
from typing import List

import pytest


# Set test environment variables BEFORE any catalog imports
# so the module-level settings load with test values
os.environ["DATABASE_URL"] = ""
os.environ["LOG_JSON"] = "false"

from catalog.core.factory import ServiceFactory  # noqa: E402
from catalog.schemas.entities import CategoryEntity, ProductEntity, SubcategoryEntity  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# 25 names in alphabetical order: "Category A" ... "Category Y"
CATEGORY_NAMES = [f"Category {letter}" for letter in string.ascii_uppercase[:25]]
DELETED_CATEGORY_NAMES = {"Category C", "Category H", "Category T"}
LIVE_CATEGORY_NAMES = [name for name in CATEGORY_NAMES if name not in DELETED_CATEGORY_NAMES]


class RoundTripCounter:
    """Records every round-trip a storage context performs."""

    def __init__(self, context):
        self.operations: List[str] = []
        self._fetch_all = context.fetch_all
        self._fetch_one = context.fetch_one
        self._fetch_scalar = context.fetch_scalar
        self._execute = context.execute

    async def fetch_all(self, statement, operation="fetch"):
        self.operations.append(operation)
        return await self._fetch_all(statement, operation)

    async def fetch_one(self, statement, operation="fetch"):
        self.operations.append(operation)
        return await self._fetch_one(statement, operation)

    async def fetch_scalar(self, statement, operation="fetch"):
        self.operations.append(operation)
        return await self._fetch_scalar(statement, operation)

    async def execute(self, statement, operation="execute"):
        self.operations.append(operation)
        return await self._execute(statement, operation)

    @property
    def count(self) -> int:
        return len(self.operations)

    def reset(self) -> None:
        self.operations.clear()


@pytest.fixture
async def factory():
    """
    Provide a ready ServiceFactory for one test.

    Creates the tables before the test and disposes the factory (and its
    private engine) after.
    """
    factory = ServiceFactory.for_test(TEST_DATABASE_URL)
    await factory.initialize()
    await factory.database.create_all()

    yield factory

    await factory.dispose()


@pytest.fixture
def round_trips(factory, monkeypatch):
    """Count every round-trip the factory's storage context runs."""
    counter = RoundTripCounter(factory.context)
    monkeypatch.setattr(factory.context, "fetch_all", counter.fetch_all)
    monkeypatch.setattr(factory.context, "fetch_one", counter.fetch_one)
    monkeypatch.setattr(factory.context, "fetch_scalar", counter.fetch_scalar)
    monkeypatch.setattr(factory.context, "execute", counter.execute)
    return counter


@pytest.fixture
async def seeded_categories(factory) -> List[CategoryEntity]:
    """25 categories named alphabetically, 3 of them soft-deleted."""
    repo = factory.category_repository
    created = []
    for name in CATEGORY_NAMES:
        created.append(await repo.add({"name": name}, actor="seeder"))
    for entity in created:
        if entity.name in DELETED_CATEGORY_NAMES:
            await repo.soft_delete(entity.id, actor="seeder")
    return created


@pytest.fixture
async def outdoor(factory):
    """
    One category with 2 live subcategories and 1 soft-deleted one.

    Returns:
        Tuple of (category, [live subcategories by name], deleted subcategory)
    """
    category = await factory.category_repository.add({"name": "Outdoor"}, actor="seeder")
    subs = factory.subcategory_repository
    tents = await subs.add({"category_id": category.id, "name": "Tents"}, actor="seeder")
    boots = await subs.add({"category_id": category.id, "name": "Boots"}, actor="seeder")
    stoves = await subs.add({"category_id": category.id, "name": "Stoves"}, actor="seeder")
    await subs.soft_delete(stoves.id, actor="seeder")
    return category, [boots, tents], stoves


async def add_product(
    factory,
    subcategory: SubcategoryEntity,
    sku: str,
    name: str,
    price: str,
    stock: int = 1,
) -> ProductEntity:
    """Insert one product under ``subcategory``."""
    return await factory.product_repository.add(
        {
            "subcategory_id": subcategory.id,
            "sku": sku,
            "name": name,
            "price": Decimal(price),
            "stock": stock,
        },
        actor="seeder",
    )
