"""
Tests for the repositories.

Tests cover:
- get_page windowing, totals and ordering over soft-deleted data
- Argument validation before any store access
- Deep pages embedding live related entities
- Resource-specific filtered queries (search, price range, SKU)
- Writes: audit stamping, soft delete, restore, constraint failures
"""

from decimal import Decimal

import pytest

from catalog.core.errors import InvalidArgumentError, StorageFailureError
from catalog.schemas.entities import CategoryTree, CategoryWithSubcategories
from tests.conftest import LIVE_CATEGORY_NAMES, add_product


# get_page

@pytest.mark.asyncio
async def test_get_page_windows_live_categories_by_name(factory, seeded_categories):
    """
    Test paging over a set containing soft-deleted rows.

    Arrange: 25 categories, 3 soft-deleted (22 live)
    Act: Request page 2 with page size 10
    Assert: 10 results starting at the 11th live name, total 22
    """
    # Act
    page = await factory.category_repository.get_page(2, 10)

    # Assert
    assert page.current_page == 2
    assert page.page_size == 10
    assert page.total_row_count == 22
    assert [entity.name for entity in page.results] == LIVE_CATEGORY_NAMES[10:20]
    assert all(not entity.deleted for entity in page.results)


@pytest.mark.asyncio
async def test_get_page_last_partial_page(factory, seeded_categories):
    third = await factory.category_repository.get_page(3, 10)
    second_of_fifteen = await factory.category_repository.get_page(2, 15)

    assert [entity.name for entity in third.results] == LIVE_CATEGORY_NAMES[20:]
    assert len(second_of_fifteen.results) == 7
    assert second_of_fifteen.total_row_count == 22
    assert not second_of_fifteen.has_next


@pytest.mark.asyncio
async def test_total_row_count_does_not_depend_on_page_size(factory, seeded_categories):
    repo = factory.category_repository

    totals = {(await repo.get_page(1, size)).total_row_count for size in (1, 5, 22, 100)}

    assert totals == {22}


@pytest.mark.asyncio
async def test_page_beyond_range_is_empty_not_an_error(factory, seeded_categories, round_trips):
    """
    Test that a page past the end returns no results and skips the window
    round-trip.
    """
    # Act
    page = await factory.category_repository.get_page(99, 10)

    # Assert
    assert page.results == []
    assert page.total_row_count == 22
    assert page.current_page == 99
    assert round_trips.count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("page_number, page_size", [(1, 0), (0, 10), (-1, 10), (1, -5)])
async def test_get_page_rejects_invalid_arguments_before_store_access(
    factory, round_trips, page_number, page_size
):
    """
    Test that invalid page arguments fail fast.

    Act: Call get_page with a non-positive number or size
    Assert: InvalidArgumentError, and no round-trip was made
    """
    with pytest.raises(InvalidArgumentError):
        await factory.category_repository.get_page(page_number, page_size)

    assert round_trips.count == 0


@pytest.mark.asyncio
async def test_page_with_subcategories_embeds_only_live_ones(factory, outdoor):
    """
    Test deep paging.

    Arrange: One category with 2 live and 1 soft-deleted subcategory
    Act: Page categories with subcategories embedded
    Assert: The category carries exactly the 2 live subcategories, by name
    """
    # Arrange
    category, live, _ = outdoor

    # Act
    page = await factory.category_repository.get_page_with_subcategories(1, 10)

    # Assert
    assert page.total_row_count == 1
    entity = page.results[0]
    assert isinstance(entity, CategoryWithSubcategories)
    assert entity.id == category.id
    assert [sub.name for sub in entity.subcategories] == ["Boots", "Tents"]


@pytest.mark.asyncio
async def test_deep_page_loads_relations_in_batches(factory, round_trips):
    """
    Test that a deep page costs one round-trip per relation level,
    however many parents are on the page.
    """
    # Arrange
    for index in range(12):
        category = await factory.category_repository.add({"name": f"Category {index:02d}"})
        await factory.subcategory_repository.add({"category_id": category.id, "name": "Misc"})
    round_trips.reset()

    # Act
    page = await factory.category_repository.get_page_with_subcategories(1, 10)

    # Assert
    assert len(page.results) == 10
    # count, window, subcategories
    assert round_trips.count == 3


@pytest.mark.asyncio
async def test_get_tree_embeds_live_products(factory, outdoor):
    # Arrange
    _, (boots, tents), _ = outdoor
    await add_product(factory, tents, "TENT-1", "Dome Tent", "120.00")
    deleted = await add_product(factory, tents, "TENT-2", "Tunnel Tent", "180.00")
    await factory.product_repository.soft_delete(deleted.id)

    # Act
    page = await factory.category_repository.get_tree(1, 10)

    # Assert
    tree = page.results[0]
    assert isinstance(tree, CategoryTree)
    by_name = {sub.name: sub for sub in tree.subcategories}
    assert [p.sku for p in by_name["Tents"].products] == ["TENT-1"]
    assert by_name["Boots"].products == []


@pytest.mark.asyncio
async def test_get_with_all_subcategories_includes_deleted(factory, outdoor):
    category, _, _ = outdoor

    entity = await factory.category_repository.get_with_all_subcategories(category.id)

    assert [(sub.name, sub.deleted) for sub in entity.subcategories] == [
        ("Boots", False),
        ("Stoves", True),
        ("Tents", False),
    ]


@pytest.mark.asyncio
async def test_categories_sort_by_display_order_then_name(factory):
    repo = factory.category_repository
    await repo.add({"name": "Zebra", "display_order": 1})
    await repo.add({"name": "Apple", "display_order": 2})
    await repo.add({"name": "Mango", "display_order": 1})

    page = await repo.get_page(1, 10)

    assert [entity.name for entity in page.results] == ["Mango", "Zebra", "Apple"]


# Lookups

@pytest.mark.asyncio
async def test_get_by_id_hides_soft_deleted_entities(factory, seeded_categories):
    repo = factory.category_repository
    deleted = next(c for c in seeded_categories if c.name == "Category C")
    live = next(c for c in seeded_categories if c.name == "Category D")

    assert await repo.get_by_id(deleted.id) is None
    assert (await repo.get_by_id(live.id)).name == "Category D"
    assert await repo.exists(deleted.id) is False
    assert await repo.count() == 22


@pytest.mark.asyncio
async def test_search_by_name_is_case_insensitive(factory, seeded_categories):
    await factory.category_repository.add({"name": "100% Cotton"})

    letters = await factory.category_repository.search_by_name("category a", 1, 10)
    percent = await factory.category_repository.search_by_name("100%", 1, 10)
    underscore = await factory.category_repository.search_by_name("_", 1, 10)

    assert [entity.name for entity in letters.results] == ["Category A"]
    assert [entity.name for entity in percent.results] == ["100% Cotton"]
    assert underscore.total_row_count == 0


@pytest.mark.asyncio
async def test_search_by_name_rejects_blank_term(factory):
    with pytest.raises(InvalidArgumentError):
        await factory.category_repository.search_by_name("   ", 1, 10)


@pytest.mark.asyncio
async def test_subcategory_page_for_category(factory, outdoor):
    category, live, _ = outdoor
    other = await factory.category_repository.add({"name": "Kitchen"})
    await factory.subcategory_repository.add({"category_id": other.id, "name": "Pans"})

    page = await factory.subcategory_repository.get_page_for_category(category.id, 1, 10)

    assert page.total_row_count == 2
    assert [sub.id for sub in page.results] == [sub.id for sub in live]


@pytest.mark.asyncio
async def test_subcategory_with_category(factory, outdoor):
    category, (boots, _), _ = outdoor

    entity = await factory.subcategory_repository.get_with_category(boots.id)

    assert entity.category.id == category.id
    assert entity.category.name == "Outdoor"


@pytest.mark.asyncio
async def test_products_in_price_range_sorted_by_price(factory, outdoor):
    # Arrange
    _, (boots, tents), _ = outdoor
    await add_product(factory, tents, "T-1", "Big Tent", "300.00")
    await add_product(factory, tents, "T-2", "Small Tent", "80.00")
    await add_product(factory, boots, "B-1", "Hiking Boot", "120.00")
    await add_product(factory, boots, "B-2", "Sandal", "25.00")

    # Act
    page = await factory.product_repository.get_page_in_price_range(
        1, 10, min_price=Decimal("50"), max_price=Decimal("200")
    )

    # Assert
    assert [p.sku for p in page.results] == ["T-2", "B-1"]
    assert page.total_row_count == 2


@pytest.mark.asyncio
async def test_price_range_rejects_inverted_bounds(factory, round_trips):
    with pytest.raises(InvalidArgumentError):
        await factory.product_repository.get_page_in_price_range(
            1, 10, min_price=Decimal("10"), max_price=Decimal("5")
        )
    assert round_trips.count == 0


@pytest.mark.asyncio
async def test_sku_stays_taken_after_soft_delete(factory, outdoor):
    # Arrange
    _, (_, tents), _ = outdoor
    product = await add_product(factory, tents, "TENT-9", "Dome Tent", "99.00")

    # Act
    await factory.product_repository.soft_delete(product.id)

    # Assert
    assert await factory.product_repository.sku_taken(" tent-9 ") is True
    assert await factory.product_repository.find_by_sku("TENT-9") is None


@pytest.mark.asyncio
async def test_find_by_sku_embeds_subcategory(factory, outdoor):
    _, (_, tents), _ = outdoor
    await add_product(factory, tents, "TENT-1", "Dome Tent", "99.00")

    entity = await factory.product_repository.find_by_sku("tent-1")

    assert entity.name == "Dome Tent"
    assert entity.subcategory.name == "Tents"


# Writes

@pytest.mark.asyncio
async def test_add_stamps_creation_audit_fields(factory):
    entity = await factory.category_repository.add({"name": "Garden"}, actor="alice")

    assert entity.id > 0
    assert entity.created_by == "alice"
    assert entity.created_at is not None
    assert entity.deleted is False
    assert entity.display_order == 0


@pytest.mark.asyncio
async def test_add_rejects_unknown_fields(factory):
    with pytest.raises(InvalidArgumentError, match="colour"):
        await factory.category_repository.add({"name": "Garden", "colour": "green"})


@pytest.mark.asyncio
async def test_add_rejects_audit_fields(factory):
    with pytest.raises(InvalidArgumentError):
        await factory.category_repository.add({"name": "Garden", "deleted": True})


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_columns(factory, outdoor, round_trips):
    """
    Test that null values for NOT NULL columns are caller errors.

    Arrange: A live category and product
    Act: Update with None for required columns
    Assert: InvalidArgumentError naming the fields, and no round-trip was made
    """
    # Arrange
    category, (_, tents), _ = outdoor
    product = await add_product(factory, tents, "TENT-1", "Dome Tent", "120.00")
    round_trips.reset()

    # Act / Assert
    with pytest.raises(InvalidArgumentError, match="name, display_order"):
        await factory.category_repository.update(category.id, {"name": None, "display_order": None})
    with pytest.raises(InvalidArgumentError, match="price"):
        await factory.product_repository.update(product.id, {"price": None})
    assert round_trips.count == 0

    # nullable columns can still be cleared
    cleared = await factory.category_repository.update(category.id, {"description": None})
    assert cleared.description is None


@pytest.mark.asyncio
async def test_update_stamps_modification_fields(factory, round_trips):
    repo = factory.category_repository
    created = await repo.add({"name": "Garden"}, actor="alice")
    round_trips.reset()

    updated = await repo.update(created.id, {"description": "Plants and tools"}, actor="bob")

    # UPDATE ... RETURNING, no follow-up SELECT
    assert round_trips.operations == ["update category"]

    assert updated.description == "Plants and tools"
    assert updated.modified_by == "bob"
    assert updated.modified_at is not None
    assert updated.created_by == "alice"


@pytest.mark.asyncio
async def test_update_ignores_deleted_rows(factory):
    repo = factory.category_repository
    created = await repo.add({"name": "Garden"})
    await repo.soft_delete(created.id)

    assert await repo.update(created.id, {"name": "Yard"}) is None


@pytest.mark.asyncio
async def test_soft_delete_then_restore(factory, round_trips):
    """
    Test the soft-delete lifecycle.

    Arrange: One live category
    Act: Soft-delete it twice, then restore it twice
    Assert: Only the first delete and the first restore take effect
    """
    # Arrange
    repo = factory.category_repository
    created = await repo.add({"name": "Garden"})

    # Act / Assert
    assert await repo.soft_delete(created.id, actor="carol") is True
    assert await repo.soft_delete(created.id, actor="carol") is False
    assert await repo.get_by_id(created.id) is None

    round_trips.reset()
    restored = await repo.restore(created.id, actor="dave")
    assert round_trips.operations == ["restore category"]
    assert restored.deleted is False
    assert restored.deleted_by is None
    assert restored.modified_by == "dave"
    assert await repo.restore(created.id) is None
    assert (await repo.get_by_id(created.id)).name == "Garden"


@pytest.mark.asyncio
async def test_constraint_violation_raises_storage_failure(factory, outdoor):
    # Arrange
    _, (_, tents), _ = outdoor
    await add_product(factory, tents, "TENT-1", "Dome Tent", "99.00")

    # Act / Assert
    with pytest.raises(StorageFailureError) as exc_info:
        await add_product(factory, tents, "TENT-1", "Copy", "10.00")

    assert exc_info.value.operation == "insert product"
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_list_all_returns_every_live_entity_in_order(factory, seeded_categories):
    entities = await factory.category_repository.list_all()

    assert [entity.name for entity in entities] == LIVE_CATEGORY_NAMES
