"""
Tests for the ServiceFactory lifecycle.

Tests cover:
- State transitions Uninitialized -> Ready -> Disposed
- Missing configuration
- Access before initialize and after dispose
- Reinitialization
- Memoized repositories and services
- Async context manager commit/rollback semantics
"""

import pytest

from catalog.core.config import Settings
from catalog.core.database import Database
from catalog.core.errors import (
    ConfigurationMissingError,
    ContextDisposedError,
    ContextUnavailableError,
)
from catalog.core.factory import FactoryState, ServiceFactory
from tests.conftest import TEST_DATABASE_URL


@pytest.mark.asyncio
async def test_initialize_moves_to_ready():
    factory = ServiceFactory.for_test(TEST_DATABASE_URL)
    assert factory.state is FactoryState.UNINITIALIZED

    await factory.initialize()

    assert factory.state is FactoryState.READY
    assert factory.context.is_available
    await factory.dispose()
    assert factory.state is FactoryState.DISPOSED


@pytest.mark.asyncio
async def test_initialize_without_database_url_raises():
    """
    Test missing configuration.

    Arrange: Factory built from settings with no DATABASE_URL
    Act: initialize()
    Assert: ConfigurationMissingError; state back to UNINITIALIZED
    """
    factory = ServiceFactory.for_test(None)

    with pytest.raises(ConfigurationMissingError):
        await factory.initialize()

    assert factory.state is FactoryState.UNINITIALIZED


@pytest.mark.asyncio
async def test_accessors_before_initialize_raise():
    factory = ServiceFactory.for_test(TEST_DATABASE_URL)

    with pytest.raises(ContextUnavailableError):
        factory.categories
    with pytest.raises(ContextUnavailableError):
        factory.context


@pytest.mark.asyncio
async def test_accessors_after_dispose_raise_context_disposed(factory):
    # Arrange
    repository = factory.category_repository

    # Act
    await factory.dispose()

    # Assert
    with pytest.raises(ContextDisposedError):
        factory.categories
    with pytest.raises(ContextDisposedError):
        factory.product_repository
    with pytest.raises(ContextDisposedError):
        await factory.initialize()
    # repositories handed out earlier fail on their next query
    with pytest.raises(ContextUnavailableError):
        await repository.get_page(1, 10)


@pytest.mark.asyncio
async def test_dispose_is_idempotent(factory):
    await factory.dispose()
    await factory.dispose()

    assert factory.state is FactoryState.DISPOSED


@pytest.mark.asyncio
async def test_accessors_are_memoized_per_factory(factory):
    assert factory.categories is factory.categories
    assert factory.category_repository is factory.category_repository
    assert factory.products.subcategories is factory.subcategory_repository
    assert factory.subcategories.categories is factory.category_repository


@pytest.mark.asyncio
async def test_factories_do_not_share_contexts():
    first = await ServiceFactory.for_test(TEST_DATABASE_URL).initialize()
    second = await ServiceFactory.for_test(TEST_DATABASE_URL).initialize()

    try:
        assert first.context is not second.context
        assert first.unit_of_work != second.unit_of_work
    finally:
        await first.dispose()
        await second.dispose()


@pytest.mark.asyncio
async def test_reinitialize_disposes_previous_context(factory):
    """
    Test that reinitialize tears down the old context before opening a new one.
    """
    # Arrange
    old_context = factory.context
    old_database = factory.database
    old_service = factory.categories

    # Act
    await factory.reinitialize()

    # Assert
    assert factory.state is FactoryState.READY
    assert old_context.is_disposed
    assert old_database.is_disposed
    assert factory.context is not old_context
    assert factory.categories is not old_service


@pytest.mark.asyncio
async def test_reinitialize_with_new_url_updates_settings(factory):
    new_url = "sqlite+aiosqlite://"

    await factory.reinitialize(database_url=new_url)

    assert factory.settings.database_url == new_url
    assert factory.database.url == new_url


@pytest.mark.asyncio
async def test_reinitialize_after_dispose_raises(factory):
    await factory.dispose()

    with pytest.raises(ContextDisposedError):
        await factory.reinitialize()


@pytest.mark.asyncio
async def test_request_factory_shares_but_does_not_dispose_engine():
    # Arrange
    database = Database(TEST_DATABASE_URL)
    settings = Settings(database_url=TEST_DATABASE_URL, _env_file=None)

    # Act
    factory = await ServiceFactory.for_request(settings, database, request_id="req-1").initialize()
    shared = factory.database is database
    await factory.dispose()

    # Assert
    assert shared
    assert factory.unit_of_work == "req-1"
    assert not database.is_disposed
    await database.dispose()


@pytest.mark.asyncio
async def test_request_factories_on_shared_file_database_are_isolated(tmp_path):
    """
    Test that concurrent units of work sharing one Database do not share
    a connection.

    Arrange: File-backed database; a writer and a reader request factory
    Act: Writer adds without committing, reader counts and rolls back,
         then writer commits
    Assert: Reader never saw the pending row; the committed row survives
            the reader's rollback
    """
    # Arrange
    url = f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"
    database = Database(url)
    await database.create_all()
    settings = Settings(database_url=url, _env_file=None)
    writer = await ServiceFactory.for_request(settings, database, request_id="writer").initialize()
    reader = await ServiceFactory.for_request(settings, database, request_id="reader").initialize()

    # Act
    try:
        await writer.category_repository.add({"name": "From writer"})
        seen_before_commit = await reader.category_repository.count()
        await reader.rollback()
        await writer.commit()
    finally:
        await reader.dispose()
        await writer.dispose()
    async with ServiceFactory(settings, database) as fresh:
        total = await fresh.category_repository.count()

    # Assert
    assert seen_before_commit == 0
    assert total == 1
    await database.dispose()


@pytest.mark.asyncio
async def test_async_with_commits_on_clean_exit():
    """
    Test unit-of-work semantics.

    Arrange: Shared database with the schema created
    Act: Write inside `async with`, then read from a second factory
    Assert: The write is visible after the first block exits
    """
    # Arrange
    database = Database(TEST_DATABASE_URL)
    await database.create_all()
    settings = Settings(database_url=TEST_DATABASE_URL, _env_file=None)

    # Act
    async with ServiceFactory(settings, database) as factory:
        await factory.category_repository.add({"name": "Garden"})
    async with ServiceFactory(settings, database) as reader:
        total = await reader.category_repository.count()

    # Assert
    assert factory.state is FactoryState.DISPOSED
    assert total == 1
    await database.dispose()


@pytest.mark.asyncio
async def test_async_with_rolls_back_on_error():
    # Arrange
    database = Database(TEST_DATABASE_URL)
    await database.create_all()
    settings = Settings(database_url=TEST_DATABASE_URL, _env_file=None)

    # Act
    with pytest.raises(RuntimeError):
        async with ServiceFactory(settings, database) as factory:
            await factory.category_repository.add({"name": "Garden"})
            raise RuntimeError("abort")
    async with ServiceFactory(settings, database) as reader:
        total = await reader.category_repository.count()

    # Assert
    assert total == 0
    await database.dispose()
