"""
Service factory: lifecycle of one unit of work.

A ServiceFactory owns exactly one StorageContext and lazily builds the
repositories and services bound to it. One factory serves one unit of
work (an inbound request or a test case) and is never shared.

State machine:

    UNINITIALIZED -> INITIALIZING -> READY -> DISPOSED

``initialize()`` fails with ConfigurationMissingError when no connection
string is configured. ``reinitialize()`` fully disposes the current
context before the next one is created, so a factory never holds two
live contexts. After ``dispose()`` every accessor raises
ContextDisposedError.
"""

import enum
import uuid
from typing import Any, Callable, Dict, Optional, TypeVar

from catalog.core.config import Settings, settings as default_settings
from catalog.core.context import StorageContext
from catalog.core.database import Database
from catalog.core.errors import (
    ConfigurationMissingError,
    ContextDisposedError,
    ContextUnavailableError,
)
from catalog.core.logging_config import get_logger
from catalog.repositories.category import CategoryRepository
from catalog.repositories.product import ProductRepository
from catalog.repositories.subcategory import SubcategoryRepository
from catalog.services.categories import CategoryService
from catalog.services.products import ProductService
from catalog.services.subcategories import SubcategoryService


logger = get_logger(__name__)

T = TypeVar("T")


class FactoryState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DISPOSED = "disposed"


class ServiceFactory:
    """
    Per-unit-of-work owner of a storage context and its services.

    Args:
        settings: Configuration to read the connection string from
        database: Shared engine holder; used when its URL matches the
            configured one, otherwise the factory builds and owns its own
        unit_of_work: Identifier for log correlation (e.g. the request ID)

    Example:
        async with ServiceFactory(settings, database) as factory:
            response = await factory.categories.list_categories(1, 20)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        database: Optional[Database] = None,
        unit_of_work: Optional[str] = None,
    ):
        self._settings = settings if settings is not None else default_settings
        self._shared_database = database
        self.unit_of_work = unit_of_work or uuid.uuid4().hex

        self._state = FactoryState.UNINITIALIZED
        self._database: Optional[Database] = None
        self._owns_database = False
        self._context: Optional[StorageContext] = None
        self._instances: Dict[str, Any] = {}

    # Variants

    @classmethod
    def for_request(
        cls,
        settings: Settings,
        database: Optional[Database],
        request_id: Optional[str] = None,
    ) -> "ServiceFactory":
        """Factory for one inbound request, sharing the application's engine."""
        return cls(settings=settings, database=database, unit_of_work=request_id)

    @classmethod
    def for_test(cls, database_url: Optional[str], **overrides: Any) -> "ServiceFactory":
        """Factory for one test case; it builds and owns a private engine."""
        test_settings = Settings(database_url=database_url, _env_file=None, **overrides)
        return cls(settings=test_settings, unit_of_work=f"test-{uuid.uuid4().hex[:8]}")

    # State

    @property
    def state(self) -> FactoryState:
        return self._state

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def database(self) -> Database:
        self._require_ready()
        return self._database

    @property
    def context(self) -> StorageContext:
        self._require_ready()
        return self._context

    def _require_ready(self) -> None:
        if self._state is FactoryState.DISPOSED:
            raise ContextDisposedError(
                f"Service factory {self.unit_of_work} has been disposed"
            )
        if self._state is not FactoryState.READY:
            raise ContextUnavailableError(
                f"Service factory {self.unit_of_work} is {self._state.value}; "
                "call initialize() first"
            )

    # Lifecycle

    async def initialize(self) -> "ServiceFactory":
        """
        Load the connection configuration and open the storage context.

        Returns:
            self, for chaining

        Raises:
            ConfigurationMissingError: If no database URL is configured
            ContextDisposedError: If the factory was already disposed
        """
        if self._state is FactoryState.READY:
            return self
        if self._state is FactoryState.DISPOSED:
            raise ContextDisposedError(
                f"Service factory {self.unit_of_work} has been disposed"
            )

        self._state = FactoryState.INITIALIZING
        url = self._settings.database_url
        if not url:
            self._state = FactoryState.UNINITIALIZED
            logger.error(
                "No database URL configured",
                extra={"unit_of_work": self.unit_of_work},
            )
            raise ConfigurationMissingError(
                "DATABASE_URL is not configured; cannot start a unit of work"
            )

        shared = self._shared_database
        if shared is not None and shared.url == url and not shared.is_disposed:
            self._database = shared
            self._owns_database = False
        else:
            self._database = Database(url, echo=self._settings.sql_echo)
            self._owns_database = True

        self._context = StorageContext(
            self._database.session_maker(),
            unit_of_work=self.unit_of_work,
        )
        self._state = FactoryState.READY
        logger.debug(
            "Unit of work started",
            extra={"unit_of_work": self.unit_of_work, "owns_engine": self._owns_database},
        )
        return self

    async def reinitialize(self, database_url: Optional[str] = None) -> "ServiceFactory":
        """
        Replace the storage context, optionally with a new connection string.

        The current context (and engine, when owned) is disposed before the
        new one is created.

        Raises:
            ContextDisposedError: If the factory was disposed for good
        """
        if self._state is FactoryState.DISPOSED:
            raise ContextDisposedError(
                f"Service factory {self.unit_of_work} has been disposed"
            )
        await self._teardown()
        if database_url is not None:
            self._settings = self._settings.model_copy(update={"database_url": database_url})
        self._state = FactoryState.UNINITIALIZED
        return await self.initialize()

    async def commit(self) -> None:
        await self.context.commit()

    async def rollback(self) -> None:
        await self.context.rollback()

    async def dispose(self) -> None:
        """
        End the unit of work.

        Uncommitted changes are rolled back by closing the session. Safe to
        call more than once.
        """
        if self._state is FactoryState.DISPOSED:
            return
        await self._teardown()
        self._state = FactoryState.DISPOSED
        logger.debug("Unit of work disposed", extra={"unit_of_work": self.unit_of_work})

    async def _teardown(self) -> None:
        self._instances.clear()
        context, self._context = self._context, None
        if context is not None:
            await context.dispose()
        database, self._database = self._database, None
        if database is not None and self._owns_database:
            await database.dispose()
        self._owns_database = False

    async def __aenter__(self) -> "ServiceFactory":
        return await self.initialize()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._state is FactoryState.READY:
                if exc_type is None:
                    await self.commit()
                else:
                    await self.rollback()
        finally:
            await self.dispose()

    # Memoized accessors

    def _get(self, key: str, build: Callable[[], T]) -> T:
        self._require_ready()
        instance = self._instances.get(key)
        if instance is None:
            instance = build()
            self._instances[key] = instance
        return instance

    @property
    def category_repository(self) -> CategoryRepository:
        return self._get("category_repository", lambda: CategoryRepository(self._context))

    @property
    def subcategory_repository(self) -> SubcategoryRepository:
        return self._get("subcategory_repository", lambda: SubcategoryRepository(self._context))

    @property
    def product_repository(self) -> ProductRepository:
        return self._get("product_repository", lambda: ProductRepository(self._context))

    @property
    def categories(self) -> CategoryService:
        return self._get(
            "categories",
            lambda: CategoryService(self._context, self.category_repository),
        )

    @property
    def subcategories(self) -> SubcategoryService:
        return self._get(
            "subcategories",
            lambda: SubcategoryService(
                self._context,
                self.subcategory_repository,
                self.category_repository,
            ),
        )

    @property
    def products(self) -> ProductService:
        return self._get(
            "products",
            lambda: ProductService(
                self._context,
                self.product_repository,
                self.subcategory_repository,
            ),
        )

    def __repr__(self) -> str:
        return f"ServiceFactory(unit_of_work={self.unit_of_work!r}, state={self._state.value})"
