"""Generic repository over one API resource, with an in-memory cache."""

import asyncio
from typing import ClassVar, Generic, TypeVar

from src.api.base import ApiClient
from src.logging_config import get_logger
from src.models import ApiModel, ResourceType
from src.result import ErrorType, Result

logger = get_logger("repositories")

M = TypeVar("M", bound=ApiModel)
E = TypeVar("E", bound=ApiModel)


class Repository(Generic[M]):
    """CRUD access to a resource.

    Reads are cached per repository instance. The sandbox API accepts writes
    without persisting them, so the cache is what makes a created or updated
    entity visible to later reads.
    """

    model: ClassVar[type[ApiModel]]
    resource: ClassVar[ResourceType]

    def __init__(self, client: ApiClient):
        self.client = client
        self._cache: dict[int, M] = {}
        self._cache_loaded = False

    @property
    def endpoint(self) -> str:
        return self.resource.value

    async def get_all(self, *, cancel: asyncio.Event | None = None) -> Result[list[M]]:
        if self._cache_loaded:
            return Result.success(list(self._cache.values()))
        result = await self.client.get_list(self.endpoint, self.model, cancel=cancel)
        return result.tap(self._store_all)

    async def get_by_id(self, entity_id: int, *, cancel: asyncio.Event | None = None) -> Result[M]:
        if entity_id in self._cache:
            return Result.success(self._cache[entity_id])
        result = await self.client.get(f"{self.endpoint}/{entity_id}", self.model, cancel=cancel)
        return result.tap(self._store)

    async def exists(self, entity_id: int, *, cancel: asyncio.Event | None = None) -> Result[bool]:
        """True if the entity can be read; other failures are passed through."""
        result = await self.get_by_id(entity_id, cancel=cancel)
        if result.has_error_type(ErrorType.NOT_FOUND):
            return Result.success(False)
        return result.map(lambda _: True)

    async def count(self, *, cancel: asyncio.Event | None = None) -> Result[int]:
        return (await self.get_all(cancel=cancel)).map(len)

    async def create(self, entity: M, *, cancel: asyncio.Event | None = None) -> Result[M]:
        result = await self.client.post(self.endpoint, entity, self.model, cancel=cancel)
        return result.tap(self._store).tap(
            lambda created: logger.info(f"Created {self.model.__name__} {created.id}")
        )

    async def update(self, entity: M, *, cancel: asyncio.Event | None = None) -> Result[M]:
        if entity.id <= 0:
            return Result.failure(
                f"{self.model.__name__} needs an id to be updated", ErrorType.VALIDATION
            )
        result = await self.client.put(
            f"{self.endpoint}/{entity.id}", entity, self.model, cancel=cancel
        )
        return result.tap(self._store)

    async def delete(self, entity_id: int, *, cancel: asyncio.Event | None = None) -> Result[None]:
        result = await self.client.delete(f"{self.endpoint}/{entity_id}", cancel=cancel)
        return result.tap(lambda _: self._cache.pop(entity_id, None))

    def clear_cache(self) -> None:
        self._cache.clear()
        self._cache_loaded = False

    async def _fetch_list(
        self,
        endpoint: str,
        item_type: type[E],
        cancel: asyncio.Event | None,
    ) -> Result[list[E]]:
        """Uncached list read, for filtered and nested endpoints."""
        return await self.client.get_list(endpoint, item_type, cancel=cancel)

    def _store(self, entity: M) -> None:
        self._cache[entity.id] = entity

    def _store_all(self, entities: list[M]) -> None:
        for entity in entities:
            self._store(entity)
        self._cache_loaded = True
