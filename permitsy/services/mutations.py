"""Generic insert/update/delete with notification and cache invalidation."""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger

from permitsy.core.exceptions import BackendError
from permitsy.core.result import OperationResult
from permitsy.models.backend import BackendClient
from permitsy.services.notification import Notifier
from permitsy.services.query_cache import CacheKey, QueryCache, as_key

# A string or tuple is one key; a list holds several (strings or key sequences)
QueryKeys = Union[str, Tuple[str, ...], Sequence[Union[str, Sequence[str]]]]


@dataclass
class MutationConfig:
    """Target table and side effects of a mutation."""

    table: str
    query_keys: QueryKeys
    on_success: Optional[Callable[[Any], Any]] = None
    on_error: Optional[Callable[[BackendError], Any]] = None
    success_message: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def cache_keys(self) -> List[CacheKey]:
        """Cache key prefixes invalidated after a successful write."""
        if isinstance(self.query_keys, (str, tuple)):
            return [as_key(self.query_keys)]
        return [as_key(key if isinstance(key, str) else tuple(key)) for key in self.query_keys]


async def _call(callback: Optional[Callable[[Any], Any]], value: Any) -> None:
    if callback is None:
        return
    outcome = callback(value)
    if inspect.isawaitable(outcome):
        await outcome


class TableMutations:
    """
    Writes a row, then refreshes dependent views and tells the admin.

    On success every configured cache key is invalidated, a success
    notification is recorded when a message is configured and ``on_success``
    receives the stored row. On error an error notification is recorded
    (configured message or the backend message) and ``on_error`` receives
    the exception. Nothing is retried or rolled back.
    """

    def __init__(
        self,
        backend: BackendClient,
        cache: Optional[QueryCache] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.backend = backend
        self.cache = cache if cache is not None else QueryCache()
        self.notifier = notifier if notifier is not None else Notifier()

    async def insert(self, config: MutationConfig, data: Dict[str, Any]) -> OperationResult[Any]:
        """
        Insert a row.

        Args:
            config: Mutation configuration
            data: Row to insert

        Returns:
            OperationResult with the stored row
        """
        query = self.backend.table(config.table).insert(data).single()
        return await self._run(config, "inserting into", query.execute)

    async def update(
        self, config: MutationConfig, id: str, data: Dict[str, Any]
    ) -> OperationResult[Any]:
        """
        Update a row by ID.

        Args:
            config: Mutation configuration
            id: Row ID
            data: Fields to update

        Returns:
            OperationResult with the stored row
        """
        query = self.backend.table(config.table).update(data).eq("id", id).single()
        return await self._run(config, "updating", query.execute)

    async def delete(self, config: MutationConfig, id: str) -> OperationResult[Any]:
        """
        Delete a row by ID.

        Args:
            config: Mutation configuration
            id: Row ID

        Returns:
            OperationResult whose data is the deleted ID
        """
        query = self.backend.table(config.table).delete().eq("id", id)

        async def run() -> str:
            await query.execute()
            return id

        return await self._run(config, "deleting from", run)

    async def _run(self, config: MutationConfig, verb: str, operation) -> OperationResult[Any]:
        try:
            data = await operation()
        except BackendError as e:
            logger.error(f"Error {verb} {config.table}: {e}")
            self.notifier.error("Error", config.error_message or e.message)
            await _call(config.on_error, e)
            return OperationResult.fail(config.error_message or e.message)

        for key in config.cache_keys:
            self.cache.invalidate(key)
        if config.success_message:
            self.notifier.success("Success", config.success_message)
        await _call(config.on_success, data)
        return OperationResult.ok(config.success_message or "Operation completed", data)
