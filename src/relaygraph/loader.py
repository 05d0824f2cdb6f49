"""
Batched, request-cached loading of nodes by global ID.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any

from .context import get_request_scope
from .errors import UnsupportedNodeType
from .global_ids import GlobalID
from .registry import (
    Batched,
    BatchedUncached,
    NodeRegistry,
    NodeTypeDescriptor,
    Single,
    SingleUncached,
)


def cache_key(typename: str, id: str) -> str:
    return f"{typename}:{id}"


async def _call(fn: Callable[..., Any], *args: Any) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _align(values: Iterable[Any] | None, count: int) -> list[Any]:
    """Pad or cut a batch result so it has one entry per requested id."""
    values = list(values or [])
    if len(values) < count:
        values.extend([None] * (count - len(values)))
    return values[:count]


class NodeLoader:
    """
    Resolves global IDs to values for one GraphQL request.

    Results are cached in the request scope under ``"{typename}:{id}"``.
    Cache entries for batched and single strategies are written before the
    first suspension point, so lookups issued while a fetch is in flight
    join it instead of fetching again.
    """

    def __init__(self, registry: NodeRegistry, context: Any, info: Any = None):
        self.registry = registry
        self.context = context
        self.info = info
        self.scope = get_request_scope(context)

    async def resolve(
        self,
        ids: Sequence[GlobalID | None],
        *,
        return_exceptions: bool = False,
    ) -> list[Any]:
        """
        Resolve global IDs, one output per input, in input order.

        ``None`` inputs and ids whose loader returned nothing resolve to
        ``None``. Repeated ids are fetched once.

        Args:
            ids: Decoded global IDs
            return_exceptions: When True, a failed lookup is returned in
                the slot of each affected id instead of being raised. A
                failed batch affects every id in it, a failed single
                lookup only its own id.

        Raises:
            UnsupportedNodeType: If a type has no loader strategy and
                ``return_exceptions`` is False
        """
        cache = self.scope.cache
        in_flight: dict[str, Any] = {}
        ids_by_type: dict[str, dict[str, None]] = {}

        for global_id in ids:
            if global_id is None:
                continue

            key = cache_key(global_id.typename, global_id.id)
            if key in in_flight:
                continue
            if key in cache:
                in_flight[key] = cache[key]
                continue

            ids_by_type.setdefault(global_id.typename, {})[global_id.id] = None

        # Dispatch every type before awaiting anything
        dispatched: list[tuple[str, list[str], Any]] = []
        for typename, unique_ids in ids_by_type.items():
            type_ids = list(unique_ids)
            try:
                outcome = self._dispatch(typename, type_ids)
            except UnsupportedNodeType as e:
                outcome = e
            dispatched.append((typename, type_ids, outcome))

        results: dict[str, Any] = {}
        errors: dict[str, BaseException] = {}

        cached_keys = list(in_flight)
        cached_values = await asyncio.gather(
            *(_settled(in_flight[key]) for key in cached_keys), return_exceptions=True
        )
        for key, value in zip(cached_keys, cached_values):
            if isinstance(value, Exception):
                errors[key] = value
            else:
                results[key] = value

        outcomes = await asyncio.gather(
            *(_settled(outcome) for _, _, outcome in dispatched), return_exceptions=True
        )
        for (typename, type_ids, _), values in zip(dispatched, outcomes):
            # A whole-type failure (no strategy, failed batch) applies to every id
            if isinstance(values, Exception):
                values = [values] * len(type_ids)

            failures = []
            for local_id, value in zip(type_ids, values):
                key = cache_key(typename, local_id)
                if isinstance(value, Exception):
                    errors[key] = value
                    failures.append(value)
                else:
                    results[key] = value

            if failures:
                self.scope.logger.warning(
                    "Failed to load nodes",
                    typename=typename,
                    failed=len(failures),
                    count=len(type_ids),
                    error=str(failures[0]),
                )

        output: list[Any] = []
        for global_id in ids:
            if global_id is None:
                output.append(None)
                continue

            key = cache_key(global_id.typename, global_id.id)
            if key in errors:
                if not return_exceptions:
                    raise errors[key]
                output.append(errors[key])
            else:
                output.append(results.get(key))

        return output

    async def resolve_one(self, global_id: GlobalID | None) -> Any:
        """Resolve a single global ID, raising on failure."""
        return (await self.resolve([global_id]))[0]

    async def load_nodes_for_type(self, typename: str, ids: Iterable[object]) -> list[Any]:
        """Resolve local IDs of a single type, in order."""
        return await self.resolve([GlobalID(typename, str(local_id)) for local_id in ids])

    def _dispatch(self, typename: str, ids: list[str]) -> Awaitable[list[Any]]:
        descriptor = self.registry.get(typename)
        if descriptor is None or descriptor.strategy is None:
            raise UnsupportedNodeType(typename)

        strategy = descriptor.strategy
        self.scope.logger.debug(
            "Dispatching node lookups",
            typename=typename,
            count=len(ids),
            strategy=type(strategy).__name__,
        )

        if isinstance(strategy, Batched):
            return self._dispatch_batched(descriptor, strategy, ids)
        if isinstance(strategy, Single):
            return self._dispatch_single(descriptor, strategy, ids)
        if isinstance(strategy, BatchedUncached):
            return asyncio.ensure_future(self._load_batch(descriptor, strategy.load_many, ids))
        if isinstance(strategy, SingleUncached):
            return asyncio.gather(
                *(self._load_uncached(descriptor, strategy.load_one, local_id) for local_id in ids),
                return_exceptions=True,
            )

        raise UnsupportedNodeType(typename)

    def _dispatch_batched(
        self, descriptor: NodeTypeDescriptor, strategy: Batched, ids: list[str]
    ) -> Awaitable[list[Any]]:
        batch = asyncio.ensure_future(self._load_batch(descriptor, strategy.load_many, ids))

        entries = []
        for index, local_id in enumerate(ids):
            key = cache_key(descriptor.typename, local_id)
            entry = asyncio.ensure_future(self._settle_batch_entry(batch, index, key))
            self.scope.cache[key] = entry
            entries.append(entry)

        return asyncio.gather(*entries, return_exceptions=True)

    def _dispatch_single(
        self, descriptor: NodeTypeDescriptor, strategy: Single, ids: list[str]
    ) -> Awaitable[list[Any]]:
        entries = []
        for local_id in ids:
            key = cache_key(descriptor.typename, local_id)
            entry = asyncio.ensure_future(
                self._load_single(descriptor, strategy.load_one, local_id, key)
            )
            self.scope.cache[key] = entry
            entries.append(entry)

        # Each id settles on its own, so one failed lookup leaves its siblings intact
        return asyncio.gather(*entries, return_exceptions=True)

    def _brand(self, descriptor: NodeTypeDescriptor, value: Any) -> Any:
        if value is not None and descriptor.should_brand:
            self.scope.brands.brand(value, descriptor.typename)
        return value

    async def _load_batch(
        self, descriptor: NodeTypeDescriptor, load_many: Callable[..., Any], ids: list[str]
    ) -> list[Any]:
        values = _align(await _call(load_many, ids, self.context), len(ids))
        return [self._brand(descriptor, value) for value in values]

    async def _settle_batch_entry(self, batch: Awaitable[list[Any]], index: int, key: str) -> Any:
        value = (await batch)[index]
        self.scope.cache[key] = value
        return value

    async def _load_single(
        self, descriptor: NodeTypeDescriptor, load_one: Callable[..., Any], id: str, key: str
    ) -> Any:
        value = self._brand(descriptor, await _call(load_one, id, self.context))
        self.scope.cache[key] = value
        return value

    async def _load_uncached(
        self, descriptor: NodeTypeDescriptor, load_one: Callable[..., Any], id: str
    ) -> Any:
        return self._brand(descriptor, await _call(load_one, id, self.context, self.info))


async def _settled(value: Any) -> Any:
    if isinstance(value, BaseException):
        raise value
    if isinstance(value, asyncio.Future) or inspect.isawaitable(value):
        return await value
    return value


async def resolve_nodes(
    registry: NodeRegistry,
    context: Any,
    ids: Sequence[GlobalID | None],
    info: Any = None,
    *,
    return_exceptions: bool = False,
) -> list[Any]:
    """Shortcut for ``NodeLoader(registry, context, info).resolve(ids)``."""
    loader = NodeLoader(registry, context, info)
    return await loader.resolve(ids, return_exceptions=return_exceptions)
