"""
Node type registry.

Each type that can be re-fetched by global ID is described by a
``NodeTypeDescriptor`` holding exactly one loader strategy.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, Union

from .config import settings
from .global_ids import GlobalID, decode_global_id, encode_global_id
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=type)

LoadMany = Callable[[list[str], Any], Sequence[Any] | Awaitable[Sequence[Any]]]
LoadOne = Callable[..., Any]


@dataclass(frozen=True)
class Batched:
    """Load all ids of a type with one call, caching per id for the request."""

    load_many: LoadMany


@dataclass(frozen=True)
class Single:
    """Load ids one at a time, caching per id for the request."""

    load_one: LoadOne


@dataclass(frozen=True)
class BatchedUncached:
    """Load all ids of a type with one call, bypassing the request cache."""

    load_many: LoadMany


@dataclass(frozen=True)
class SingleUncached:
    """Load ids one at a time, bypassing the request cache.

    ``load_one`` is called as ``load_one(id, context, info)``.
    """

    load_one: LoadOne


LoaderStrategy = Union[Batched, Single, BatchedUncached, SingleUncached]

_STRATEGY_TYPES = (Batched, Single, BatchedUncached, SingleUncached)


@dataclass(frozen=True)
class NodeTypeDescriptor:
    """Registration record for a Node type."""

    typename: str
    strategy: LoaderStrategy | None = None
    brand_loaded_objects: bool | None = None
    origin: type | None = None

    @property
    def should_brand(self) -> bool:
        """Whether loaded values are branded with this type's name."""
        if self.brand_loaded_objects is None:
            return settings.brand_loaded_objects
        return self.brand_loaded_objects

    @property
    def is_cached(self) -> bool:
        return isinstance(self.strategy, (Batched, Single))


def _definition_name(cls: type) -> str:
    definition = getattr(cls, "__strawberry_definition__", None)
    if definition is not None:
        return definition.name
    return cls.__name__


class NodeRegistry:
    """
    Registry of Node types and their loader strategies.

    Also owns the global ID transform, so a deployment can swap in its own
    encoder and decoder.
    """

    def __init__(
        self,
        encode: Callable[[str, object], str] = encode_global_id,
        decode: Callable[[str], GlobalID] = decode_global_id,
    ):
        self._descriptors: dict[str, NodeTypeDescriptor] = {}
        self._by_origin: dict[type, NodeTypeDescriptor] = {}
        self._encode = encode
        self._decode = decode

    def register(
        self,
        typename: str,
        strategy: LoaderStrategy | None = None,
        *,
        brand_loaded_objects: bool | None = None,
        origin: type | None = None,
    ) -> NodeTypeDescriptor:
        """
        Register a Node type.

        Args:
            typename: GraphQL type name
            strategy: One of ``Batched``, ``Single``, ``BatchedUncached``
                or ``SingleUncached``. ``None`` registers the type without
                a way to load it; lookups then fail with UnsupportedNodeType.
            brand_loaded_objects: Override ``settings.brand_loaded_objects``
            origin: Python class backing the type, if any

        Raises:
            ValueError: If the typename is already registered
            TypeError: If the strategy is not a known variant
        """
        if typename in self._descriptors:
            raise ValueError(f"Node type '{typename}' is already registered")
        if strategy is not None and not isinstance(strategy, _STRATEGY_TYPES):
            raise TypeError(f"Unknown loader strategy for {typename}: {strategy!r}")

        descriptor = NodeTypeDescriptor(
            typename=typename,
            strategy=strategy,
            brand_loaded_objects=brand_loaded_objects,
            origin=origin,
        )
        self._descriptors[typename] = descriptor
        if origin is not None:
            self._by_origin[origin] = descriptor

        logger.debug(
            "Registered node type",
            typename=typename,
            strategy=type(strategy).__name__ if strategy else None,
        )
        return descriptor

    def node(
        self,
        strategy: LoaderStrategy | None = None,
        *,
        name: str | None = None,
        brand_loaded_objects: bool | None = None,
    ) -> Callable[[T], T]:
        """Class decorator registering a Strawberry type as a Node type."""

        def decorator(cls: T) -> T:
            self.register(
                name or _definition_name(cls),
                strategy,
                brand_loaded_objects=brand_loaded_objects,
                origin=cls,
            )
            return cls

        return decorator

    def get(self, typename: str) -> NodeTypeDescriptor | None:
        return self._descriptors.get(typename)

    def get_by_origin(self, origin: type) -> NodeTypeDescriptor | None:
        return self._by_origin.get(origin)

    def resolve_name(self, ref: object) -> str | None:
        """
        Map a type reference to its registered name.

        ``ref`` may be a descriptor, a typename or a registered origin class.
        """
        if isinstance(ref, NodeTypeDescriptor):
            return ref.typename
        if isinstance(ref, str):
            return ref if ref in self._descriptors else None
        if isinstance(ref, type):
            descriptor = self._by_origin.get(ref)
            if descriptor is not None:
                return descriptor.typename
        return None

    def encode_id(self, typename: str, id: object) -> str:
        return self._encode(typename, id)

    def decode_id(self, value: str) -> GlobalID:
        return self._decode(value)

    def list_names(self) -> list[str]:
        return list(self._descriptors.keys())

    def unregister(self, typename: str) -> bool:
        """
        Unregister a Node type by name.

        Returns:
            True if the type was found and removed, False otherwise
        """
        descriptor = self._descriptors.pop(typename, None)
        if descriptor is None:
            return False
        if descriptor.origin is not None:
            self._by_origin.pop(descriptor.origin, None)
        return True

    def clear(self) -> None:
        """Clear all registered Node types."""
        self._descriptors.clear()
        self._by_origin.clear()

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, typename: str) -> bool:
        return typename in self._descriptors


# Global registry instance
node_registry = NodeRegistry()
