"""
Concrete type resolution for values returned through the Node interface.
"""

from collections.abc import Mapping
from typing import Any

from graphql import GraphQLAbstractType, GraphQLResolveInfo, default_type_resolver

from .errors import TypeResolutionFailure
from .logging import get_logger
from .registry import NodeRegistry

logger = get_logger(__name__)

TYPENAME_FIELD = "__typename"
TYPE_REFERENCE_FIELD = "__node_type__"


class TypeBrands:
    """
    Identity-keyed side table from loaded objects to their typename.

    Objects are never mutated; the table keeps a reference to each branded
    object so its ``id()`` cannot be reused while the table is alive.
    """

    def __init__(self):
        self._brands: dict[int, tuple[Any, str]] = {}

    def brand(self, value: Any, typename: str) -> None:
        self._brands[id(value)] = (value, typename)

    def get(self, value: Any) -> str | None:
        entry = self._brands.get(id(value))
        if entry is None or entry[0] is not value:
            return None
        return entry[1]

    def __contains__(self, value: Any) -> bool:
        return self.get(value) is not None

    def __len__(self) -> int:
        return len(self._brands)


def _read(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def explicit_node_type(
    value: Any,
    *,
    registry: NodeRegistry,
    brands: TypeBrands | None = None,
) -> str | None:
    """
    Return the type name a value declares for itself, if any.

    Tried in order, first match wins:

    1. a brand recorded by the node loader
    2. an explicit ``__typename`` attribute or key
    3. a ``__node_type__`` back-reference to a registered class or
       descriptor, or the value's own class when it was registered
    """
    if value is None:
        return None

    if brands is not None:
        brand = brands.get(value)
        if brand:
            return brand

    try:
        typename = _read(value, TYPENAME_FIELD)
        if isinstance(typename, str) and typename:
            return typename
    except Exception as e:
        logger.debug("Ignoring unreadable __typename", error=str(e))

    try:
        ref = _read(value, TYPE_REFERENCE_FIELD)
        name = registry.resolve_name(ref) if ref is not None else None
        if name is None:
            name = registry.resolve_name(type(value))
        if name:
            return name
    except Exception as e:
        logger.debug("Ignoring unreadable node type reference", error=str(e))

    return None


def resolve_node_type(
    value: Any,
    info: GraphQLResolveInfo,
    abstract_type: GraphQLAbstractType,
    *,
    registry: NodeRegistry,
    brands: TypeBrands | None = None,
) -> Any:
    """
    Determine the concrete GraphQL type name for a Node value.

    Uses ``explicit_node_type`` and falls back to graphql-core's default
    type resolver, which asks each possible type's ``is_type_of``.

    Raises:
        TypeResolutionFailure: If nothing produced a type name
    """
    typename = explicit_node_type(value, registry=registry, brands=brands)
    if typename is not None:
        return typename

    resolved = default_type_resolver(value, info, abstract_type)
    if resolved is None:
        logger.warning(
            "Node type resolution failed",
            value_type=type(value).__name__,
            abstract_type=abstract_type.name,
        )
        raise TypeResolutionFailure(value, abstract_type.name)
    return resolved
