"""
Node interface and the ``node`` / ``nodes`` root query fields
"""

from collections.abc import Mapping
from typing import Any

import strawberry
from graphql import GraphQLAbstractType, GraphQLResolveInfo

from ..context import get_registry, get_request_scope
from ..errors import InvalidIdentifier
from ..global_ids import GlobalID
from ..loader import NodeLoader
from ..logging import get_logger
from ..type_resolution import explicit_node_type, resolve_node_type

logger = get_logger(__name__)


def _local_id(value: Any, info: strawberry.Info) -> Any:
    resolver = getattr(value, "resolve_node_id", None)
    if callable(resolver):
        return resolver(info)
    if isinstance(value, Mapping):
        return value["node_id"]
    return value.node_id


def _parent_typename(value: Any, info: strawberry.Info) -> str:
    typename = getattr(info.path, "typename", None)
    if typename:
        return typename
    return type(value).__strawberry_definition__.name


@strawberry.interface(name="Node", description="An object with a global ID.")
class Node:
    """
    Relay Node interface.

    Implementing types expose their local identifier through
    ``resolve_node_id``, which by default returns the ``node_id`` attribute.
    """

    @classmethod
    def resolve_type(
        cls, obj: Any, info: GraphQLResolveInfo, abstract_type: GraphQLAbstractType
    ) -> Any:
        return resolve_node_type(
            obj,
            info,
            abstract_type,
            registry=get_registry(info.context),
            brands=get_request_scope(info.context).brands,
        )

    @classmethod
    def is_type_of(cls, obj: Any, info: GraphQLResolveInfo) -> bool:
        """Accept instances, and plain values that name this type.

        Loaders may return rows or dicts instead of Strawberry objects; those
        are accepted when branded or tagged with this type's name.
        """
        if isinstance(obj, cls):
            return True
        typename = explicit_node_type(
            obj,
            registry=get_registry(info.context),
            brands=get_request_scope(info.context).brands,
        )
        return typename == cls.__strawberry_definition__.name

    @strawberry.field(name="id", description="The global ID of the object.")
    def global_id(self, info: strawberry.Info) -> strawberry.ID:
        registry = get_registry(info.context)
        return strawberry.ID(registry.encode_id(_parent_typename(self, info), _local_id(self, info)))


def decode_id(info: strawberry.Info, value: str, *, typename: str | None = None) -> GlobalID:
    """
    Decode a global ID argument with the request's registry codec.

    Args:
        info: Resolver info, used to find the registry
        value: Encoded global ID
        typename: When given, IDs of any other type are rejected

    Raises:
        InvalidIdentifier: If the ID is malformed or of the wrong type
    """
    try:
        global_id = get_registry(info.context).decode_id(value)
        if typename is not None and global_id.typename != typename:
            raise InvalidIdentifier(value, f"expected a {typename} ID")
    except InvalidIdentifier as e:
        logger.info("Rejected global ID", global_id=value, reason=e.reason)
        raise
    return global_id


async def resolve_node(info: strawberry.Info, id: strawberry.ID) -> Node | None:
    """Fetch an object of any Node type by its global ID."""
    global_id = decode_id(info, id)
    loader = NodeLoader(get_registry(info.context), info.context, info)
    return await loader.resolve_one(global_id)


async def resolve_nodes(info: strawberry.Info, ids: list[strawberry.ID]) -> list[Node | None]:
    """
    Fetch objects of any Node type by global ID, in order.

    A malformed or unloadable ID becomes an error on its own list item;
    the other items still resolve.
    """
    decoded: list[GlobalID | None] = []
    failures: dict[int, Exception] = {}
    for index, value in enumerate(ids):
        try:
            decoded.append(decode_id(info, value))
        except InvalidIdentifier as e:
            decoded.append(None)
            failures[index] = e

    loader = NodeLoader(get_registry(info.context), info.context, info)
    values = await loader.resolve(decoded, return_exceptions=True)
    for index, error in failures.items():
        values[index] = error
    return values


@strawberry.type
class NodeQuery:
    """Query mixin adding the ``node`` and ``nodes`` fields."""

    node: Node | None = strawberry.field(
        resolver=resolve_node, description="Fetches an object given its global ID."
    )
    nodes: list[Node | None] = strawberry.field(
        resolver=resolve_nodes, description="Fetches objects given their global IDs."
    )
