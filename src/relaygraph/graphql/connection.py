"""
Connection GraphQL types
"""

from typing import Any, Optional

import strawberry

from ..connection import ConnectionBuilder, ConnectionNullability

_connection_types: dict[tuple[str, ConnectionNullability], type] = {}


@strawberry.type(name="PageInfo")
class PageInfoType:
    """Information about pagination in a connection."""

    has_next_page: bool
    has_previous_page: bool
    start_cursor: str | None
    end_cursor: str | None


def _type_name(node_type: Any) -> str:
    definition = getattr(node_type, "__strawberry_definition__", None)
    return definition.name if definition is not None else node_type.__name__


def _object_type(name: str, annotations: dict[str, Any], **attrs: Any) -> type:
    namespace = {"__annotations__": annotations, "__module__": __name__, **attrs}
    return strawberry.type(type(name, (), namespace), name=name)


def connection_type(
    node_type: Any,
    *,
    name: str | None = None,
    nullability: ConnectionNullability | None = None,
) -> type:
    """
    Create (or reuse) the ``<Name>Connection`` and ``<Name>Edge`` types.

    The nullability policy decides the GraphQL types of ``edges``, the edge
    items, ``node`` and, when enabled, the flattened ``nodes`` list. The
    returned class carries a matching ``builder``.

    Args:
        node_type: Strawberry type of the nodes
        name: Prefix for the generated type names, defaults to the node
            type's GraphQL name
        nullability: Defaults to the policy from settings
    """
    policy = nullability or ConnectionNullability()
    base_name = name or _type_name(node_type)

    existing = _connection_types.get((base_name, policy))
    if existing is not None:
        return existing

    node_annotation = Optional[node_type] if policy.node_nullable else node_type
    edge = _object_type(f"{base_name}Edge", {"cursor": str, "node": node_annotation})

    edge_annotation = Optional[edge] if policy.edge_nullable else edge
    edges_annotation: Any = list[edge_annotation]
    if policy.edges_nullable:
        edges_annotation = Optional[edges_annotation]

    annotations: dict[str, Any] = {"page_info": PageInfoType, "edges": edges_annotation}
    if policy.include_nodes:
        item = Optional[node_type] if policy.edge_nullable or policy.node_nullable else node_type
        nodes_annotation: Any = list[item]
        if policy.edges_nullable:
            nodes_annotation = Optional[nodes_annotation]
        annotations["nodes"] = nodes_annotation

    connection = _object_type(
        f"{base_name}Connection",
        annotations,
        builder=ConnectionBuilder(policy),
        edge_type=edge,
    )
    _connection_types[(base_name, policy)] = connection
    return connection
