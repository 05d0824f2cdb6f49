"""
Schema construction and validation helpers
"""

from collections.abc import Iterable, Mapping
from typing import Any

import strawberry
from graphql import get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema
from strawberry.schema.config import StrawberryConfig

from ..context import REGISTRY_KEY
from ..logging import get_logger
from ..mutations import MutationCorrelator
from ..registry import NodeRegistry, node_registry
from .mutations import CORRELATOR_KEY
from .node import Node

logger = get_logger(__name__)


def field_value(source: Any, name: str) -> Any:
    """Default field resolver reading keys of mappings and attributes of objects."""
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name)


def build_schema(
    query: type,
    mutation: type | None = None,
    *,
    registry: NodeRegistry | None = None,
    types: Iterable[type] = (),
    **kwargs: Any,
) -> strawberry.Schema:
    """
    Create a Strawberry schema including every registered Node type.

    Node types are usually reachable only through the ``Node`` interface,
    so they are passed to Strawberry explicitly. Unless a ``config`` is
    given, fields resolve with ``field_value`` so loaders may return dicts.
    """
    kwargs.setdefault("config", StrawberryConfig(default_resolver=field_value))
    registry = registry or node_registry
    node_types = [
        descriptor.origin
        for name in registry.list_names()
        if (descriptor := registry.get(name)) is not None
        and descriptor.origin is not None
        and issubclass(descriptor.origin, Node)
    ]

    extra_types = list(types)
    all_types = extra_types + [t for t in node_types if t not in extra_types]

    return strawberry.Schema(query=query, mutation=mutation, types=all_types, **kwargs)


def create_context(
    registry: NodeRegistry | None = None,
    correlator: MutationCorrelator | None = None,
    **values: Any,
) -> dict[str, Any]:
    """Create a fresh per-request context dict."""
    context: dict[str, Any] = dict(values)
    if registry is not None:
        context[REGISTRY_KEY] = registry
    if correlator is not None:
        context[CORRELATOR_KEY] = correlator
    return context


def validate_schema(schema: strawberry.Schema) -> None:
    """Validate a schema at startup.

    Runs graphql-core's schema validation and an introspection query, which
    catches unresolved type references before the first request.

    Raises:
        Exception: If the schema is invalid or has unresolved types
    """
    try:
        graphql_schema = schema._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")

        result = graphql_sync(graphql_schema, get_introspection_query())
        if result.errors:
            error_messages = [str(e) for e in result.errors]
            raise Exception(f"GraphQL introspection failed: {'; '.join(error_messages)}")

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise
