"""
Per-request state carried on the GraphQL execution context.

The scope is created on first access from a given context object and lives
exactly as long as that object. Nothing here is global, so concurrent
requests never share a cache.
"""

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from .logging import generate_request_id, get_logger, get_request_id
from .registry import NodeRegistry, node_registry
from .type_resolution import TypeBrands

logger = get_logger(__name__)

SCOPE_KEY = "relay_scope"
REGISTRY_KEY = "node_registry"


@dataclass
class RequestScope:
    """Request cache, correlation map and type brands for one execution."""

    request_id: str = field(default_factory=lambda: get_request_id() or generate_request_id())
    cache: dict[str, Any] = field(default_factory=dict)
    correlations: dict[tuple, Any] = field(default_factory=dict)
    brands: TypeBrands = field(default_factory=TypeBrands)

    @property
    def logger(self) -> structlog.BoundLogger:
        return logger.bind(request_id=self.request_id)


def get_request_scope(context: Any) -> RequestScope:
    """
    Return the request scope for a GraphQL context, creating it if needed.

    Dict contexts store the scope under ``"relay_scope"``; any other context
    object gets a ``relay_scope`` attribute.

    Raises:
        TypeError: If there is no context to attach the scope to
    """
    if context is None:
        raise TypeError("A per-request context is required to resolve nodes")

    if isinstance(context, MutableMapping):
        scope = context.get(SCOPE_KEY)
        if scope is None:
            scope = context[SCOPE_KEY] = RequestScope()
            scope.logger.debug("Created request scope")
        return scope

    scope = getattr(context, SCOPE_KEY, None)
    if scope is None:
        scope = RequestScope()
        try:
            setattr(context, SCOPE_KEY, scope)
        except AttributeError as e:
            raise TypeError(
                f"Cannot attach request scope to context of type {type(context).__name__}"
            ) from e
        scope.logger.debug("Created request scope")
    return scope


def get_registry(context: Any) -> NodeRegistry:
    """Return the node registry for a context, falling back to the global one."""
    if isinstance(context, MutableMapping):
        registry = context.get(REGISTRY_KEY)
    else:
        registry = getattr(context, REGISTRY_KEY, None)
    return registry if registry is not None else node_registry
