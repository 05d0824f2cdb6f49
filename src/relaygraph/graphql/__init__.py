"""
Strawberry bindings for the relay layer
"""

from .connection import PageInfoType, connection_type
from .mutations import (
    MutationInput,
    MutationPayload,
    get_correlator,
    mutation_input_base,
    mutation_payload_base,
    relay_mutation,
)
from .node import Node, NodeQuery, decode_id, resolve_node, resolve_nodes
from .schema import build_schema, create_context, field_value, validate_schema

__all__ = [
    "MutationInput",
    "MutationPayload",
    "Node",
    "NodeQuery",
    "PageInfoType",
    "build_schema",
    "connection_type",
    "create_context",
    "decode_id",
    "field_value",
    "get_correlator",
    "mutation_input_base",
    "mutation_payload_base",
    "relay_mutation",
    "resolve_node",
    "resolve_nodes",
    "validate_schema",
]
