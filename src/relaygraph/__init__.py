"""
relaygraph
Global IDs, node refetching, connections and client mutation IDs for
Strawberry GraphQL schemas
"""

__version__ = "0.1.0"

from .config import settings
from .connection import Connection, ConnectionBuilder, ConnectionNullability, Edge, PageInfo
from .errors import (
    CorrelationKeyMissing,
    InvalidCursor,
    InvalidIdentifier,
    RelayError,
    TypeResolutionFailure,
    UnsupportedNodeType,
)
from .global_ids import GlobalID, decode_global_id, encode_global_id
from .loader import NodeLoader, resolve_nodes
from .mutations import MutationCorrelator
from .registry import (
    Batched,
    BatchedUncached,
    NodeRegistry,
    NodeTypeDescriptor,
    Single,
    SingleUncached,
    node_registry,
)

__all__ = [
    "Batched",
    "BatchedUncached",
    "Connection",
    "ConnectionBuilder",
    "ConnectionNullability",
    "CorrelationKeyMissing",
    "Edge",
    "GlobalID",
    "InvalidCursor",
    "InvalidIdentifier",
    "MutationCorrelator",
    "NodeLoader",
    "NodeRegistry",
    "NodeTypeDescriptor",
    "PageInfo",
    "RelayError",
    "Single",
    "SingleUncached",
    "TypeResolutionFailure",
    "UnsupportedNodeType",
    "__version__",
    "decode_global_id",
    "encode_global_id",
    "node_registry",
    "resolve_nodes",
    "settings",
]
