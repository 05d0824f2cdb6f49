"""
Connection, Edge and PageInfo shapes and the builder that assembles them.

The builder does not paginate. It wraps a page that a data source already
selected and ordered, applying the configured nullability policy.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .config import settings

T = TypeVar("T")

CursorFn = Callable[[Any, int], str]


@dataclass
class PageInfo:
    """Pagination facts for the current page."""

    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: str | None = None
    end_cursor: str | None = None


@dataclass
class Edge(Generic[T]):
    """A node together with its cursor."""

    cursor: str
    node: T | None


@dataclass
class Connection(Generic[T]):
    """A page of edges plus its page info."""

    page_info: PageInfo
    edges: list[Edge[T] | None] | None
    nodes: list[T | None] | None = None


@dataclass(frozen=True)
class ConnectionNullability:
    """
    Nullability policy for a connection.

    Attributes:
        edges_nullable: The edges list itself may be null
        edge_nullable: Individual edges may be null
        node_nullable: The node of an edge may be null
        include_nodes: Also expose a flattened ``nodes`` list
    """

    edges_nullable: bool = field(default_factory=lambda: settings.edges_list_nullable)
    edge_nullable: bool = field(default_factory=lambda: settings.edge_nullable)
    node_nullable: bool = field(default_factory=lambda: settings.node_nullable)
    include_nodes: bool = field(default_factory=lambda: settings.nodes_on_connection)


class ConnectionBuilder:
    """Assembles ``Connection`` values from already paginated items."""

    def __init__(self, nullability: ConnectionNullability | None = None):
        self.nullability = nullability or ConnectionNullability()

    def build(
        self,
        items: Sequence[Any] | None,
        *,
        cursor: CursorFn,
        has_next_page: bool = False,
        has_previous_page: bool = False,
        start_cursor: str | None = None,
        end_cursor: str | None = None,
    ) -> Connection:
        """
        Build a connection preserving the order of ``items``.

        Args:
            items: Items of the current page, in order
            cursor: Called as ``cursor(item, index)`` for each edge
            has_next_page: Whether more items follow this page
            has_previous_page: Whether items precede this page
            start_cursor: Defaults to the cursor of the first edge
            end_cursor: Defaults to the cursor of the last edge

        Raises:
            ValueError: If a null value appears where the policy forbids it
        """
        policy = self.nullability

        if items is None:
            if not policy.edges_nullable:
                raise ValueError("Connection edges are not nullable but no items were given")
            edges = None
        else:
            edges = [self._edge(item, index, cursor) for index, item in enumerate(items)]

        present = [edge for edge in edges or [] if edge is not None]
        page_info = PageInfo(
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
            start_cursor=start_cursor if start_cursor is not None else (
                present[0].cursor if present else None
            ),
            end_cursor=end_cursor if end_cursor is not None else (
                present[-1].cursor if present else None
            ),
        )

        nodes = None
        if policy.include_nodes:
            nodes = [edge.node if edge is not None else None for edge in edges or []]

        return Connection(page_info=page_info, edges=edges, nodes=nodes)

    def _edge(self, item: Any, index: int, cursor: CursorFn) -> Edge | None:
        if item is not None:
            return Edge(cursor=cursor(item, index), node=item)

        if self.nullability.edge_nullable:
            return None
        if self.nullability.node_nullable:
            return Edge(cursor=cursor(item, index), node=None)

        raise ValueError(f"Null item at position {index} but edges and nodes are not nullable")
