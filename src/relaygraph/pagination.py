"""
Offset-based cursors and connection arguments.

These helpers are for data sources that page by offset. The connection
builder itself never computes windows.
"""

import base64
import binascii
import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .connection import Connection, ConnectionBuilder
from .errors import InvalidCursor

CURSOR_PREFIX = "arrayconnection:"

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class ConnectionArguments:
    """The standard ``first``/``after``/``last``/``before`` arguments."""

    first: int | None = None
    after: str | None = None
    last: int | None = None
    before: str | None = None


@dataclass(frozen=True)
class OffsetWindow:
    """Slice of an ordered collection selected by connection arguments."""

    offset: int
    limit: int
    has_previous_page: bool

    def has_next_page(self, fetched: int) -> bool:
        """True when a fetch of ``limit + 1`` rows returned more than ``limit``."""
        return fetched > self.limit


def offset_to_cursor(offset: int) -> str:
    return base64.urlsafe_b64encode(f"{CURSOR_PREFIX}{offset}".encode()).decode("ascii")


def cursor_to_offset(cursor: str) -> int:
    """
    Decode a cursor produced by ``offset_to_cursor``.

    Raises:
        InvalidCursor: If the cursor is malformed
    """
    try:
        payload = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, AttributeError) as e:
        raise InvalidCursor(cursor) from e

    prefix, _, offset = payload.partition(":")
    if f"{prefix}:" != CURSOR_PREFIX or not offset.isdigit():
        raise InvalidCursor(cursor)
    return int(offset)


def offset_window(
    args: ConnectionArguments,
    *,
    total: int | None = None,
    default_size: int = DEFAULT_PAGE_SIZE,
    max_size: int = MAX_PAGE_SIZE,
) -> OffsetWindow:
    """
    Compute the offset and limit selected by connection arguments.

    Args:
        args: Connection arguments
        total: Size of the collection, when known
        default_size: Page size when neither ``first`` nor ``last`` bound it
        max_size: Upper bound on the page size

    Raises:
        ValueError: If ``first`` or ``last`` is negative, or ``last`` is
            given without anything to count back from
        InvalidCursor: If ``after`` or ``before`` is malformed
    """
    if args.first is not None and args.first < 0:
        raise ValueError('Argument "first" must be a non-negative integer')
    if args.last is not None and args.last < 0:
        raise ValueError('Argument "last" must be a non-negative integer')

    start = cursor_to_offset(args.after) + 1 if args.after else 0
    end = max(cursor_to_offset(args.before), start) if args.before else total

    if args.first is not None:
        end = start + args.first if end is None else min(end, start + args.first)

    if end is None:
        if args.last is not None:
            raise ValueError('Argument "last" requires "before", "first" or a known total')
        end = start + default_size

    if args.last is not None:
        start = max(start, end - args.last)

    end = min(end, start + max_size)
    return OffsetWindow(offset=start, limit=max(end - start, 0), has_previous_page=start > 0)


async def resolve_offset_connection(
    args: ConnectionArguments,
    fetch: Callable[[int, int], Sequence[Any] | Awaitable[Sequence[Any]]],
    *,
    builder: ConnectionBuilder | None = None,
    default_size: int = DEFAULT_PAGE_SIZE,
    max_size: int = MAX_PAGE_SIZE,
) -> Connection:
    """
    Build a connection from an offset/limit data source.

    ``fetch(offset, limit)`` is asked for one row more than the page size so
    that ``has_next_page`` can be answered without a count query.
    """
    window = offset_window(args, default_size=default_size, max_size=max_size)

    rows = fetch(window.offset, window.limit + 1)
    if inspect.isawaitable(rows):
        rows = await rows
    rows = list(rows)

    return (builder or ConnectionBuilder()).build(
        rows[: window.limit],
        cursor=lambda _, index: offset_to_cursor(window.offset + index),
        has_next_page=window.has_next_page(len(rows)),
        has_previous_page=window.has_previous_page,
    )


def resolve_array_connection(
    args: ConnectionArguments,
    items: Sequence[Any],
    *,
    builder: ConnectionBuilder | None = None,
    max_size: int = MAX_PAGE_SIZE,
) -> Connection:
    """Build a connection over an in-memory sequence."""
    window = offset_window(args, total=len(items), default_size=len(items), max_size=max_size)
    page = items[window.offset : window.offset + window.limit]

    return (builder or ConnectionBuilder()).build(
        page,
        cursor=lambda _, index: offset_to_cursor(window.offset + index),
        has_next_page=window.offset + window.limit < len(items),
        has_previous_page=window.has_previous_page,
    )
