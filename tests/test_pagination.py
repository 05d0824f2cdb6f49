"""
Tests for offset cursors and connection argument windows
"""

import pytest

from relaygraph.connection import ConnectionBuilder, ConnectionNullability
from relaygraph.errors import InvalidCursor
from relaygraph.pagination import (
    ConnectionArguments,
    cursor_to_offset,
    offset_to_cursor,
    offset_window,
    resolve_array_connection,
    resolve_offset_connection,
)

LETTERS = list("abcdefghij")


class TestCursors:
    """Offset cursor encoding."""

    def test_round_trip(self):
        assert cursor_to_offset(offset_to_cursor(0)) == 0
        assert cursor_to_offset(offset_to_cursor(1234)) == 1234

    @pytest.mark.parametrize("cursor", ["", "garbage!", offset_to_cursor(1)[:-3] + "zzz"])
    def test_invalid(self, cursor):
        with pytest.raises(InvalidCursor):
            cursor_to_offset(cursor)

    def test_other_prefix_is_invalid(self):
        import base64

        cursor = base64.urlsafe_b64encode(b"User:3").decode()

        with pytest.raises(InvalidCursor):
            cursor_to_offset(cursor)


class TestOffsetWindow:
    """Window arithmetic for first/after/last/before."""

    def test_first(self):
        window = offset_window(ConnectionArguments(first=3))

        assert (window.offset, window.limit, window.has_previous_page) == (0, 3, False)

    def test_first_after(self):
        window = offset_window(ConnectionArguments(first=2, after=offset_to_cursor(4)))

        assert (window.offset, window.limit, window.has_previous_page) == (5, 2, True)

    def test_last_before(self):
        window = offset_window(ConnectionArguments(last=2, before=offset_to_cursor(6)))

        assert (window.offset, window.limit) == (4, 2)

    def test_last_with_total(self):
        window = offset_window(ConnectionArguments(last=3), total=10)

        assert (window.offset, window.limit) == (7, 3)

    def test_last_without_anchor(self):
        with pytest.raises(ValueError, match='"last" requires'):
            offset_window(ConnectionArguments(last=3))

    def test_defaults_and_max(self):
        assert offset_window(ConnectionArguments(), default_size=20).limit == 20
        assert offset_window(ConnectionArguments(first=500), max_size=100).limit == 100

    @pytest.mark.parametrize("args", [ConnectionArguments(first=-1), ConnectionArguments(last=-1)])
    def test_negative(self, args):
        with pytest.raises(ValueError, match="non-negative"):
            offset_window(args, total=10)

    def test_has_next_page(self):
        window = offset_window(ConnectionArguments(first=3))

        assert window.has_next_page(4) is True
        assert window.has_next_page(3) is False


class TestResolveArrayConnection:
    """Connections over in-memory sequences."""

    def test_first_page(self):
        connection = resolve_array_connection(ConnectionArguments(first=3), LETTERS)

        assert [edge.node for edge in connection.edges] == ["a", "b", "c"]
        assert connection.page_info.has_next_page is True
        assert connection.page_info.has_previous_page is False
        assert connection.page_info.end_cursor == offset_to_cursor(2)

    def test_follow_end_cursor(self):
        first = resolve_array_connection(ConnectionArguments(first=4), LETTERS)
        second = resolve_array_connection(
            ConnectionArguments(first=4, after=first.page_info.end_cursor), LETTERS
        )

        assert [edge.node for edge in second.edges] == ["e", "f", "g", "h"]
        assert second.page_info.has_previous_page is True

    def test_last_page(self):
        connection = resolve_array_connection(ConnectionArguments(last=2), LETTERS)

        assert [edge.node for edge in connection.edges] == ["i", "j"]
        assert connection.page_info.has_next_page is False
        assert connection.page_info.has_previous_page is True

    def test_everything_without_arguments(self):
        connection = resolve_array_connection(ConnectionArguments(), LETTERS)

        assert len(connection.edges) == 10

    def test_uses_given_builder(self):
        builder = ConnectionBuilder(ConnectionNullability(include_nodes=True))

        connection = resolve_array_connection(ConnectionArguments(first=2), LETTERS, builder=builder)

        assert connection.nodes == ["a", "b"]


class TestResolveOffsetConnection:
    """Connections over offset/limit data sources."""

    @pytest.mark.asyncio
    async def test_fetches_one_extra_row(self):
        calls = []

        async def fetch(offset, limit):
            calls.append((offset, limit))
            return LETTERS[offset : offset + limit]

        connection = await resolve_offset_connection(
            ConnectionArguments(first=3, after=offset_to_cursor(1)), fetch
        )

        assert calls == [(2, 4)]
        assert [edge.node for edge in connection.edges] == ["c", "d", "e"]
        assert connection.page_info.has_next_page is True
        assert connection.edges[0].cursor == offset_to_cursor(2)

    @pytest.mark.asyncio
    async def test_sync_fetch_at_end(self):
        connection = await resolve_offset_connection(
            ConnectionArguments(first=5, after=offset_to_cursor(7)),
            lambda offset, limit: LETTERS[offset : offset + limit],
        )

        assert [edge.node for edge in connection.edges] == ["i", "j"]
        assert connection.page_info.has_next_page is False
