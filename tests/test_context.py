"""
Tests for per-request scope handling
"""

from types import SimpleNamespace

import pytest

from relaygraph.context import RequestScope, get_registry, get_request_scope
from relaygraph.logging import clear_request_context, set_request_context
from relaygraph.registry import NodeRegistry, node_registry


class TestGetRequestScope:
    """Lazily created request scope."""

    def test_dict_context(self):
        context = {}

        scope = get_request_scope(context)

        assert isinstance(scope, RequestScope)
        assert context["relay_scope"] is scope
        assert get_request_scope(context) is scope

    def test_object_context(self):
        context = SimpleNamespace()

        scope = get_request_scope(context)

        assert context.relay_scope is scope
        assert get_request_scope(context) is scope

    def test_contexts_do_not_share_scopes(self):
        first, second = get_request_scope({}), get_request_scope({})

        assert first is not second
        assert first.cache is not second.cache
        assert first.correlations is not second.correlations

    def test_none_context(self):
        with pytest.raises(TypeError):
            get_request_scope(None)

    def test_frozen_context(self):
        with pytest.raises(TypeError, match="Cannot attach"):
            get_request_scope(("not", "a", "context"))

    def test_request_id_from_logging_context(self):
        set_request_context("req-123")
        try:
            assert get_request_scope({}).request_id == "req-123"
        finally:
            clear_request_context()

        assert get_request_scope({}).request_id != "req-123"


class TestGetRegistry:
    """Registry lookup on the context."""

    def test_falls_back_to_global(self):
        assert get_registry({}) is node_registry
        assert get_registry(SimpleNamespace()) is node_registry

    def test_context_override(self):
        registry = NodeRegistry()

        assert get_registry({"node_registry": registry}) is registry
        assert get_registry(SimpleNamespace(node_registry=registry)) is registry
