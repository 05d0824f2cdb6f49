"""
Shared pytest fixtures and configuration for all tests.
"""

from collections.abc import Generator
from types import SimpleNamespace
from typing import Any

import pytest
from graphql.pyutils import Path

from relaygraph.registry import NodeRegistry


@pytest.fixture
def registry() -> NodeRegistry:
    """Fresh node registry, isolated from the global one."""
    return NodeRegistry()


@pytest.fixture
def context() -> dict[str, Any]:
    """Empty per-request GraphQL context."""
    return {}


@pytest.fixture
def make_info(context: dict[str, Any]):
    """Build a minimal resolve-info stand-in at a given response path."""

    def _make(*keys: str | int, ctx: Any = None) -> SimpleNamespace:
        path = None
        for key in keys:
            path = Path(path, key, None)
        return SimpleNamespace(path=path, context=context if ctx is None else ctx)

    return _make


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep RELAY_* variables from the host out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("RELAY_"):
            monkeypatch.delenv(key)
    yield


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
