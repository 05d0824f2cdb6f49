"""
Tests for Node concrete type resolution
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from graphql import GraphQLInterfaceType

from relaygraph.errors import TypeResolutionFailure
from relaygraph.registry import Single
from relaygraph.type_resolution import TypeBrands, explicit_node_type, resolve_node_type

NODE = GraphQLInterfaceType("Node", {})


class UserModel:
    def __init__(self, name):
        self.name = name


class BoardModel:
    pass


class Exploding:
    """Raises on any attribute inspection."""

    def __getattr__(self, name):
        raise RuntimeError(f"cannot read {name}")


@pytest.fixture
def info():
    return MagicMock()


@pytest.fixture
def user_registry(registry):
    registry.register("User", Single(lambda id, ctx: None), origin=UserModel)
    registry.register("Board", Single(lambda id, ctx: None))
    return registry


class TestTypeBrands:
    """Tests for the identity-keyed brand table."""

    def test_brand_and_get(self):
        brands = TypeBrands()
        value = {"name": "Ada"}

        brands.brand(value, "User")

        assert brands.get(value) == "User"
        assert value in brands
        assert value == {"name": "Ada"}

    def test_equal_but_distinct_objects_are_not_branded(self):
        brands = TypeBrands()
        brands.brand({"name": "Ada"}, "User")

        assert brands.get({"name": "Ada"}) is None

    def test_brands_unhashable_values(self):
        brands = TypeBrands()
        value = ["a", "b"]

        brands.brand(value, "Tag")

        assert brands.get(value) == "Tag"
        assert len(brands) == 1


class TestResolveNodeType:
    """Resolution order for resolve_node_type."""

    def test_brand_wins_over_everything(self, user_registry, info):
        brands = TypeBrands()
        value = UserModel("Ada")
        setattr(value, "__typename", "Other")
        brands.brand(value, "Board")

        with patch("relaygraph.type_resolution.default_type_resolver") as default:
            result = resolve_node_type(value, info, NODE, registry=user_registry, brands=brands)

        assert result == "Board"
        default.assert_not_called()

    def test_typename_attribute(self, user_registry, info):
        value = SimpleNamespace(**{"__typename": "Board"})

        assert resolve_node_type(value, info, NODE, registry=user_registry) == "Board"

    def test_typename_key_on_mapping(self, user_registry, info):
        value = {"__typename": "Board", "title": "Moodboard"}

        assert resolve_node_type(value, info, NODE, registry=user_registry) == "Board"

    def test_node_type_reference_to_class(self, user_registry, info):
        value = SimpleNamespace(__node_type__=UserModel)

        assert resolve_node_type(value, info, NODE, registry=user_registry) == "User"

    def test_node_type_reference_to_descriptor(self, user_registry, info):
        value = {"__node_type__": user_registry.get("Board")}

        assert resolve_node_type(value, info, NODE, registry=user_registry) == "Board"

    def test_registered_class_of_value(self, user_registry, info):
        assert resolve_node_type(UserModel("Ada"), info, NODE, registry=user_registry) == "User"

    def test_inspection_errors_fall_through(self, user_registry, info):
        with patch(
            "relaygraph.type_resolution.default_type_resolver", return_value="User"
        ) as default:
            result = resolve_node_type(Exploding(), info, NODE, registry=user_registry)

        assert result == "User"
        default.assert_called_once()

    def test_falls_back_to_default_resolver(self, user_registry, info):
        value = BoardModel()

        with patch(
            "relaygraph.type_resolution.default_type_resolver", return_value="Board"
        ) as default:
            result = resolve_node_type(value, info, NODE, registry=user_registry)

        assert result == "Board"
        default.assert_called_once_with(value, info, NODE)

    def test_none_goes_to_default_resolver(self, user_registry, info):
        with patch(
            "relaygraph.type_resolution.default_type_resolver", return_value="User"
        ) as default:
            assert resolve_node_type(None, info, NODE, registry=user_registry) == "User"

        default.assert_called_once()

    def test_failure_when_nothing_matches(self, user_registry, info):
        with patch("relaygraph.type_resolution.default_type_resolver", return_value=None):
            with pytest.raises(TypeResolutionFailure, match="BoardModel"):
                resolve_node_type(BoardModel(), info, NODE, registry=user_registry)

    def test_unregistered_reference_falls_through(self, user_registry, info):
        value = SimpleNamespace(__node_type__=BoardModel)

        with patch("relaygraph.type_resolution.default_type_resolver", return_value="Board"):
            assert resolve_node_type(value, info, NODE, registry=user_registry) == "Board"


class TestExplicitNodeType:
    """Type names a value declares without the default resolver."""

    def test_brand(self, user_registry):
        value = {"node_id": "7"}
        brands = TypeBrands()
        brands.brand(value, "Tag")

        assert explicit_node_type(value, registry=user_registry, brands=brands) == "Tag"

    def test_typename_key(self, user_registry):
        assert explicit_node_type({"__typename": "Board"}, registry=user_registry) == "Board"

    def test_registered_class(self, user_registry):
        assert explicit_node_type(UserModel("Ada"), registry=user_registry) == "User"

    def test_nothing_declared(self, user_registry):
        assert explicit_node_type({"node_id": "7"}, registry=user_registry) is None
        assert explicit_node_type(BoardModel(), registry=user_registry) is None
        assert explicit_node_type(None, registry=user_registry) is None
