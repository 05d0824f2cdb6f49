"""
Relay-style mutation helpers: client mutation ID passthrough
"""

import functools
import inspect
import typing
from collections.abc import Callable, Mapping
from typing import Any, Optional

import strawberry

from ..config import ClientMutationIdMode, settings
from ..logging import get_logger
from ..mutations import MutationCorrelator, correlator

logger = get_logger(__name__)

CORRELATOR_KEY = "mutation_correlator"

_input_bases: dict[str, type] = {}
_payload_bases: dict[str, type] = {}


def get_correlator(context: Any) -> MutationCorrelator:
    """Return the correlator for a context, falling back to the global one."""
    if isinstance(context, Mapping):
        configured = context.get(CORRELATOR_KEY)
    else:
        configured = getattr(context, CORRELATOR_KEY, None)
    return configured if configured is not None else correlator


def _client_mutation_id(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get("client_mutation_id", value.get("clientMutationId"))
    return getattr(value, "client_mutation_id", None)


def _info_parameter(fn: Callable) -> str | None:
    parameters = inspect.signature(fn).parameters
    for parameter in parameters.values():
        annotation = typing.get_origin(parameter.annotation) or parameter.annotation
        if isinstance(annotation, type) and issubclass(annotation, strawberry.Info):
            return parameter.name
    # String annotations can't be inspected without resolving them
    return "info" if "info" in parameters else None


def relay_mutation(resolver: Callable | None = None, *, input_arg: str = "input") -> Any:
    """
    Wrap a mutation resolver so the input's ``client_mutation_id`` is kept
    for the payload.

    The wrapped resolver must take a ``strawberry.Info`` argument (found by
    annotation, or by the name ``info``) and the mutation input as
    ``input_arg``. Apply it below ``@strawberry.mutation``::

        @strawberry.mutation
        @relay_mutation
        async def create_board(self, info: strawberry.Info, input: CreateBoardInput)
            -> CreateBoardPayload: ...

    Raises:
        TypeError: If the resolver has no info or input parameter
    """

    def decorator(fn: Callable) -> Callable:
        info_arg = _info_parameter(fn)
        if info_arg is None:
            raise TypeError(f"{fn.__qualname__} needs a strawberry.Info parameter for relay_mutation")
        if input_arg not in inspect.signature(fn).parameters:
            raise TypeError(f"{fn.__qualname__} has no {input_arg!r} parameter for relay_mutation")

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            info = kwargs[info_arg]
            get_correlator(info.context).remember(info, _client_mutation_id(kwargs.get(input_arg)))

            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        return wrapper

    if resolver is not None:
        return decorator(resolver)
    return decorator


def mutation_input_base(mode: ClientMutationIdMode | None = None) -> type:
    """
    Base class for mutation inputs carrying ``clientMutationId``.

    The field is ``ID!`` in ``required`` mode, ``ID`` defaulting to null in
    ``optional`` mode and absent in ``omit`` mode. ``mode`` defaults to
    ``settings.client_mutation_id``; the correlator in use should agree.
    """
    mode = mode or settings.client_mutation_id
    if mode not in _input_bases:
        namespace: dict[str, Any] = {"__module__": __name__, "__annotations__": {}}
        if mode == "required":
            namespace["__annotations__"]["client_mutation_id"] = strawberry.ID
        elif mode == "optional":
            namespace["__annotations__"]["client_mutation_id"] = Optional[strawberry.ID]
            namespace["client_mutation_id"] = None
        _input_bases[mode] = strawberry.input(type("MutationInput", (), namespace))
    return _input_bases[mode]


def _required_client_mutation_id(self, info: strawberry.Info) -> strawberry.ID:
    return get_correlator(info.context).recall(info)


def _optional_client_mutation_id(self, info: strawberry.Info) -> strawberry.ID | None:
    return get_correlator(info.context).recall(info)


def mutation_payload_base(mode: ClientMutationIdMode | None = None) -> type:
    """
    Base type for mutation payloads echoing the client mutation ID.

    The field follows the same modes as ``mutation_input_base``: ``ID!``,
    nullable ``ID``, or no field at all.
    """
    mode = mode or settings.client_mutation_id
    if mode not in _payload_bases:
        namespace: dict[str, Any] = {"__module__": __name__}
        resolver = {
            "required": _required_client_mutation_id,
            "optional": _optional_client_mutation_id,
        }.get(mode)
        if resolver is not None:
            namespace["client_mutation_id"] = strawberry.field(
                resolver=resolver, description="The client mutation ID sent with the input."
            )
        _payload_bases[mode] = strawberry.type(type("MutationPayload", (), namespace))
    return _payload_bases[mode]


# Bases for the configured mode
MutationInput = mutation_input_base()
MutationPayload = mutation_payload_base()
