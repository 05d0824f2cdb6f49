"""
Error types raised by the relay layer
"""


class RelayError(Exception):
    """Base exception for relay operations."""

    pass


class InvalidIdentifier(RelayError, ValueError):
    """A global ID could not be decoded."""

    def __init__(self, value: str, reason: str | None = None):
        self.value = value
        self.reason = reason
        message = f"Invalid global ID: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnsupportedNodeType(RelayError):
    """A type was asked to load nodes but has no loading strategy."""

    def __init__(self, typename: str):
        self.typename = typename
        super().__init__(f"{typename} does not support loading by id")


class TypeResolutionFailure(RelayError):
    """No concrete schema type could be determined for a Node value."""

    def __init__(self, value: object, abstract_type: str = "Node"):
        self.value = value
        self.abstract_type = abstract_type
        super().__init__(
            f"Could not resolve the concrete type of {type(value).__name__!r} "
            f"for abstract type {abstract_type!r}"
        )


class CorrelationKeyMissing(RelayError, LookupError):
    """No client mutation ID was stored for a mutation payload's position."""

    def __init__(self, key: tuple):
        self.key = key
        path = ".".join(str(part) for part in key)
        super().__init__(f"No clientMutationId recorded for mutation at path {path!r}")


class InvalidCursor(RelayError, ValueError):
    """A pagination cursor could not be decoded."""

    def __init__(self, cursor: str):
        self.cursor = cursor
        super().__init__(f"Invalid cursor: {cursor!r}")
