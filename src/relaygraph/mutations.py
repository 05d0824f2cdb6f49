"""
Client mutation ID correlation.

A mutation field stores the client's token under its own execution path
before the mutation runs. The payload's ``clientMutationId`` field sits one
level below that path and reads the token back from its parent position.
Aliased siblings have distinct paths, so they never see each other's token.
"""

from typing import Any

from graphql.pyutils import Path

from .config import ClientMutationIdMode, settings
from .context import get_request_scope
from .errors import CorrelationKeyMissing
from .logging import get_logger

logger = get_logger(__name__)


def path_key(path: Path | None) -> tuple:
    """Hashable key for a position in the response tree."""
    return tuple(path.as_list()) if path is not None else ()


class MutationCorrelator:
    """Stores and returns client mutation IDs per mutation field position."""

    def __init__(self, mode: ClientMutationIdMode | None = None):
        self.mode: ClientMutationIdMode = mode or settings.client_mutation_id

    @property
    def enabled(self) -> bool:
        return self.mode != "omit"

    def remember(self, info: Any, token: Any) -> None:
        """
        Record the client mutation ID for the mutation field being resolved.

        Raises:
            ValueError: If the token is missing and the mode is ``required``
        """
        if not self.enabled:
            return
        if token is None and self.mode == "required":
            raise ValueError("clientMutationId is required")

        key = path_key(info.path)
        scope = get_request_scope(info.context)
        scope.correlations[key] = token
        scope.logger.debug("Stored clientMutationId", path=key)

    def recall(self, info: Any) -> Any:
        """
        Return the client mutation ID for the payload being resolved.

        ``info`` belongs to a field of the payload object, whose parent
        position is the mutation field.

        Raises:
            CorrelationKeyMissing: If nothing was stored for that position
        """
        if not self.enabled:
            return None

        key = path_key(info.path.prev)
        correlations = get_request_scope(info.context).correlations
        if key not in correlations:
            logger.error("clientMutationId lookup failed", path=key)
            raise CorrelationKeyMissing(key)
        return correlations[key]


# Correlator configured from settings
correlator = MutationCorrelator()
