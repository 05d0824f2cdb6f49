"""
Global ID encoding and decoding.

A global ID is the URL-safe base64 encoding of ``"{typename}:{id}"``. Clients
must treat it as opaque; only this module interprets its contents.
"""

import base64
import binascii
from typing import NamedTuple

from .errors import InvalidIdentifier

DELIMITER = ":"

# Translation from the standard base64 alphabet to the URL-safe one
_STANDARD_TO_URLSAFE = str.maketrans("+/", "-_")


class GlobalID(NamedTuple):
    """Decoded global ID."""

    typename: str
    id: str

    def __str__(self) -> str:
        return encode_global_id(self.typename, self.id)


def encode_global_id(typename: str, id: object) -> str:
    """
    Encode a typename and local ID into an opaque global ID.

    Args:
        typename: Registered GraphQL type name, must not contain ``:``
        id: Local identifier, converted with ``str()``

    Returns:
        URL-safe base64 string

    Raises:
        ValueError: If the typename is empty or contains the delimiter,
            or the local ID is empty
    """
    if not typename or DELIMITER in typename:
        raise ValueError(f"Invalid typename for global ID: {typename!r}")

    local_id = str(id)
    if not local_id:
        raise ValueError(f"Empty local ID for type {typename!r}")

    raw = f"{typename}{DELIMITER}{local_id}".encode()
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_global_id(value: str) -> GlobalID:
    """
    Decode an opaque global ID.

    Both the URL-safe and the standard base64 alphabets are accepted, with
    or without padding. The payload is split at the first ``:`` so local IDs
    may themselves contain the delimiter.

    Raises:
        InvalidIdentifier: If the value is not valid base64 or does not
            contain two non-empty parts
    """
    if not isinstance(value, str) or not value:
        raise InvalidIdentifier(str(value), "empty or not a string")

    normalized = value.strip().translate(_STANDARD_TO_URLSAFE)
    if len(normalized) % 4 == 1:
        raise InvalidIdentifier(value, "bad base64 length")
    normalized += "=" * (-len(normalized) % 4)

    try:
        raw = base64.b64decode(normalized.encode("ascii"), altchars=b"-_", validate=True)
        payload = raw.decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise InvalidIdentifier(value, "not base64 encoded") from e

    typename, delimiter, local_id = payload.partition(DELIMITER)
    if not delimiter or not typename or not local_id:
        raise InvalidIdentifier(value, "expected '<typename>:<id>'")

    return GlobalID(typename, local_id)
