"""
Shareable URLs Backend - Identifier Validation
===============================================

What:  Structural UUID checks for record keys and batches of keys.
How:   A case-insensitive pattern for the canonical 8-4-4-4-12 hex form with an
       RFC 4122 variant nibble and a version nibble of 1-8, plus the nil and
       max UUIDs. Braced, URN and hyphen-less spellings are rejected.

Note:
    Error messages say "uuid v4" but any version passes. Clients already
    generate v4 keys; the looser check is kept for keys minted elsewhere.
"""

import re
from typing import Any, List

from shareable_urls.exceptions import InvalidIdentifier

UUID_PATTERN = re.compile(
    r"(?:[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}"
    r"|00000000-0000-0000-0000-000000000000"
    r"|ffffffff-ffff-ffff-ffff-ffffffffffff)",
    re.IGNORECASE,
)

INVALID_KEY_MESSAGE = "Provide a valid uuid v4 key."
INVALID_URL_KEYS_MESSAGE = "Provide an array with valid UUID link keys."


def is_valid_uuid(value: Any) -> bool:
    """Return True if `value` is a string in canonical UUID form."""
    return isinstance(value, str) and UUID_PATTERN.fullmatch(value) is not None


def validate_record_key(key: Any) -> str:
    """
    Validate the `key` of a creation request.

    Raises:
        InvalidIdentifier: key is missing, not a string, or not a UUID
    """
    if not is_valid_uuid(key):
        raise InvalidIdentifier(message=INVALID_KEY_MESSAGE, field="key")
    return key


def validate_url_keys(url_keys: Any) -> List[str]:
    """
    Validate the `urlKeys` of a metadata request.

    An empty list is valid. Every element must be a UUID string.

    Raises:
        InvalidIdentifier: urlKeys is not a list or holds a non-UUID element
    """
    if not isinstance(url_keys, list) or not all(is_valid_uuid(k) for k in url_keys):
        raise InvalidIdentifier(message=INVALID_URL_KEYS_MESSAGE, field="urlKeys")
    return url_keys
