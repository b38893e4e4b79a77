"""
Shareable URLs Backend - Identifier Validation Unit Tests
==========================================================

What:  Tests for UUID validation of record keys and metadata key batches.

What we test:
    ✅ Canonical UUIDs of any version 1-8 are accepted, in any case
    ✅ Nil and max UUIDs are accepted
    ✅ Non-canonical spellings, bad version/variant nibbles and non-strings are rejected
    ✅ validate_url_keys accepts empty lists and rejects anything else invalid
"""

import pytest

from shareable_urls.exceptions import InvalidIdentifier
from shareable_urls.validation import (
    INVALID_KEY_MESSAGE,
    INVALID_URL_KEYS_MESSAGE,
    is_valid_uuid,
    validate_record_key,
    validate_url_keys,
)

V4_KEY = "d9208390-216d-4304-b00d-9b4a913ea087"
V1_KEY = "6ba7b810-9dad-11d1-80b4-00c04fd430c8"


class TestIsValidUUID:
    """Structural UUID checks."""

    @pytest.mark.parametrize("value", [
        V4_KEY,
        V1_KEY,
        V4_KEY.upper(),
        "00000000-0000-0000-0000-000000000000",
        "ffffffff-ffff-ffff-ffff-ffffffffffff",
    ])
    def test_accepts_canonical_uuids(self, value):
        assert is_valid_uuid(value)

    @pytest.mark.parametrize("value", [
        "not-a-uuid-v4-key",
        "",
        "d9208390216d4304b00d9b4a913ea087",             # no hyphens
        "{d9208390-216d-4304-b00d-9b4a913ea087}",       # braces
        "urn:uuid:d9208390-216d-4304-b00d-9b4a913ea087",
        "d9208390-216d-9304-b00d-9b4a913ea087",         # version 9
        "d9208390-216d-0304-b00d-9b4a913ea087",         # version 0
        "d9208390-216d-4304-c00d-9b4a913ea087",         # variant c
        " d9208390-216d-4304-b00d-9b4a913ea087",
        "d9208390-216d-4304-b00d-9b4a913ea087\n",
    ])
    def test_rejects_malformed_strings(self, value):
        assert not is_valid_uuid(value)

    @pytest.mark.parametrize("value", [None, 123, ["d9208390-216d-4304-b00d-9b4a913ea087"], {}])
    def test_rejects_non_strings(self, value):
        assert not is_valid_uuid(value)


class TestValidateRecordKey:

    def test_returns_valid_key(self):
        assert validate_record_key(V4_KEY) == V4_KEY

    def test_missing_key_rejected(self):
        with pytest.raises(InvalidIdentifier) as exc_info:
            validate_record_key(None)
        assert exc_info.value.message == INVALID_KEY_MESSAGE
        assert exc_info.value.field == "key"


class TestValidateUrlKeys:

    def test_empty_list_is_valid(self):
        assert validate_url_keys([]) == []

    def test_all_valid_keys(self):
        assert validate_url_keys([V4_KEY, V1_KEY]) == [V4_KEY, V1_KEY]

    @pytest.mark.parametrize("value", [
        None,
        V4_KEY,
        {"0": V4_KEY},
        [V4_KEY, "not-a-uuid"],
        [V4_KEY, None],
    ])
    def test_invalid_batches_rejected(self, value):
        with pytest.raises(InvalidIdentifier, match="valid UUID link keys"):
            validate_url_keys(value)

    def test_error_message_matches_api_contract(self):
        with pytest.raises(InvalidIdentifier) as exc_info:
            validate_url_keys(["nope"])
        assert exc_info.value.message == INVALID_URL_KEYS_MESSAGE
