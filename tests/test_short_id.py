"""
Tests for short id generation
"""

from unittest.mock import patch

import pytest

from actionlink.actions.short_id import (
    DEFAULT_SHORT_ID_BYTES,
    generate_short_id,
    is_valid_short_id,
    short_id_length,
)
from actionlink.core.exceptions import IdentifierGenerationError


class TestGenerateShortId:

    def test_default_is_twelve_urlsafe_characters(self):
        short_id = generate_short_id()

        assert len(short_id) == 12
        assert short_id_length(DEFAULT_SHORT_ID_BYTES) == 12
        assert is_valid_short_id(short_id)
        assert "=" not in short_id

    def test_ids_are_distinct(self):
        ids = {generate_short_id() for _ in range(500)}
        assert len(ids) == 500

    def test_encodes_random_bytes_as_base64url(self):
        with patch("actionlink.actions.short_id.secrets.token_bytes", return_value=b"\xfb\xff\xfe" * 3):
            assert generate_short_id() == "-__-" * 3

    @pytest.mark.parametrize("num_bytes", [4, 7, 13])
    def test_rejects_out_of_range_sizes(self, num_bytes):
        with pytest.raises(ValueError):
            generate_short_id(num_bytes)

    def test_randomness_failure_is_typed(self):
        with patch("actionlink.actions.short_id.secrets.token_bytes", side_effect=OSError("no entropy")):
            with pytest.raises(IdentifierGenerationError) as exc_info:
                generate_short_id()

        assert exc_info.value.error_code == "ID_GENERATION_FAILED"


class TestIsValidShortId:

    @pytest.mark.parametrize("value", ["abc", "A-b_9", "q3Xb9_L-aZ0k"])
    def test_accepts_urlsafe_ids(self, value):
        assert is_valid_short_id(value)

    @pytest.mark.parametrize("value", ["", "has space", "slash/id", "plus+id", "x" * 17, None, 12])
    def test_rejects_everything_else(self, value):
        assert not is_valid_short_id(value)
