"""
Short id generation for action links

Short ids are random bytes encoded as unpadded base64url. With the default
9 bytes that is 72 bits of entropy in exactly 12 characters. Uniqueness is
enforced by the store's unique constraint, not here.
"""

import base64
import re
import secrets
import logging

from actionlink.core.exceptions import IdentifierGenerationError

logger = logging.getLogger(__name__)

DEFAULT_SHORT_ID_BYTES = 9
MAX_SHORT_ID_LENGTH = 16

SHORT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,%d}" % MAX_SHORT_ID_LENGTH)


def short_id_length(num_bytes: int = DEFAULT_SHORT_ID_BYTES) -> int:
    """Length of the unpadded base64url encoding of num_bytes."""
    return (num_bytes * 4 + 2) // 3


def generate_short_id(num_bytes: int = DEFAULT_SHORT_ID_BYTES) -> str:
    """
    Generate a URL-safe short id.

    Args:
        num_bytes: Random bytes to draw; 8 is the minimum (64 bits) and the
            encoded length must stay within MAX_SHORT_ID_LENGTH

    Returns:
        Unpadded base64url string of short_id_length(num_bytes) characters

    Raises:
        IdentifierGenerationError: If the OS randomness source fails
    """
    if num_bytes < 8 or short_id_length(num_bytes) > MAX_SHORT_ID_LENGTH:
        raise ValueError(f"num_bytes must be between 8 and 12, got {num_bytes}")

    try:
        raw = secrets.token_bytes(num_bytes)
    except (OSError, NotImplementedError) as e:
        logger.critical(f"Randomness source unavailable: {e}")
        raise IdentifierGenerationError(f"Randomness source unavailable: {e}") from e

    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def is_valid_short_id(value: str) -> bool:
    """Check that a value only uses the URL-safe alphabet and fits the length bound."""
    return isinstance(value, str) and SHORT_ID_PATTERN.fullmatch(value) is not None
