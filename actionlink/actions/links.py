"""
Shareable link helpers

Links carry the action type and short id in one path segment:
    <base>/a/<actionType>-<shortId>
Action types never contain "-", short ids may, so segments split on the
first "-" only.
"""

from typing import Tuple

from actionlink.actions.short_id import is_valid_short_id
from actionlink.core.config import ChainConfig
from actionlink.core.exceptions import InvalidLinkError
from actionlink.models.actions import ActionType

LINK_PATH_PREFIX = "/a/"


def build_link_segment(action_type: ActionType, short_id: str) -> str:
    return f"{ActionType(action_type).value}-{short_id}"


def build_short_url(base_url: str, action_type: ActionType, short_id: str) -> str:
    """Full shareable URL for an action."""
    return f"{base_url.rstrip('/')}{LINK_PATH_PREFIX}{build_link_segment(action_type, short_id)}"


def parse_link_segment(segment: str) -> Tuple[ActionType, str]:
    """
    Split a link segment into action type and short id.

    Raises:
        InvalidLinkError: missing part, unknown type or bad short id
    """
    action_type, sep, short_id = (segment or "").partition("-")
    if not sep or not action_type or not short_id:
        raise InvalidLinkError(segment)

    try:
        parsed_type = ActionType(action_type)
    except ValueError:
        raise InvalidLinkError(segment)

    if not is_valid_short_id(short_id):
        raise InvalidLinkError(segment)

    return parsed_type, short_id


def explorer_tx_url(config: ChainConfig, tx_hash: str) -> str:
    """Block explorer page for a transaction."""
    return f"{config.explorer_url.rstrip('/')}/tx/{tx_hash}"
