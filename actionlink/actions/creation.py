"""
Action creation - validate, assign a short id, persist

A short id collision is recovered here by drawing a new id; callers never
see it unless every attempt collides.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
import logging

from actionlink.actions.resolver import parse_action_record
from actionlink.actions.short_id import DEFAULT_SHORT_ID_BYTES, generate_short_id
from actionlink.actions.store import ActionStore
from actionlink.actions.transactions import normalize_address
from actionlink.core.exceptions import (
    InvalidActionShapeError,
    ShortIdConflictError,
    StoreUnavailableError,
)
from actionlink.models.actions import ActionDefinition, NftSaleFields, TipFields

logger = logging.getLogger(__name__)

# Assigned by the service, never accepted from a creator
SERVER_ASSIGNED_COLUMNS = ("id", "short_id", "created_at")


def validate_new_action(payload: Any) -> ActionDefinition:
    """
    Validate a creation payload.

    Raises:
        UnsupportedActionTypeError, InvalidActionShapeError, InvalidAddressError
    """
    if not isinstance(payload, dict):
        raise InvalidActionShapeError("Action payload must be an object")

    submitted = {k: v for k, v in payload.items() if k not in SERVER_ASSIGNED_COLUMNS}
    action = parse_action_record(submitted)

    if isinstance(action, TipFields):
        normalize_address(action.recipient_address, "recipient_address")
    elif isinstance(action, NftSaleFields):
        normalize_address(action.contract_address, "contract_address")

    return action


async def create_action(
    store: ActionStore,
    payload: Any,
    id_bytes: int = DEFAULT_SHORT_ID_BYTES,
    max_attempts: int = 5,
    generate: Callable[[int], str] = generate_short_id,
    now: Optional[datetime] = None
) -> ActionDefinition:
    """
    Create and persist a new action.

    Args:
        store: Action store to write to
        payload: Creator-submitted action object (tip or nft_sale shape)
        id_bytes: Random bytes per short id
        max_attempts: Short ids to try before giving up
        generate: Short id generator
        now: Creation time (defaults to current UTC time)

    Returns:
        The stored action, with id, short_id and created_at populated

    Raises:
        UnsupportedActionTypeError, InvalidActionShapeError, InvalidAddressError:
            payload rejected
        IdentifierGenerationError: randomness source failed
        StoreUnavailableError: store failed or every attempt collided
    """
    action = validate_new_action(payload)

    row: Dict[str, Any] = action.model_dump(
        mode="json",
        exclude=set(SERVER_ASSIGNED_COLUMNS)
    )
    row["created_at"] = (now or datetime.now(timezone.utc)).isoformat()

    for attempt in range(1, max_attempts + 1):
        row["short_id"] = generate(id_bytes)
        try:
            stored = await store.insert(row)
        except ShortIdConflictError:
            logger.warning(
                f"short_id collision ({attempt}/{max_attempts}), regenerating"
            )
            continue

        logger.info(
            f"Created {row['action_type']} action {stored.get('id')} "
            f"with short_id {row['short_id']}"
        )
        return parse_action_record({**row, **stored})

    logger.error(f"Could not allocate a unique short_id after {max_attempts} attempts")
    raise StoreUnavailableError("Could not allocate a unique short id")
