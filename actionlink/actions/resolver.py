"""
Action Resolver - short id -> validated, typed action

Resolution is read-only. A stored row is accepted only if its action_type
is known and exactly the columns of that variant are populated.
"""

from typing import Any, Dict, List
import logging

from pydantic import ValidationError

from actionlink.actions.short_id import is_valid_short_id
from actionlink.actions.store import ActionStore
from actionlink.core.exceptions import (
    ActionNotFoundError,
    InvalidActionShapeError,
    UnsupportedActionTypeError,
)
from actionlink.models.actions import (
    ActionDefinition,
    ActionType,
    VARIANT_COLUMNS,
    VARIANT_MODELS,
)

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _foreign_columns(action_type: ActionType) -> List[str]:
    return [
        column
        for other_type, columns in VARIANT_COLUMNS.items()
        if other_type is not action_type
        for column in columns
    ]


def _validation_details(error: ValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


def parse_action_type(value: Any) -> ActionType:
    """
    Map a raw action_type value onto ActionType.

    Raises:
        UnsupportedActionTypeError: for anything other than tip / nft_sale
    """
    if isinstance(value, ActionType):
        return value
    try:
        return ActionType(value)
    except (ValueError, TypeError):
        raise UnsupportedActionTypeError(value)


def parse_action_record(record: Any) -> ActionDefinition:
    """
    Validate a raw action record (stored row or creation payload).

    Args:
        record: Mapping with action_type and the variant's columns

    Returns:
        TipAction or NftSaleAction

    Raises:
        UnsupportedActionTypeError: unknown action_type
        InvalidActionShapeError: wrong or invalid variant columns
    """
    if not isinstance(record, dict):
        raise InvalidActionShapeError("Action record must be an object")

    action_type = parse_action_type(record.get("action_type"))

    foreign_columns = _foreign_columns(action_type)
    populated = [column for column in foreign_columns if not _is_empty(record.get(column))]
    if populated:
        raise InvalidActionShapeError(
            f"Columns not allowed for action type '{action_type.value}'",
            details={"columns": populated}
        )

    data = {key: value for key, value in record.items() if key not in foreign_columns}
    data["action_type"] = action_type.value

    try:
        return VARIANT_MODELS[action_type].model_validate(data)
    except ValidationError as e:
        raise InvalidActionShapeError(
            f"Invalid fields for action type '{action_type.value}'",
            details={"errors": _validation_details(e)}
        ) from e


async def resolve_action(store: ActionStore, short_id: str) -> ActionDefinition:
    """
    Resolve a public short id into a typed action.

    Args:
        store: Action store to read from
        short_id: Public short id from the link

    Returns:
        TipAction or NftSaleAction

    Raises:
        ActionNotFoundError: unknown (or malformed) short id
        UnsupportedActionTypeError / InvalidActionShapeError: bad stored row
        StoreUnavailableError: store read failed
    """
    if not is_valid_short_id(short_id):
        raise ActionNotFoundError(short_id)

    row = await store.get_by_short_id(short_id)
    if row is None:
        logger.info(f"Action not found for short_id {short_id}")
        raise ActionNotFoundError(short_id)

    try:
        return parse_action_record(row)
    except (UnsupportedActionTypeError, InvalidActionShapeError) as e:
        logger.error(f"Stored action {short_id} failed validation: {e.message}")
        raise
