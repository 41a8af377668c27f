"""
Action creation endpoint
POST /v1/actions - Create an action and return its short link
"""

from typing import Any, Dict
import logging

from fastapi import APIRouter, Body, Depends, status

from actionlink.actions.creation import create_action
from actionlink.actions.links import build_short_url
from actionlink.actions.store import ActionStore
from actionlink.api.deps import get_action_store, get_base_url
from actionlink.core.config import settings
from actionlink.models.actions import ActionType
from actionlink.models.responses import CreateActionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/actions", tags=["Actions"])


@router.post("", response_model=CreateActionResponse, status_code=status.HTTP_201_CREATED)
async def create_action_link(
    payload: Dict[str, Any] = Body(
        ...,
        examples=[
            {
                "action_type": "tip",
                "recipient_address": "0x52908400098527886E0F7030069857D2E4169EE7",
                "tip_amount_eth": "0.5",
                "description": "Thanks for the stream!"
            },
            {
                "action_type": "nft_sale",
                "contract_address": "0x8617E340B3D01FA5F11F306F4090FD50E238070D",
                "token_id": "7",
                "price": "12.5"
            }
        ]
    ),
    store: ActionStore = Depends(get_action_store),
    base_url: str = Depends(get_base_url)
):
    """
    Create a tip or NFT sale action.

    Validates the variant fields, assigns a short id (regenerating on
    collision), persists the action and returns the shareable link
    `<origin>/a/<action_type>-<short_id>`.
    """
    action = await create_action(
        store,
        payload,
        id_bytes=settings.SHORT_ID_BYTES,
        max_attempts=settings.SHORT_ID_MAX_ATTEMPTS
    )

    return CreateActionResponse(
        id=action.id,
        short_id=action.short_id,
        short_url=build_short_url(base_url, ActionType(action.action_type), action.short_id)
    )
