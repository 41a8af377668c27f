"""
Execution endpoints keyed by short id

GET  /v1/execute/{short_id} - Full action definition
PUT  /v1/execute/{short_id} - Display metadata only (legacy)
POST /v1/execute/{short_id} - Server-side transaction build for a caller
"""

import logging

from fastapi import APIRouter, Depends

from actionlink.actions.metadata import MetadataSynthesizer
from actionlink.actions.resolver import resolve_action
from actionlink.actions.store import ActionStore
from actionlink.actions.transactions import build_transaction
from actionlink.api.deps import get_action_store, get_chain_config, get_metadata_synthesizer
from actionlink.core.config import ChainConfig
from actionlink.models.actions import ActionDefinition, DisplayMetadata, TransactionDescriptor
from actionlink.models.requests import BuildTransactionRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/execute", tags=["Execute"])


@router.get("/{short_id}", response_model=ActionDefinition)
async def get_action(
    short_id: str,
    store: ActionStore = Depends(get_action_store)
):
    """Resolve a short id into the stored action definition."""
    return await resolve_action(store, short_id)


@router.put("/{short_id}", response_model=DisplayMetadata)
async def get_action_metadata(
    short_id: str,
    store: ActionStore = Depends(get_action_store),
    synthesizer: MetadataSynthesizer = Depends(get_metadata_synthesizer)
):
    """
    Display metadata for an action.

    Kept for older clients; new clients resolve the action and build
    metadata themselves (or use /v1/links/{segment}).
    """
    action = await resolve_action(store, short_id)
    return await synthesizer.synthesize(action)


@router.post(
    "/{short_id}",
    response_model=TransactionDescriptor,
    response_model_exclude_none=True
)
async def build_action_transaction(
    short_id: str,
    request: BuildTransactionRequest,
    store: ActionStore = Depends(get_action_store),
    config: ChainConfig = Depends(get_chain_config)
):
    """
    Build the unsigned transaction for a caller.

    For contexts that cannot build it client-side. value is returned as a
    base-10 string of the smallest unit.
    """
    action = await resolve_action(store, short_id)
    descriptor = build_transaction(action, request.user_address, config)

    logger.info(f"Built {action.action_type} transaction for {short_id} from {descriptor.from_}")
    return descriptor
