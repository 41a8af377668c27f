"""
Link resolution endpoint
GET /v1/links/{segment} - Resolve <action_type>-<short_id> for an action page
"""

import logging

from fastapi import APIRouter, Depends

from actionlink.actions.links import build_short_url, parse_link_segment
from actionlink.actions.metadata import MetadataSynthesizer
from actionlink.actions.resolver import resolve_action
from actionlink.actions.store import ActionStore
from actionlink.api.deps import get_action_store, get_base_url, get_metadata_synthesizer
from actionlink.core.exceptions import ActionNotFoundError
from actionlink.models.responses import ResolvedLinkResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/links", tags=["Links"])


@router.get("/{segment}", response_model=ResolvedLinkResponse)
async def resolve_link(
    segment: str,
    store: ActionStore = Depends(get_action_store),
    synthesizer: MetadataSynthesizer = Depends(get_metadata_synthesizer),
    base_url: str = Depends(get_base_url)
):
    """
    Everything an action page needs in one call.

    The action type in the link must match the stored action; a mismatch
    is reported as not found.
    """
    action_type, short_id = parse_link_segment(segment)
    action = await resolve_action(store, short_id)

    if action.action_type != action_type.value:
        logger.warning(
            f"Link type {action_type.value} does not match stored "
            f"{action.action_type} for {short_id}"
        )
        raise ActionNotFoundError(short_id)

    metadata = await synthesizer.synthesize(action)

    return ResolvedLinkResponse(
        action=action,
        metadata=metadata,
        short_url=build_short_url(base_url, action_type, short_id)
    )
