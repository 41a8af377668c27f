"""
FastAPI dependency providers

Routes get their collaborators from here so tests can swap them through
app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends, Request

from actionlink.actions.metadata import MetadataSynthesizer, TokenUriReader, Web3TokenUriReader
from actionlink.actions.store import ActionStore, SupabaseActionStore
from actionlink.core.config import ChainConfig, settings
from actionlink.core.supabase import get_supabase_client


def get_chain_config() -> ChainConfig:
    return settings.chain_config


def get_action_store() -> ActionStore:
    return SupabaseActionStore(get_supabase_client(), table=settings.ACTIONS_TABLE)


@lru_cache()
def get_token_uri_reader() -> TokenUriReader:
    return Web3TokenUriReader(settings.RPC_URL)


def get_metadata_synthesizer(
    request: Request,
    config: ChainConfig = Depends(get_chain_config),
    reader: TokenUriReader = Depends(get_token_uri_reader)
) -> MetadataSynthesizer:
    return MetadataSynthesizer(config, reader, request.app.state.http_client)


def get_base_url(request: Request) -> str:
    """Origin used in generated short links."""
    return (settings.PUBLIC_BASE_URL or str(request.base_url)).rstrip("/")
