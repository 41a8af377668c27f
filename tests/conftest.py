"""
PyTest Configuration and Fixtures for ActionLink Tests

Provides:
- Environment defaults so Settings() loads without a .env file
- In-memory FakeActionStore standing in for the actions table
- Sample tip / NFT sale rows and a chain config
- Async test client using httpx.AsyncClient over ASGITransport (no server)

Usage:
    pytest tests/ -v
"""

import os
from typing import Any, Dict, List, Optional

# Settings() is built at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("PUBLIC_BASE_URL", "https://actions.example.com")

import httpx
import pytest
import pytest_asyncio

from actionlink.actions.metadata import MetadataSynthesizer, TokenUriReader
from actionlink.actions.store import ActionStore
from actionlink.core.config import ChainConfig
from actionlink.core.exceptions import ShortIdConflictError, StoreUnavailableError


# ============================================================================
# Test Constants
# ============================================================================

RECIPIENT = "0x52908400098527886E0F7030069857D2E4169EE7"
CONTRACT = "0x8617E340B3D01FA5F11F306F4090FD50E238070D"
CALLER = "0xde709f2102306220921060314715629080e2fb77"
# EIP-55 vector: lower-case input, mixed-case checksum form
MIXED_LOWER = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
MIXED_CHECKSUM = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

TIP_SHORT_ID = "tipAAAAAAAAA"
NFT_SHORT_ID = "nftBBBB-_BBB"


# ============================================================================
# Fakes
# ============================================================================

class FakeActionStore(ActionStore):
    """In-memory ActionStore with a unique short_id constraint"""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.insert_attempts: List[str] = []
        self.fail_reads = False
        self._next_id = 1
        for row in rows or []:
            self.rows[row["short_id"]] = dict(row)

    async def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        self.insert_attempts.append(row["short_id"])
        if row["short_id"] in self.rows:
            raise ShortIdConflictError(row["short_id"])
        stored = {**row, "id": self._next_id}
        self._next_id += 1
        self.rows[row["short_id"]] = stored
        return dict(stored)

    async def get_by_short_id(self, short_id: str) -> Optional[Dict[str, Any]]:
        if self.fail_reads:
            raise StoreUnavailableError("Failed to read action")
        row = self.rows.get(short_id)
        return dict(row) if row is not None else None

    async def health_check(self) -> None:
        if self.fail_reads:
            raise StoreUnavailableError("Action store unreachable")


class StaticTokenUriReader(TokenUriReader):
    """Returns a fixed pointer, or raises the given error"""

    def __init__(self, pointer: Optional[str] = None, error: Optional[Exception] = None):
        self.pointer = pointer
        self.error = error
        self.calls: List[tuple] = []

    async def token_uri(self, contract_address: str, token_id: str) -> str:
        self.calls.append((contract_address, token_id))
        if self.error is not None:
            raise self.error
        return self.pointer


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def chain_config() -> ChainConfig:
    return ChainConfig()


@pytest.fixture
def tip_row() -> Dict[str, Any]:
    return {
        "id": 1,
        "short_id": TIP_SHORT_ID,
        "action_type": "tip",
        "recipient_address": RECIPIENT,
        "tip_amount_eth": "1.5",
        "contract_address": None,
        "token_id": None,
        "price": None,
        "description": None,
        "created_at": "2024-05-01T12:00:00+00:00",
    }


@pytest.fixture
def nft_row() -> Dict[str, Any]:
    return {
        "id": 2,
        "short_id": NFT_SHORT_ID,
        "action_type": "nft_sale",
        "recipient_address": None,
        "tip_amount_eth": None,
        "contract_address": CONTRACT,
        "token_id": "42",
        "price": "0.25",
        "description": None,
        "created_at": "2024-05-01T12:00:00+00:00",
    }


@pytest.fixture
def store(tip_row, nft_row) -> FakeActionStore:
    return FakeActionStore([tip_row, nft_row])


@pytest.fixture
def metadata_document() -> Dict[str, Any]:
    return {
        "name": "Core Punk #42",
        "description": "A punk on Core",
        "image": "ipfs://QmImageCid/42.png",
    }


@pytest_asyncio.fixture
async def http_client():
    """httpx client whose requests never leave the process"""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest_asyncio.fixture
async def api_client(store, chain_config):
    """
    In-memory client for the FastAPI app.

    The store and metadata synthesizer are overridden; tokenURI reads fail
    so NFT pages use fallback copy.
    """
    from actionlink.api import deps
    from actionlink.main import app

    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404))) as fetcher:
        synthesizer = MetadataSynthesizer(
            chain_config,
            StaticTokenUriReader(error=RuntimeError("rpc offline")),
            fetcher
        )
        app.dependency_overrides[deps.get_action_store] = lambda: store
        app.dependency_overrides[deps.get_chain_config] = lambda: chain_config
        app.dependency_overrides[deps.get_metadata_synthesizer] = lambda: synthesizer

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client

        app.dependency_overrides.clear()
