"""
Metadata Synthesizer - display metadata for action pages

Tip actions get fixed copy. NFT sale actions are enriched from the token's
metadata document:
1. tokenURI(tokenId) read from the contract
2. ipfs:// pointers rewritten onto the configured gateway
3. JSON document fetched and name / description / image used

Enrichment is best-effort: any failure along that chain is logged and the
page falls back to copy built from token_id and price. synthesize() never
raises for a valid action.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import base64
import ipaddress
import json
import logging
from urllib.parse import unquote, urlsplit

import httpx
from web3 import AsyncWeb3, Web3

from actionlink.core.config import ChainConfig
from actionlink.core.exceptions import MetadataEnrichmentError, UnsupportedActionTypeError
from actionlink.models.actions import (
    ActionDefinition,
    DisplayMetadata,
    NftSaleFields,
    TipFields,
)

logger = logging.getLogger(__name__)

IPFS_SCHEME = "ipfs://"
DATA_JSON_PREFIX = "data:application/json"
ALLOWED_FETCH_SCHEMES = ("http", "https")

TIP_ICON = "Zap"
NFT_ICON = "Image"

# Minimal ERC-721 metadata ABI
ERC721_METADATA_ABI = [
    {
        "type": "function",
        "name": "tokenURI",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    }
]


def resolve_ipfs_url(url: Optional[str], gateway_url: str) -> Optional[str]:
    """
    Rewrite an ipfs:// link onto an HTTP gateway.

    Non-ipfs URLs are returned unchanged. Both ipfs://<cid>/path and
    ipfs://ipfs/<cid>/path are handled.
    """
    if not url or not url.startswith(IPFS_SCHEME):
        return url
    path = url[len(IPFS_SCHEME):]
    if path.startswith("ipfs/"):
        path = path[len("ipfs/"):]
    return f"{gateway_url.rstrip('/')}/{path.lstrip('/')}"


def check_fetch_url(url: str) -> None:
    """
    Refuse URLs the server must not fetch on a creator's behalf.

    Only http(s) is allowed, and literal IPs must be globally routable
    (no loopback, private, link-local or metadata-service addresses).

    Raises:
        MetadataEnrichmentError: stage "fetch"
    """
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    if parts.scheme not in ALLOWED_FETCH_SCHEMES or not host:
        raise MetadataEnrichmentError("fetch", f"Refusing to fetch {url}: unsupported URL")

    if host == "localhost" or host.endswith(".localhost"):
        raise MetadataEnrichmentError("fetch", f"Refusing to fetch {url}: local host")

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return
    if not address.is_global:
        raise MetadataEnrichmentError("fetch", f"Refusing to fetch {url}: non-public address")


class TokenUriReader(ABC):
    """Read-only chain call returning a token's metadata pointer"""

    @abstractmethod
    async def token_uri(self, contract_address: str, token_id: str) -> str:
        """Return tokenURI(token_id) from the contract."""


class Web3TokenUriReader(TokenUriReader):
    """TokenUriReader over an async JSON-RPC provider"""

    def __init__(self, rpc_url: str):
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))

    async def token_uri(self, contract_address: str, token_id: str) -> str:
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=ERC721_METADATA_ABI
        )
        return await contract.functions.tokenURI(int(token_id)).call()


# =============================================================================
# Fixed copy
# =============================================================================

def tip_metadata(action: TipFields, config: ChainConfig) -> DisplayMetadata:
    return DisplayMetadata(
        title="Send a Tip",
        description=action.description or (
            f"You are about to send a {action.tip_amount_eth} {config.native_symbol} tip."
        ),
        label="Send Tip",
        icon=TIP_ICON,
    )


def nft_fallback_metadata(action: NftSaleFields, config: ChainConfig) -> DisplayMetadata:
    """Deterministic NFT copy from token_id and price only."""
    return DisplayMetadata(
        title="Buy an NFT",
        description=(
            f"You are about to buy NFT #{action.token_id} "
            f"for {action.price} {config.native_symbol}."
        ),
        label="Buy NFT",
        icon=NFT_ICON,
    )


def _text(document: Dict[str, Any], key: str) -> Optional[str]:
    value = document.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class MetadataSynthesizer:
    """
    Builds DisplayMetadata for actions.

    Args:
        config: Chain settings (symbol, gateway, fetch timeout)
        token_uri_reader: Chain read interface for tokenURI
        http_client: Shared client for off-chain metadata documents
    """

    def __init__(
        self,
        config: ChainConfig,
        token_uri_reader: TokenUriReader,
        http_client: httpx.AsyncClient
    ):
        self.config = config
        self.token_uri_reader = token_uri_reader
        self.http_client = http_client

    async def synthesize(self, action: ActionDefinition) -> DisplayMetadata:
        """
        Display metadata for an action.

        Raises:
            UnsupportedActionTypeError: action is neither variant
        """
        if isinstance(action, TipFields):
            return tip_metadata(action, self.config)

        if isinstance(action, NftSaleFields):
            try:
                return await self._enrich_nft(action)
            except MetadataEnrichmentError as e:
                logger.warning(
                    f"NFT metadata enrichment failed at {e.stage} for "
                    f"{action.contract_address}#{action.token_id}: {e.message}"
                )
            except Exception as e:
                logger.warning(
                    f"NFT metadata enrichment failed for "
                    f"{action.contract_address}#{action.token_id}: {e}",
                    exc_info=True
                )
            return nft_fallback_metadata(action, self.config)

        raise UnsupportedActionTypeError(getattr(action, "action_type", type(action).__name__))

    async def _enrich_nft(self, action: NftSaleFields) -> DisplayMetadata:
        pointer = await self._read_token_uri(action)
        document = await self._load_document(pointer)

        image = resolve_ipfs_url(_text(document, "image"), self.config.ipfs_gateway_url)

        return DisplayMetadata(
            title=_text(document, "name") or "Buy an NFT",
            description=(
                _text(document, "description")
                or action.description
                or f"You are about to buy NFT #{action.token_id}"
            ),
            label="Buy NFT",
            icon=image or NFT_ICON,
        )

    async def _read_token_uri(self, action: NftSaleFields) -> str:
        try:
            pointer = await self.token_uri_reader.token_uri(action.contract_address, action.token_id)
        except Exception as e:
            raise MetadataEnrichmentError("token_uri", f"tokenURI call failed: {e}") from e

        if not isinstance(pointer, str) or not pointer.strip():
            raise MetadataEnrichmentError("token_uri", "tokenURI returned an empty pointer")
        return pointer.strip()

    async def _load_document(self, pointer: str) -> Dict[str, Any]:
        if pointer.startswith(DATA_JSON_PREFIX):
            document = self._decode_data_uri(pointer)
        else:
            url = resolve_ipfs_url(pointer, self.config.ipfs_gateway_url)
            check_fetch_url(url)
            try:
                body = await self._fetch(url)
                document = json.loads(body)
            except httpx.HTTPError as e:
                raise MetadataEnrichmentError("fetch", f"Could not fetch {url}: {e}") from e
            except ValueError as e:
                raise MetadataEnrichmentError("parse", f"Metadata at {url} is not JSON") from e

        if not isinstance(document, dict):
            raise MetadataEnrichmentError("parse", "Metadata document is not a JSON object")
        return document

    async def _fetch(self, url: str) -> bytes:
        """GET a document, refusing bodies over metadata_max_bytes."""
        limit = self.config.metadata_max_bytes
        body = bytearray()
        async with self.http_client.stream(
            "GET",
            url,
            timeout=self.config.metadata_fetch_timeout,
            follow_redirects=False
        ) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                body.extend(chunk)
                if len(body) > limit:
                    raise MetadataEnrichmentError(
                        "fetch", f"Metadata at {url} exceeds {limit} bytes"
                    )
        return bytes(body)

    @staticmethod
    def _decode_data_uri(pointer: str) -> Any:
        header, sep, payload = pointer.partition(",")
        if not sep:
            raise MetadataEnrichmentError("parse", "Malformed data URI")
        try:
            if header.endswith(";base64"):
                return json.loads(base64.b64decode(payload))
            return json.loads(unquote(payload))
        except ValueError as e:
            raise MetadataEnrichmentError("parse", "Data URI is not JSON") from e
