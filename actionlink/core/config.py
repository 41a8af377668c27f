"""
Configuration management for the ActionLink API
Loads settings from environment variables
"""

from dataclasses import dataclass
from typing import List, Optional

from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class ChainConfig:
    """
    Chain-level settings handed to the transaction builder, metadata
    synthesizer and execution controller.

    Kept separate from Settings so those components never read the
    environment themselves.
    """
    chain_id: int = 1114
    chain_name: str = "Core Testnet"
    native_symbol: str = "CORE"
    native_decimals: int = 18
    rpc_url: str = "https://rpc.test2.btcs.network"
    explorer_url: str = "https://scan.test2.btcs.network"
    ipfs_gateway_url: str = "https://gateway.pinata.cloud/ipfs/"
    metadata_fetch_timeout: float = 10.0
    metadata_max_bytes: int = 1_048_576


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "ActionLink API"
    API_VERSION: str = "v1"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Public origin used in generated short links (falls back to request origin)
    PUBLIC_BASE_URL: Optional[str] = None

    CORS_ORIGINS: List[str] = ["*"]

    # Supabase
    SUPABASE_URL: str
    SUPABASE_SERVICE_ROLE_KEY: str
    ACTIONS_TABLE: str = "actions"

    # Short ids: 9 random bytes -> 12 base64url characters (72 bits)
    SHORT_ID_BYTES: int = 9
    SHORT_ID_MAX_ATTEMPTS: int = 5

    # Chain (Core Testnet)
    CHAIN_ID: int = 1114
    CHAIN_NAME: str = "Core Testnet"
    NATIVE_SYMBOL: str = "CORE"
    NATIVE_DECIMALS: int = 18
    RPC_URL: str = "https://rpc.test2.btcs.network"
    EXPLORER_URL: str = "https://scan.test2.btcs.network"
    IPFS_GATEWAY_URL: str = "https://gateway.pinata.cloud/ipfs/"
    METADATA_FETCH_TIMEOUT: float = 10.0
    METADATA_MAX_BYTES: int = 1_048_576

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def chain_config(self) -> ChainConfig:
        return ChainConfig(
            chain_id=self.CHAIN_ID,
            chain_name=self.CHAIN_NAME,
            native_symbol=self.NATIVE_SYMBOL,
            native_decimals=self.NATIVE_DECIMALS,
            rpc_url=self.RPC_URL,
            explorer_url=self.EXPLORER_URL.rstrip("/"),
            ipfs_gateway_url=self.IPFS_GATEWAY_URL,
            metadata_fetch_timeout=self.METADATA_FETCH_TIMEOUT,
            metadata_max_bytes=self.METADATA_MAX_BYTES,
        )


# Initialize settings
settings = Settings()
