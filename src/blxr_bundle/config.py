"""
Configuration management for the bloXroute bundle client.

Supports configuration via environment variables and .env files.
"""

from enum import Enum
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlockchainNetwork(str, Enum):
    """Networks accepted by the relay."""
    MAINNET = "Mainnet"            # Ethereum Mainnet
    BSC_MAINNET = "BSC-Mainnet"    # Binance Smart Chain Mainnet


class RelayConfig(BaseSettings):
    """
    Configuration settings for the bundle client.

    All settings can be configured via environment variables with the BLXR_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLXR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Relay settings
    api_key: Optional[str] = Field(
        default=None,
        description="bloXroute authorization header value"
    )
    network: BlockchainNetwork = Field(
        default=BlockchainNetwork.MAINNET,
        description="Network the bundles are submitted to"
    )
    relay_url: str = Field(
        default="https://api.blxrbdn.com",
        description="JSON-RPC endpoint of the relay"
    )
    trace_url: str = Field(
        default="https://tools.bloxroute.com",
        description="Base URL of the bundle trace tools"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every relay request"
    )

    # Node settings
    node_rpc_url: str = Field(
        default="http://localhost:8545",
        description="JSON-RPC endpoint of the chain node"
    )

    # Wallet settings
    wallet_private_key: Optional[str] = Field(
        default=None,
        description="Hex private key used to sign unsigned bundle transactions"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )


# Global config instance
_config: Optional[RelayConfig] = None


def get_config() -> RelayConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = RelayConfig()
    return _config


def set_config(config: RelayConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
