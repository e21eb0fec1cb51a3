"""
Centralized configuration for the covenant validator.

Uses Pydantic BaseSettings for environment variable integration
and validation. All collaborator endpoints are defined here so tests
and private deployments can point the validator elsewhere.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (COVENANT_VALIDATOR_*)
3. .env file
4. Default values

Example:
    from covenant_validator.config import get_config

    config = get_config()
    print(config.neutron_lcd_url)  # From COVENANT_VALIDATOR_NEUTRON_LCD_URL or default

    # Override at runtime
    config = get_config(release_tag="v0.1.1")
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from covenant_validator import __version__
from covenant_validator.types import DEFAULT_RELEASE_TAG


class ValidatorConfig(BaseSettings):
    """
    Central configuration for the covenant validator.

    All settings can be overridden via environment variables
    prefixed with COVENANT_VALIDATOR_.

    Example:
        export COVENANT_VALIDATOR_NEUTRON_RPC_URL=https://rpc.example.org
        export COVENANT_VALIDATOR_LOG_LEVEL=debug
    """

    model_config = SettingsConfigDict(
        env_prefix="COVENANT_VALIDATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Chain registry
    chain_registry_raw_url: str = Field(
        default="https://raw.githubusercontent.com/cosmos/chain-registry",
        description="Raw file base URL of the cosmos chain-registry repository",
    )
    chain_registry_ref: str = Field(
        default="HEAD",
        description="Git ref of the chain-registry used for IBC path files",
    )
    cosmos_directory_url: str = Field(
        default="https://chains.cosmos.directory",
        description="Chain metadata and asset list API",
    )

    # Neutron endpoints
    neutron_lcd_url: str = Field(
        default="https://rest-kralum.neutron-1.neutron.org",
        description="Neutron REST (LCD) endpoint for CosmWasm smart queries",
    )
    neutron_rpc_url: str = Field(
        default="https://neutron-tw-rpc.polkachu.com:443",
        description="Neutron Tendermint RPC endpoint for the latest block",
    )

    # Release manifest
    release_manifest_url: str = Field(
        default=(
            "https://github.com/timewave-computer/covenants/releases/download/"
            "{tag}/contract_code_ids.txt"
        ),
        description="Code-id manifest URL template, formatted with the release tag",
    )
    release_tag: str = Field(
        default=DEFAULT_RELEASE_TAG,
        description="Pinned covenants release whose code ids are expected",
    )

    # HTTP
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout for collaborator calls",
    )
    user_agent: str = Field(
        default=f"covenant-validator/{__version__}",
        description="User-Agent header sent to collaborators",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        description="Logging level for the validator",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format (json for log shippers, text for console)",
    )

    @field_validator(
        "chain_registry_raw_url",
        "cosmos_directory_url",
        "neutron_lcd_url",
        "neutron_rpc_url",
    )
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with ``/`` by the clients."""
        return v.rstrip("/")


# Global singleton
_config: Optional[ValidatorConfig] = None


def get_config(**overrides) -> ValidatorConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        ValidatorConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = ValidatorConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
