"""
Chain registry collaborator: IBC paths, asset lists and chain metadata.

Only typed projections of the registry documents are kept; unknown keys
are ignored because the registry grows new fields regularly. A response
that does not fit the projection is a ``CollaboratorError``.

Sources:

- IBC paths: ``<raw>/<ref>/_IBC/<a>-<b>.json`` from the cosmos
  chain-registry repository, one file per unordered chain pair with the
  names in lexicographic order.
- Asset lists and chain metadata: the cosmos.directory API.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from covenant_validator.clients.http import ApiClient
from covenant_validator.errors import AssetNotFoundError, CollaboratorError

logger = logging.getLogger(__name__)


class _Projection(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


# ---------------------------------------------------------------------------
# IBC path
# ---------------------------------------------------------------------------


class PathChainInfo(_Projection):
    chain_name: str = ""
    client_id: str = ""
    connection_id: str = ""


class ChannelPort(_Projection):
    channel_id: str = ""
    port_id: str = ""


class ChannelTags(_Projection):
    dex: str = ""
    preferred: bool = False
    properties: str = ""
    status: str = ""


class ChannelInfo(_Projection):
    chain_1: ChannelPort
    chain_2: ChannelPort
    ordering: str = ""
    version: str = ""
    tags: ChannelTags = Field(default_factory=ChannelTags)


class IBCPath(_Projection):
    chain_1: PathChainInfo
    chain_2: PathChainInfo
    channels: list[ChannelInfo] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Assets and chains
# ---------------------------------------------------------------------------


class DenomUnit(_Projection):
    denom: str = ""
    exponent: int = 0
    aliases: Optional[list[str]] = None


class AssetInfo(_Projection):
    name: str = ""
    description: str = ""
    symbol: str = ""
    denom: str = ""
    base: str = ""
    display: str = ""
    decimals: int = 0
    coingecko_id: str = ""
    denom_units: list[DenomUnit] = Field(default_factory=list)

    def matches(self, asset: str) -> bool:
        """Lookup by any identifier, skipping deprecated ``(old)`` entries."""
        if "(old)" in self.name or "(old)" in self.symbol:
            return False
        return asset in (self.name, self.symbol, self.denom, self.display, self.base)


class ChainInfo(_Projection):
    chain_name: str = ""
    denom: str = ""
    decimals: int = 0
    display: str = ""
    symbol: str = ""
    bech32_prefix: str = ""


def path_file_name(chain_a: str, chain_b: str) -> str:
    """Registry file for an unordered chain pair."""
    first, second = sorted((chain_a, chain_b))
    return f"_IBC/{first}-{second}.json"


class ChainRegistryClient:
    """Read-only access to the chain registry."""

    def __init__(
        self,
        api: ApiClient,
        raw_url: str = "https://raw.githubusercontent.com/cosmos/chain-registry",
        ref: str = "HEAD",
        directory_url: str = "https://chains.cosmos.directory",
    ) -> None:
        self.api = api
        self.raw_url = raw_url.rstrip("/")
        self.ref = ref
        self.directory_url = directory_url.rstrip("/")

    def get_path_info(self, chain_a: str, chain_b: str) -> IBCPath:
        url = f"{self.raw_url}/{self.ref}/{path_file_name(chain_a, chain_b)}"
        data = self.api.get_json(url)
        path = _project(IBCPath, data, url)
        logger.debug(
            "IBC path %s <-> %s: %d channel(s)",
            path.chain_1.chain_name,
            path.chain_2.chain_name,
            len(path.channels),
        )
        return path

    def get_chain_asset_info(self, chain_name: str, asset: str) -> AssetInfo:
        """Find ``asset`` (name, symbol, denom, display or base) on a chain.

        Raises:
            AssetNotFoundError: if no current entry matches.
        """
        url = f"{self.directory_url}/{chain_name}/assetlist"
        data = self.api.get_json(url)
        if not isinstance(data, dict) or not isinstance(data.get("assets"), list):
            raise CollaboratorError("Asset list response has no 'assets' array", url)
        for raw in data["assets"]:
            info = _project(AssetInfo, raw, url)
            if info.matches(asset):
                return info
        raise AssetNotFoundError(chain_name, asset)

    def get_chain_info(self, chain_name: str) -> ChainInfo:
        url = f"{self.directory_url}/{chain_name}"
        data = self.api.get_json(url)
        if not isinstance(data, dict) or not isinstance(data.get("chain"), dict):
            raise CollaboratorError("Chain response has no 'chain' object", url)
        return _project(ChainInfo, data["chain"], url)


def _project(model: type[_Projection], data: Any, url: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise CollaboratorError(
            f"Unexpected {model.__name__} shape: {e.error_count()} error(s)", url
        ) from e
