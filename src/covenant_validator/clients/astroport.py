"""
Astroport pair and pool smart queries through the Neutron LCD.

Queries are sent as ``GET <lcd>/cosmwasm/wasm/v1/contract/<addr>/smart/<q>``
where ``q`` is the URL-safe base64 encoding of the JSON query message.
The LCD wraps the contract response in ``{"data": ...}``.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from covenant_validator.clients.http import ApiClient, is_uint_string
from covenant_validator.errors import CollaboratorError

logger = logging.getLogger(__name__)

COSMWASM_CONTRACT_API = "cosmwasm/wasm/v1/contract"
COSMWASM_SMART_QUERY = "smart"


class _Projection(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class NativeToken(_Projection):
    denom: str


class Token(_Projection):
    contract_addr: str


class PoolAssetInfo(_Projection):
    native_token: Optional[NativeToken] = None
    token: Optional[Token] = None

    @property
    def denom(self) -> str:
        """Native denom, or the CW20 contract address for token assets."""
        if self.native_token is not None:
            return self.native_token.denom
        if self.token is not None:
            return self.token.contract_addr
        return ""


class PairTypeInfo(_Projection):
    xyk: Optional[dict[str, Any]] = None
    stable: Optional[dict[str, Any]] = None
    custom: Optional[str] = None

    def __str__(self) -> str:
        if self.xyk is not None:
            return "xyk"
        if self.stable is not None:
            return "stable"
        if self.custom is not None:
            return f"custom-{self.custom}"
        return "unknown"


class PairInfo(_Projection):
    contract_addr: str = ""
    liquidity_token: str = ""
    pair_type: PairTypeInfo = Field(default_factory=PairTypeInfo)
    asset_infos: list[PoolAssetInfo] = Field(default_factory=list)


class PoolAsset(_Projection):
    amount: str
    info: PoolAssetInfo

    @property
    def atomics(self) -> int:
        return int(self.amount)


class PoolInfo(_Projection):
    assets: list[PoolAsset] = Field(default_factory=list)
    total_share: str = "0"


def smart_query_path(query: dict[str, Any]) -> str:
    encoded = json.dumps(query, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(encoded).decode("ascii")


class AstroportClient:
    """Read-only Astroport pair queries."""

    def __init__(self, api: ApiClient, lcd_url: str) -> None:
        self.api = api
        self.lcd_url = lcd_url.rstrip("/")

    def _smart_query(self, contract_addr: str, query: dict[str, Any]) -> tuple[Any, str]:
        url = (
            f"{self.lcd_url}/{COSMWASM_CONTRACT_API}/{contract_addr}/"
            f"{COSMWASM_SMART_QUERY}/{smart_query_path(query)}"
        )
        body = self.api.get_json(url)
        if not isinstance(body, dict) or "data" not in body:
            raise CollaboratorError("Smart query response has no 'data'", url)
        return body["data"], url

    def get_pair_info(self, pool_addr: str) -> PairInfo:
        data, url = self._smart_query(pool_addr, {"pair": {}})
        try:
            return PairInfo.model_validate(data)
        except ValidationError as e:
            raise CollaboratorError("Unexpected pair info shape", url) from e

    def get_pool_info(self, pool_addr: str) -> PoolInfo:
        data, url = self._smart_query(pool_addr, {"pool": {}})
        try:
            pool = PoolInfo.model_validate(data)
            for asset in pool.assets:
                if not is_uint_string(asset.amount):
                    raise CollaboratorError(f"Non-integer pool amount {asset.amount!r}", url)
            return pool
        except ValidationError as e:
            raise CollaboratorError("Unexpected pool info shape", url) from e
