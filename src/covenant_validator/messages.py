"""
Pydantic v2 models for covenant instantiation messages.

The three supported messages (single-party POL, two-party POL, swap) are
parsed strictly: all models use ``extra="forbid"`` and are frozen, so a
typo in the JSON payload is rejected at load time instead of silently
skipping a check.

CosmWasm conventions followed here:

- ``Uint128`` / ``Uint64`` travel as decimal strings (plain integers are
  accepted too) and are held as ``int``.
- ``Decimal`` travels as a decimal string with at most 18 fractional
  digits and is held as ``decimal.Decimal``.
- Rust enums serialize as a single-key object (``{"interchain": {...}}``);
  they are modeled as one optional attribute per variant plus a
  validator that requires exactly one.

Usage::

    from covenant_validator.messages import TwoPartyPolInstantiateMsg

    msg = TwoPartyPolInstantiateMsg.model_validate(json.loads(text))
    party_a = msg.party_a_config.party
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from covenant_validator.numeric import UINT128_MAX

_UINT64_MAX = 2 ** 64 - 1
_DECIMAL_RE = re.compile(r"^\d+(\.\d{1,18})?$", re.ASCII)


def _parse_uint(value: Any, maximum: int, type_name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{type_name} must be an integer or a digit string")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        parsed = int(value)
    else:
        raise ValueError(f"{type_name} must be an integer or a digit string, got {value!r}")
    if parsed < 0 or parsed > maximum:
        raise ValueError(f"{type_name} out of range: {parsed}")
    return parsed


def _parse_uint128(value: Any) -> int:
    return _parse_uint(value, UINT128_MAX, "Uint128")


def _parse_uint64(value: Any) -> int:
    return _parse_uint(value, _UINT64_MAX, "Uint64")


def _parse_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if not isinstance(value, str) or not _DECIMAL_RE.match(value):
        raise ValueError(
            f"Decimal must be a non-negative decimal string with at most 18 places, got {value!r}"
        )
    return Decimal(value)


Uint128 = Annotated[int, BeforeValidator(_parse_uint128)]
Uint64 = Annotated[int, BeforeValidator(_parse_uint64)]
FixedDecimal = Annotated[Decimal, BeforeValidator(_parse_decimal)]


class _Msg(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


def _exactly_one(model: BaseModel, variants: tuple[str, ...]) -> str:
    present = [name for name in variants if getattr(model, name) is not None]
    if len(present) != 1:
        raise ValueError(
            f"{type(model).__name__} needs exactly one of {', '.join(variants)}; got {present or 'none'}"
        )
    return present[0]


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------


class Coin(_Msg):
    denom: str
    amount: Uint128


class Timeouts(_Msg):
    ica_timeout: Uint64
    ibc_transfer_timeout: Uint64


class NeverExpires(_Msg):
    pass


class Expiration(_Msg):
    """``cw_utils::Expiration``: block height, unix time (nanos) or never."""

    at_height: Optional[Uint64] = None
    at_time: Optional[Uint64] = None
    never: Optional[NeverExpires] = None

    @model_validator(mode="after")
    def _one_variant(self) -> "Expiration":
        _exactly_one(self, ("at_height", "at_time", "never"))
        return self

    @property
    def kind(self) -> str:
        return _exactly_one(self, ("at_height", "at_time", "never"))

    @property
    def at_time_seconds(self) -> Optional[int]:
        if self.at_time is None:
            return None
        return self.at_time // 1_000_000_000

    def __str__(self) -> str:
        if self.at_height is not None:
            return f"height {self.at_height}"
        if self.at_time is not None:
            return f"time {self.at_time_seconds}"
        return "never"


class PacketForwardMiddlewareConfig(_Msg):
    local_to_hop_chain_channel_id: str
    hop_to_destination_chain_channel_id: str
    hop_chain_receiver_address: str


class InterchainCovenantParty(_Msg):
    party_receiver_addr: str
    party_chain_connection_id: str
    ibc_transfer_timeout: Uint64
    party_to_host_chain_channel_id: str
    host_to_party_chain_channel_id: str
    remote_chain_denom: str
    addr: str
    native_denom: str
    contribution: Coin
    denom_to_pfm_map: dict[str, PacketForwardMiddlewareConfig] = Field(default_factory=dict)
    fallback_address: Optional[str] = None


class NativeCovenantParty(_Msg):
    party_receiver_addr: str
    native_denom: str
    addr: str
    contribution: Coin


class CovenantPartyConfig(_Msg):
    interchain: Optional[InterchainCovenantParty] = None
    native: Optional[NativeCovenantParty] = None

    @model_validator(mode="after")
    def _one_variant(self) -> "CovenantPartyConfig":
        _exactly_one(self, ("interchain", "native"))
        return self

    @property
    def party(self) -> Union[InterchainCovenantParty, NativeCovenantParty]:
        return self.interchain if self.interchain is not None else self.native  # type: ignore[return-value]

    @property
    def is_interchain(self) -> bool:
        return self.interchain is not None


class PoolPriceConfig(_Msg):
    expected_spot_price: FixedDecimal
    acceptable_price_spread: FixedDecimal


class PairType(_Msg):
    """Astroport pair type: ``{"xyk": {}}``, ``{"stable": {}}`` or ``{"custom": "name"}``."""

    xyk: Optional[dict[str, Any]] = None
    stable: Optional[dict[str, Any]] = None
    custom: Optional[str] = None

    @model_validator(mode="after")
    def _one_variant(self) -> "PairType":
        _exactly_one(self, ("xyk", "stable", "custom"))
        return self

    def __str__(self) -> str:
        if self.xyk is not None:
            return "xyk"
        if self.stable is not None:
            return "stable"
        return f"custom-{self.custom}"


class SingleSideLpLimits(_Msg):
    asset_a_limit: Uint128
    asset_b_limit: Uint128


class AstroportLiquidPoolerConfig(_Msg):
    pool_pair_type: PairType
    pool_address: str
    asset_a_denom: str
    asset_b_denom: str
    single_side_lp_limits: SingleSideLpLimits


class LiquidPoolerConfig(_Msg):
    astroport: Optional[AstroportLiquidPoolerConfig] = None
    osmosis: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def _one_variant(self) -> "LiquidPoolerConfig":
        _exactly_one(self, ("astroport", "osmosis"))
        return self


class SplitConfig(_Msg):
    receivers: dict[str, FixedDecimal]


# ---------------------------------------------------------------------------
# Single-party POL
# ---------------------------------------------------------------------------


class SinglePartyContractCodes(_Msg):
    ibc_forwarder_code: Uint64
    holder_code: Uint64
    clock_code: Uint64
    remote_chain_splitter_code: Uint64
    liquid_pooler_code: Uint64
    liquid_staker_code: Uint64
    interchain_router_code: Uint64


class LiquidStakingInfo(_Msg):
    ls_denom: str
    ls_denom_on_neutron: str
    ls_chain_to_neutron_channel_id: str
    ls_neutron_connection_id: str


class RemoteChainSplitterConfig(_Msg):
    channel_id: str
    connection_id: str
    denom: str
    amount: Uint128
    ls_share: FixedDecimal
    native_share: FixedDecimal
    fallback_address: Optional[str] = None


class SinglePartyPolInstantiateMsg(_Msg):
    label: str
    timeouts: Timeouts
    contract_codes: SinglePartyContractCodes
    clock_tick_max_gas: Optional[Uint64] = None
    lockup_period: Expiration
    ls_info: LiquidStakingInfo
    ls_forwarder_config: CovenantPartyConfig
    lp_forwarder_config: CovenantPartyConfig
    pool_price_config: PoolPriceConfig
    remote_chain_splitter_config: RemoteChainSplitterConfig
    emergency_committee: Optional[str] = None
    covenant_party_config: InterchainCovenantParty
    liquid_pooler_config: LiquidPoolerConfig


# ---------------------------------------------------------------------------
# Two-party POL
# ---------------------------------------------------------------------------


class TwoPartyContractCodes(_Msg):
    ibc_forwarder_code: Uint64
    interchain_router_code: Uint64
    native_router_code: Uint64
    holder_code: Uint64
    clock_code: Uint64
    liquid_pooler_code: Uint64


class TwoPartyPolInstantiateMsg(_Msg):
    label: str
    timeouts: Timeouts
    contract_codes: TwoPartyContractCodes
    clock_tick_max_gas: Optional[Uint64] = None
    lockup_config: Expiration
    ragequit_config: Optional[Any] = None
    deposit_deadline: Expiration
    party_a_config: CovenantPartyConfig
    party_b_config: CovenantPartyConfig
    covenant_type: Literal["share", "side"]
    party_a_share: FixedDecimal
    party_b_share: FixedDecimal
    pool_price_config: PoolPriceConfig
    splits: dict[str, SplitConfig]
    fallback_split: Optional[SplitConfig] = None
    emergency_committee: Optional[str] = None
    liquid_pooler_config: LiquidPoolerConfig
    fallback_address: Optional[str] = None


# ---------------------------------------------------------------------------
# Swap
# ---------------------------------------------------------------------------


class SwapContractCodes(_Msg):
    ibc_forwarder_code: Uint64
    interchain_router_code: Uint64
    splitter_code: Uint64
    holder_code: Uint64
    clock_code: Uint64
    native_router_code: Optional[Uint64] = None


class SwapInstantiateMsg(_Msg):
    label: str
    timeouts: Timeouts
    contract_codes: SwapContractCodes
    clock_tick_max_gas: Optional[Uint64] = None
    lockup_config: Expiration
    party_a_config: CovenantPartyConfig
    party_b_config: CovenantPartyConfig
    splits: dict[str, SplitConfig]
    fallback_split: Optional[SplitConfig] = None
    fallback_address: Optional[str] = None
