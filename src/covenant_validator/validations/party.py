"""
Covenant party checks: IBC identifiers, denoms, contributions, addresses.

A party living on the hub chain must use a ``native`` config; any other
chain needs an ``interchain`` config whose connection and channel ids
match the registry path to the hub, whose remote denom is a known asset
on its chain, and whose ``native_denom`` is the ICS-20 voucher of that
asset received over the hub-side channel.

The building blocks are shared with the single-party pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from covenant_validator import numeric
from covenant_validator.context import ValidationContext
from covenant_validator.errors import AssetNotFoundError, PathResolutionError
from covenant_validator.ibc.denom import derive_voucher_denom
from covenant_validator.ibc.path import ResolvedPath, resolve_path
from covenant_validator.messages import (
    Coin,
    CovenantPartyConfig,
    InterchainCovenantParty,
    NativeCovenantParty,
)
from covenant_validator.clients.registry import AssetInfo
from covenant_validator.types import HUB_CHAIN_NAME
from covenant_validator.validations.common import (
    validate_optional_address,
    validate_party_address,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartyOutcome:
    """What later pipeline steps need to know about a validated party."""

    chain_name: str
    native_denom: str
    contribution: Coin
    receiver_addr: str


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def resolve_or_record(
    ctx: ValidationContext,
    services: Any,
    key: str,
    from_chain: str,
    to_chain: str,
    counterpart_contract_port: bool = False,
) -> Optional[ResolvedPath]:
    """Resolve a path; a missing or ambiguous channel becomes a keyed error."""
    try:
        return resolve_path(services.registry, from_chain, to_chain, counterpart_contract_port)
    except PathResolutionError as e:
        ctx.record_invalid_field(key, "ibc_path", str(e))
        return None


def lookup_asset_or_record(
    ctx: ValidationContext,
    services: Any,
    key: str,
    field: str,
    chain_name: str,
    denom: str,
) -> Optional[AssetInfo]:
    """Resolve ``denom`` on ``chain_name``; it must be the asset's base denom."""
    try:
        asset = services.registry.get_chain_asset_info(chain_name, denom)
    except AssetNotFoundError:
        ctx.record_invalid_field(
            key, field, f"could not verify denom: {denom} not found on {chain_name}", actual=denom
        )
        return None
    if asset.base == denom:
        ctx.record_valid_field(key, field, "verified", expected=asset.base, actual=denom)
        return asset
    ctx.record_invalid_field(
        key,
        field,
        f"invalid denom: expected {asset.base} | actual {denom}",
        expected=asset.base,
        actual=denom,
    )
    return None


def verify_voucher_denom(
    ctx: ValidationContext,
    key: str,
    field: str,
    receiving_channel_id: str,
    base_denom: str,
    configured: str,
) -> str:
    expected = derive_voucher_denom(receiving_channel_id, base_denom)
    ctx.verify_equals(key, field, expected, configured, "invalid denom: expected {} | actual {}")
    return expected


def verify_contribution(
    ctx: ValidationContext,
    key: str,
    contribution: Coin,
    expected_denom: str,
    decimals: int,
    display: str,
    total: Optional[int] = None,
    share: Optional[Decimal] = None,
    share_name: str = "share",
) -> bool:
    """Contribution denom must match; share-derived legs must equal ``total * share``."""
    field = "contribution"
    if contribution.denom != expected_denom:
        ctx.record_invalid_field(
            key,
            field,
            f"invalid denom: expected {expected_denom} | actual {contribution.denom}",
            expected=expected_denom,
            actual=contribution.denom,
        )
        return False
    if total is not None and share is not None:
        expected_amount = numeric.expected_leg_amount(total, share)
        if not numeric.leg_matches_share(total, share, contribution.amount):
            ctx.record_invalid_field(
                key,
                field,
                f"invalid amount: should be equal to {share_name} * contribution amount",
                expected=expected_amount,
                actual=contribution.amount,
            )
            return False
    amount = numeric.display_amount(contribution.amount, decimals)
    ctx.record_valid_field(key, field, f"{amount:.2f} {display}", actual=contribution.amount)
    return True


# ---------------------------------------------------------------------------
# Party config
# ---------------------------------------------------------------------------


def validate_native_party(
    ctx: ValidationContext,
    services: Any,
    key: str,
    party: NativeCovenantParty,
) -> PartyOutcome:
    asset = lookup_asset_or_record(ctx, services, key, "native_denom", HUB_CHAIN_NAME, party.native_denom)
    verify_contribution(
        ctx,
        key,
        party.contribution,
        party.native_denom,
        asset.decimals if asset else 0,
        asset.display if asset else party.native_denom,
    )
    validate_party_address(ctx, key, "party_receiver_addr", party.party_receiver_addr)
    validate_party_address(ctx, key, "addr", party.addr)
    return PartyOutcome(
        chain_name=HUB_CHAIN_NAME,
        native_denom=party.native_denom,
        contribution=party.contribution,
        receiver_addr=party.party_receiver_addr,
    )


def validate_interchain_party(
    ctx: ValidationContext,
    services: Any,
    key: str,
    chain_name: str,
    party: InterchainCovenantParty,
    counterpart_contract_port: bool = False,
) -> PartyOutcome:
    resolved = resolve_or_record(ctx, services, key, HUB_CHAIN_NAME, chain_name, counterpart_contract_port)
    if resolved is not None:
        ctx.verify_equals(
            key,
            "party_chain_connection_id",
            resolved.connection_id,
            party.party_chain_connection_id,
            "invalid connection id: expected {} | actual {}",
        )
        ctx.verify_equals(
            key,
            "host_to_party_chain_channel_id",
            resolved.forward_channel_id,
            party.host_to_party_chain_channel_id,
            "invalid channel id: expected {} | actual {}",
        )
        ctx.verify_equals(
            key,
            "party_to_host_chain_channel_id",
            resolved.reverse_channel_id,
            party.party_to_host_chain_channel_id,
            "invalid channel id: expected {} | actual {}",
        )

    asset = lookup_asset_or_record(
        ctx, services, key, "remote_chain_denom", chain_name, party.remote_chain_denom
    )

    # Vouchers are minted on the hub, so the hub-side channel names the trace.
    receiving_channel = (
        resolved.forward_channel_id if resolved is not None else party.host_to_party_chain_channel_id
    )
    verify_voucher_denom(
        ctx, key, "native_denom", receiving_channel, party.remote_chain_denom, party.native_denom
    )

    verify_contribution(
        ctx,
        key,
        party.contribution,
        party.remote_chain_denom,
        asset.decimals if asset else 0,
        asset.display if asset else party.remote_chain_denom,
    )
    validate_party_address(ctx, key, "party_receiver_addr", party.party_receiver_addr)
    validate_party_address(ctx, key, "addr", party.addr)
    validate_optional_address(ctx, key, "fallback_address", party.fallback_address)
    return PartyOutcome(
        chain_name=chain_name,
        native_denom=party.native_denom,
        contribution=party.contribution,
        receiver_addr=party.party_receiver_addr,
    )


def validate_party_config(
    ctx: ValidationContext,
    services: Any,
    key: str,
    chain_name: str,
    config: CovenantPartyConfig,
    counterpart_contract_port: bool = False,
) -> PartyOutcome:
    """Dispatch on the party variant after checking it fits the party chain."""
    on_hub = chain_name == HUB_CHAIN_NAME
    expected_variant = "native" if on_hub else "interchain"
    actual_variant = "interchain" if config.is_interchain else "native"
    if expected_variant != actual_variant:
        ctx.record_invalid_field(
            key,
            "party_config",
            f"invalid covenant party config: a party on {chain_name} should be {expected_variant}",
            expected=expected_variant,
            actual=actual_variant,
        )
    else:
        ctx.record_valid_field(key, "party_config", f"{actual_variant} party on {chain_name}")

    if config.interchain is not None and on_hub:
        # No IBC path from the hub to itself; only the addresses can be checked.
        party = config.interchain
        validate_party_address(ctx, key, "party_receiver_addr", party.party_receiver_addr)
        validate_party_address(ctx, key, "addr", party.addr)
        return PartyOutcome(
            chain_name=chain_name,
            native_denom=party.native_denom,
            contribution=party.contribution,
            receiver_addr=party.party_receiver_addr,
        )
    if config.interchain is not None:
        return validate_interchain_party(
            ctx, services, key, chain_name, config.interchain, counterpart_contract_port
        )
    return validate_native_party(ctx, services, key, config.native)  # type: ignore[arg-type]
