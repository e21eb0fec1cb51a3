"""
Single-party POL covenant validation.

One party contributes a remote-chain asset; the covenant splits it on the
party chain, liquid-stakes one leg on the LS provider chain, and pools
the native leg with the LS derivative on Astroport.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from covenant_validator import numeric
from covenant_validator.context import ValidationContext
from covenant_validator.messages import InterchainCovenantParty, SinglePartyPolInstantiateMsg
from covenant_validator.types import DEFAULT_RELEASE_TAG, HUB_CHAIN_NAME, CovenantType
from covenant_validator.validations.astroport import (
    POOL_PRICE_KEY,
    verify_astroport_liquid_pooler_config,
    verify_pool_price_config,
)
from covenant_validator.validations.common import (
    Clock,
    validate_label,
    validate_optional_address,
    validate_party_address,
    verify_expiration,
)
from covenant_validator.validations.contracts import verify_contract_codes
from covenant_validator.validations.party import (
    lookup_asset_or_record,
    resolve_or_record,
    verify_contribution,
    verify_voucher_denom,
)

logger = logging.getLogger(__name__)


def single_party_contracts(staker_contract: str) -> dict[str, str]:
    return {
        "ibc_forwarder_code": "ibc_forwarder",
        "holder_code": "single_party_pol_holder",
        "clock_code": "clock",
        "remote_chain_splitter_code": "remote_chain_splitter",
        "liquid_pooler_code": "astroport_liquid_pooler",
        "liquid_staker_code": staker_contract,
        "interchain_router_code": "interchain_router",
    }


class SinglePartyPolCovenantValidator:
    """Validate a single-party POL covenant instantiation message."""

    covenant_type = CovenantType.SINGLE_PARTY_POL

    def __init__(self, msg: SinglePartyPolInstantiateMsg) -> None:
        self.msg = msg

    def validate(
        self,
        ctx: ValidationContext,
        services: Any,
        release_tag: str = DEFAULT_RELEASE_TAG,
        clock: Clock = time.time,
    ) -> None:
        msg = self.msg
        provider = ctx.liquid_staking_provider
        logger.debug("%s: %r", self.covenant_type.value, msg)
        logger.info("Processing covenant %r", msg.label)

        validate_label(ctx, msg.label)
        verify_contract_codes(
            ctx, services, release_tag, single_party_contracts(provider.staker_contract), msg.contract_codes
        )
        verify_expiration(ctx, services, "lockup_period", "lockup_period", msg.lockup_period, clock)
        validate_optional_address(ctx, "covenant", "emergency_committee", msg.emergency_committee)

        # Covenant party
        key = "covenant_party_config"
        party = msg.covenant_party_config
        party_chain = ctx.party_a_chain_name
        resolved = resolve_or_record(ctx, services, key, HUB_CHAIN_NAME, party_chain)
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

        chain_info = services.registry.get_chain_info(party_chain)
        remote_chain_denom = chain_info.denom
        ctx.verify_equals(
            key,
            "remote_chain_denom",
            remote_chain_denom,
            party.remote_chain_denom,
            "invalid denom: expected {} | actual {}",
        )
        verify_voucher_denom(
            ctx,
            key,
            "native_denom",
            resolved.forward_channel_id if resolved else party.host_to_party_chain_channel_id,
            remote_chain_denom,
            party.native_denom,
        )
        verify_contribution(
            ctx, key, party.contribution, remote_chain_denom, chain_info.decimals, chain_info.display
        )
        validate_party_address(ctx, key, "party_receiver_addr", party.party_receiver_addr)
        validate_party_address(ctx, key, "addr", party.addr)
        validate_optional_address(ctx, key, "fallback_address", party.fallback_address)

        # Liquid staking: LS chain -> hub
        key = "ls_info"
        ls_info = msg.ls_info
        ls_chain = provider.chain_name
        ls_path = resolve_or_record(
            ctx, services, key, ls_chain, HUB_CHAIN_NAME, ctx.party_a_uses_contract_port
        )
        if ls_path is not None:
            ctx.verify_equals(
                key,
                "ls_neutron_connection_id",
                ls_path.counterpart_connection_id,
                ls_info.ls_neutron_connection_id,
                "invalid connection id: expected {} | actual {}",
            )
            ctx.verify_equals(
                key,
                "ls_chain_to_neutron_channel_id",
                ls_path.forward_channel_id,
                ls_info.ls_chain_to_neutron_channel_id,
                "invalid channel id: expected {} | actual {}",
            )
        lookup_asset_or_record(ctx, services, key, "ls_denom", ls_chain, ls_info.ls_denom)
        if ls_path is not None:
            verify_voucher_denom(
                ctx,
                key,
                "ls_denom_on_neutron",
                ls_path.reverse_channel_id,
                ls_info.ls_denom,
                ls_info.ls_denom_on_neutron,
            )
        else:
            ctx.record_invalid_field(
                key,
                "ls_denom_on_neutron",
                f"could not verify denom: no channel from {ls_chain} to {HUB_CHAIN_NAME}",
                actual=ls_info.ls_denom_on_neutron,
            )

        # Remote chain splitter
        key = "remote_chain_splitter_config"
        splitter = msg.remote_chain_splitter_config
        ctx.verify_equals(
            key,
            "connection_id",
            party.party_chain_connection_id,
            splitter.connection_id,
            "invalid connection id: expected {} | actual {}",
        )
        ctx.verify_equals(
            key,
            "channel_id",
            party.host_to_party_chain_channel_id,
            splitter.channel_id,
            "invalid channel id: expected {} | actual {}",
        )
        ctx.verify_equals(
            key, "denom", remote_chain_denom, splitter.denom, "invalid denom: expected {} | actual {}"
        )
        ctx.verify_equals(
            key,
            "amount",
            party.contribution.amount,
            splitter.amount,
            "invalid amount: expected {} | actual {}",
        )
        ls_share = numeric.checked_fixed_point(splitter.ls_share)
        native_share = numeric.checked_fixed_point(splitter.native_share)
        for field, share in (("ls_share", ls_share), ("native_share", native_share)):
            if numeric.share_in_range(share):
                ctx.record_valid_field(key, field, "verified", actual=share)
            else:
                ctx.record_invalid_field(key, field, "invalid share: should be between 0 and 1", actual=share)
        if numeric.shares_sum_to_one([ls_share, native_share]):
            ctx.record_valid_field(
                key, "ls_share + native_share", "verified", expected=1, actual=ls_share + native_share
            )
        else:
            ctx.record_invalid_field(
                key,
                "ls_share + native_share",
                "invalid share: should sum up to 1",
                expected=1,
                actual=ls_share + native_share,
            )
        validate_optional_address(ctx, key, "fallback_address", splitter.fallback_address)

        # Forwarders
        lp_contribution = self._verify_forwarder(
            ctx,
            "lp_forwarder_config",
            msg.lp_forwarder_config.interchain,
            party,
            remote_chain_denom,
            chain_info,
            party.party_chain_connection_id,
            party.party_to_host_chain_channel_id,
            native_share,
            "native_share",
        )
        # Without a forwarder leg the limit follows the native share.
        if lp_contribution is None:
            lp_contribution = numeric.expected_leg_amount(party.contribution.amount, native_share)

        key = "ls_forwarder_config"
        ls_fwd_connection = ls_fwd_channel = None
        if msg.ls_forwarder_config.interchain is not None:
            party_to_ls = resolve_or_record(ctx, services, key, party_chain, ls_chain)
            if party_to_ls is not None:
                ls_fwd_connection = party_to_ls.counterpart_connection_id
                ls_fwd_channel = party_to_ls.forward_channel_id
        self._verify_forwarder(
            ctx,
            key,
            msg.ls_forwarder_config.interchain,
            party,
            remote_chain_denom,
            chain_info,
            ls_fwd_connection,
            ls_fwd_channel,
            ls_share,
            "ls_share",
        )

        # Liquid pooler
        key = "liquid_pooler_config"
        lp_cfg = msg.liquid_pooler_config
        if lp_cfg.astroport is not None:
            # The LS derivative amount is only known once staking completes.
            verify_astroport_liquid_pooler_config(
                ctx,
                services,
                key,
                party.native_denom,
                ls_info.ls_denom_on_neutron,
                lp_cfg.astroport,
                {party.native_denom: lp_contribution, ls_info.ls_denom_on_neutron: None},
            )
            verify_pool_price_config(ctx, services, lp_cfg.astroport.pool_address, msg.pool_price_config)
        else:
            ctx.record_invalid(key, "Osmosis liquid pooler config: validation logic not yet implemented.")
            ctx.record_invalid(POOL_PRICE_KEY, "Osmosis pool price config: validation logic not yet implemented.")

    def _verify_forwarder(
        self,
        ctx: ValidationContext,
        key: str,
        fwd: Optional[InterchainCovenantParty],
        party: InterchainCovenantParty,
        remote_chain_denom: str,
        chain_info: Any,
        expected_connection_id: Optional[str],
        expected_p2h_channel_id: Optional[str],
        share: Any,
        share_name: str,
    ) -> Optional[int]:
        """Check one ibc-forwarder leg; returns its configured amount, or None without a leg."""
        if fwd is None:
            ctx.record_invalid(key, "invalid covenant party config: should be an interchain party config")
            return None

        # Overwritten by the covenant at instantiation.
        ctx.required_or_ignored(key, "party_receiver_addr", fwd.party_receiver_addr)
        ctx.required_or_ignored(key, "addr", fwd.addr)
        ctx.required_or_ignored(key, "host_to_party_chain_channel_id", fwd.host_to_party_chain_channel_id)
        ctx.required_or_ignored(key, "native_denom", fwd.native_denom)

        ctx.verify_equals(
            key,
            "remote_chain_denom",
            remote_chain_denom,
            fwd.remote_chain_denom,
            "invalid denom: expected {} | actual {}",
        )
        if expected_connection_id is not None:
            ctx.verify_equals(
                key,
                "party_chain_connection_id",
                expected_connection_id,
                fwd.party_chain_connection_id,
                "invalid connection id: expected {} | actual {}",
            )
        if expected_p2h_channel_id is not None:
            ctx.verify_equals(
                key,
                "party_to_host_chain_channel_id",
                expected_p2h_channel_id,
                fwd.party_to_host_chain_channel_id,
                "invalid channel id: expected {} | actual {}",
            )
        verify_contribution(
            ctx,
            key,
            fwd.contribution,
            remote_chain_denom,
            chain_info.decimals,
            chain_info.display,
            total=party.contribution.amount,
            share=share,
            share_name=share_name,
        )
        return fwd.contribution.amount
