"""
Two-party POL covenant validation.

Pipeline (each step records under its own key and never stops the next):

1. ``covenant``: label present.
2. ``contract_codes``: code ids match the pinned release.
3. ``party_shares``: each share in [0, 1], shares sum to exactly 1.
4. ``deposit_deadline``: in the future.
5. ``lockup_config``: in the future and strictly after the deposit deadline.
6. ``party_a_config`` / ``party_b_config``: IBC ids, denoms, contribution,
   addresses.
7. ``liquid_pooler_config`` / ``pool_price_config``: live pool checks.
8. ``splits``: every split sums to 1 and names both party receivers.
9. ``covenant``: informational records for covenant type and ragequit, plus
   the optional addresses.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from covenant_validator import numeric
from covenant_validator.context import ValidationContext
from covenant_validator.errors import InputError
from covenant_validator.messages import TwoPartyPolInstantiateMsg
from covenant_validator.types import DEFAULT_RELEASE_TAG, CovenantType
from covenant_validator.validations.astroport import (
    POOL_PRICE_KEY,
    verify_astroport_liquid_pooler_config,
    verify_pool_price_config,
)
from covenant_validator.validations.common import (
    Clock,
    validate_label,
    validate_optional_address,
    verify_expiration,
    verify_expiration_order,
)
from covenant_validator.validations.contracts import verify_contract_codes
from covenant_validator.validations.party import validate_party_config
from covenant_validator.validations.splits import verify_splits

logger = logging.getLogger(__name__)

TWO_PARTY_CONTRACTS = {
    "ibc_forwarder_code": "ibc_forwarder",
    "interchain_router_code": "interchain_router",
    "native_router_code": "native_router",
    "holder_code": "two_party_pol_holder",
    "clock_code": "clock",
    "liquid_pooler_code": "astroport_liquid_pooler",
}

SHARES_KEY = "party_shares"


class TwoPartyPolCovenantValidator:
    """Validate a two-party POL covenant instantiation message."""

    covenant_type = CovenantType.TWO_PARTY_POL

    def __init__(self, msg: TwoPartyPolInstantiateMsg) -> None:
        self.msg = msg

    def validate(
        self,
        ctx: ValidationContext,
        services: Any,
        release_tag: str = DEFAULT_RELEASE_TAG,
        clock: Clock = time.time,
    ) -> None:
        msg = self.msg
        if not ctx.party_b_chain_name:
            raise InputError("two-party covenants need party_b_chain_name")
        logger.debug("%s: %r", self.covenant_type.value, msg)
        logger.info("Processing covenant %r", msg.label)

        validate_label(ctx, msg.label)
        verify_contract_codes(ctx, services, release_tag, TWO_PARTY_CONTRACTS, msg.contract_codes)
        self._verify_shares(ctx)

        verify_expiration(ctx, services, "deposit_deadline", "deposit_deadline", msg.deposit_deadline, clock)
        verify_expiration(ctx, services, "lockup_config", "lockup_config", msg.lockup_config, clock)
        verify_expiration_order(
            ctx, "lockup_config", "lockup_config", msg.lockup_config, msg.deposit_deadline, "deposit_deadline"
        )

        party_a = validate_party_config(
            ctx,
            services,
            "party_a_config",
            ctx.party_a_chain_name,
            msg.party_a_config,
            ctx.party_a_uses_contract_port,
        )
        party_b = validate_party_config(
            ctx, services, "party_b_config", ctx.party_b_chain_name, msg.party_b_config
        )

        key = "liquid_pooler_config"
        lp_cfg = msg.liquid_pooler_config
        if lp_cfg.astroport is not None:
            verify_astroport_liquid_pooler_config(
                ctx,
                services,
                key,
                party_a.native_denom,
                party_b.native_denom,
                lp_cfg.astroport,
                {
                    party_a.native_denom: party_a.contribution.amount,
                    party_b.native_denom: party_b.contribution.amount,
                },
            )
            verify_pool_price_config(ctx, services, lp_cfg.astroport.pool_address, msg.pool_price_config)
        else:
            ctx.record_invalid(key, "Osmosis liquid pooler config: validation logic not yet implemented.")
            ctx.record_invalid(POOL_PRICE_KEY, "Osmosis pool price config: validation logic not yet implemented.")

        verify_splits(
            ctx,
            msg.splits,
            msg.fallback_split,
            {party_a.receiver_addr, party_b.receiver_addr},
            {party_a.native_denom, party_b.native_denom},
        )

        ctx.record_valid_field("covenant", "covenant_type", msg.covenant_type)
        ctx.record_valid_field(
            "covenant",
            "ragequit_config",
            "disabled" if msg.ragequit_config in (None, "disabled") else "enabled",
        )
        validate_optional_address(ctx, "covenant", "emergency_committee", msg.emergency_committee)
        validate_optional_address(ctx, "covenant", "fallback_address", msg.fallback_address)

    def _verify_shares(self, ctx: ValidationContext) -> None:
        msg = self.msg
        party_a_share = numeric.checked_fixed_point(msg.party_a_share)
        party_b_share = numeric.checked_fixed_point(msg.party_b_share)
        for field, share in (("party_a_share", party_a_share), ("party_b_share", party_b_share)):
            if numeric.share_in_range(share):
                ctx.record_valid_field(SHARES_KEY, field, "verified", actual=share)
            else:
                ctx.record_invalid_field(
                    SHARES_KEY, field, "invalid share: should be between 0 and 1", actual=share
                )

        total = party_a_share + party_b_share
        if numeric.shares_sum_to_one([party_a_share, party_b_share]):
            ctx.record_valid_field(
                SHARES_KEY, "party_a_share + party_b_share", "verified", expected=1, actual=total
            )
        else:
            ctx.record_invalid_field(
                SHARES_KEY,
                "party_a_share + party_b_share",
                "invalid share: should sum up to 1",
                expected=1,
                actual=total,
            )
