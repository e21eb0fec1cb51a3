"""
Liquid pooler and pool price checks against live Astroport state.

Liquid pooler config (``liquid_pooler_config``):

- the pair contract answers at ``pool_address``;
- ``pool_pair_type`` matches the pair (``xyk``, ``stable``, ``custom-<name>``);
- ``asset_a_denom``/``asset_b_denom`` follow the pair's asset order and
  are the two covenant denoms;
- single-side limits equal each contribution minus the configured
  percentage, rounded away from zero.

Pool price config (``pool_price_config``):

- ``expected_spot_price`` should sit within 5% of the reserve ratio; an
  excursion is a passing check with a warning since prices drift;
- ``acceptable_price_spread`` is reported as a whole percentage of the
  expected price.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from covenant_validator import numeric
from covenant_validator.context import ValidationContext
from covenant_validator.messages import AstroportLiquidPoolerConfig, PoolPriceConfig

logger = logging.getLogger(__name__)

POOL_PRICE_KEY = "pool_price_config"


def verify_astroport_liquid_pooler_config(
    ctx: ValidationContext,
    services: Any,
    key: str,
    asset_a_denom: str,
    asset_b_denom: str,
    lp_cfg: AstroportLiquidPoolerConfig,
    limit_contributions: Mapping[str, Optional[Union[int, Decimal]]],
) -> None:
    """Check the pooler config against the pair contract.

    Args:
        asset_a_denom: First covenant denom (on the hub).
        asset_b_denom: Second covenant denom (on the hub).
        limit_contributions: Contribution amount per hub denom used to
            derive single-side limits; ``None`` marks a denom whose
            deposited amount is not known in advance. A pool denom missing
            from the map is an error.
    """
    pair_info = services.astroport.get_pair_info(lp_cfg.pool_address)
    logger.debug("astroport pair info: %s", pair_info)
    if pair_info.contract_addr and pair_info.contract_addr != lp_cfg.pool_address:
        ctx.record_invalid_field(
            key,
            "pool_address",
            "invalid pool address: pair reports a different contract",
            expected=lp_cfg.pool_address,
            actual=pair_info.contract_addr,
        )
    else:
        ctx.record_valid_field(key, "pool_address", "verified", actual=lp_cfg.pool_address)

    actual_pair_type = str(pair_info.pair_type)
    configured_pair_type = str(lp_cfg.pool_pair_type)
    logger.debug(
        "%s/pool_pair_type: expected %s | actual %s", key, actual_pair_type, configured_pair_type
    )
    if actual_pair_type != "unknown" and actual_pair_type == configured_pair_type:
        ctx.record_valid_field(
            key, "pool_pair_type", "verified", expected=actual_pair_type, actual=configured_pair_type
        )
    else:
        ctx.record_invalid_field(
            key,
            "pool_pair_type",
            "invalid pool pair type",
            expected=actual_pair_type,
            actual=configured_pair_type,
        )

    _verify_asset_order(ctx, key, pair_info, asset_a_denom, asset_b_denom, lp_cfg)
    _verify_single_side_limits(ctx, key, lp_cfg, limit_contributions)


def _verify_asset_order(
    ctx: ValidationContext,
    key: str,
    pair_info: Any,
    asset_a_denom: str,
    asset_b_denom: str,
    lp_cfg: AstroportLiquidPoolerConfig,
) -> None:
    pair_denoms = [info.denom for info in pair_info.asset_infos]
    if len(pair_denoms) != 2:
        ctx.record_invalid(key, f"unsupported pool: expected 2 assets, pair has {len(pair_denoms)}")
        return

    # The pooler may list the covenant denoms in either order, but must
    # follow the pair's own ordering.
    asset_a_first = lp_cfg.asset_a_denom == asset_a_denom
    logger.debug("%s: asset_a_first=%s", key, asset_a_first)
    expected_a, expected_b = (
        (asset_a_denom, asset_b_denom) if asset_a_first else (asset_b_denom, asset_a_denom)
    )

    for field, pair_denom, expected, configured, label in (
        ("asset_a_denom", pair_denoms[0], expected_a, lp_cfg.asset_a_denom, "A"),
        ("asset_b_denom", pair_denoms[1], expected_b, lp_cfg.asset_b_denom, "B"),
    ):
        if pair_denom == configured and expected == configured:
            ctx.record_valid_field(key, field, "verified", expected=pair_denom, actual=configured)
        else:
            ctx.record_invalid_field(
                key,
                field,
                f"invalid asset {label} denom '{configured}': should be '{expected}' "
                f"(pool lists '{pair_denom}')",
                expected=expected,
                actual=configured,
            )


def _verify_single_side_limits(
    ctx: ValidationContext,
    key: str,
    lp_cfg: AstroportLiquidPoolerConfig,
    limit_contributions: Mapping[str, Optional[Union[int, Decimal]]],
) -> None:
    pct = ctx.single_side_lp_limit_pct
    limits = lp_cfg.single_side_lp_limits
    for field, denom, configured in (
        ("single_side_lp_limits.asset_a_limit", lp_cfg.asset_a_denom, limits.asset_a_limit),
        ("single_side_lp_limits.asset_b_limit", lp_cfg.asset_b_denom, limits.asset_b_limit),
    ):
        if denom not in limit_contributions:
            ctx.record_invalid_field(
                key, field, f"cannot verify limit: {denom} is not a covenant denom", actual=configured
            )
            continue
        contribution = limit_contributions[denom]
        if contribution is None:
            ctx.record_valid_field(
                key,
                field,
                f"not verified: deposited amount of {denom} is not known in advance",
                actual=configured,
                warning=True,
            )
            continue
        expected = numeric.single_side_lp_limit(contribution, pct)
        if configured == expected:
            ctx.record_valid_field(
                key, field, f"verified ({100 - pct}% of contribution)", expected=expected, actual=configured
            )
        else:
            ctx.record_invalid_field(
                key,
                field,
                f"invalid limit: expected {expected} | actual {configured}",
                expected=expected,
                actual=configured,
            )


def verify_pool_price_config(
    ctx: ValidationContext,
    services: Any,
    pool_address: str,
    pool_price_cfg: PoolPriceConfig,
) -> None:
    key = POOL_PRICE_KEY
    pool_info = services.astroport.get_pool_info(pool_address)
    logger.debug("astroport pool info: %s", pool_info)
    if len(pool_info.assets) < 2:
        ctx.record_invalid(key, f"unsupported pool: expected 2 assets, pool has {len(pool_info.assets)}")
        return

    asset_a_amount = pool_info.assets[0].atomics
    asset_b_amount = pool_info.assets[-1].atomics
    current_price = numeric.current_pool_price(asset_a_amount, asset_b_amount)
    logger.debug(
        "%s/current pool price: %s / %s = %s", key, asset_a_amount, asset_b_amount, current_price
    )

    expected_spot_price = numeric.checked_fixed_point(pool_price_cfg.expected_spot_price)
    if numeric.within_price_band(expected_spot_price, current_price):
        ctx.record_valid_field(
            key,
            "expected_spot_price",
            "within 5% range of current pool price",
            expected=f"{current_price:.4f}",
            actual=f"{expected_spot_price:.4f}",
        )
    else:
        logger.warning(
            "expected_spot_price %.4f outside of 5%% range of current pool price %.4f",
            expected_spot_price,
            current_price,
        )
        ctx.record_valid_field(
            key,
            "expected_spot_price",
            f"expected_spot_price: {expected_spot_price:.4f} / current_pool_price: "
            f"{current_price:.4f}, outside of 5% range of current pool price",
            expected=f"{current_price:.4f}",
            actual=f"{expected_spot_price:.4f}",
            warning=True,
        )

    spread = numeric.checked_fixed_point(pool_price_cfg.acceptable_price_spread)
    spread_pct = numeric.acceptable_spread_pct(spread, expected_spot_price)
    logger.debug("%s/acceptable price spread: %s%%", key, spread_pct)
    ctx.record_valid_field(key, "acceptable_price_spread", f"{spread_pct}%", actual=spread)
