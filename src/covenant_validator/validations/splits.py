"""
Post-settlement split checks.

Every per-denom split (and the optional fallback split) must hand out
exactly 100% and name exactly the two parties' receiver addresses.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from covenant_validator import numeric
from covenant_validator.context import ValidationContext
from covenant_validator.messages import SplitConfig

logger = logging.getLogger(__name__)

SPLITS_KEY = "splits"


def verify_split(
    ctx: ValidationContext,
    field: str,
    split: SplitConfig,
    receiver_addrs: set[str],
    key: str = SPLITS_KEY,
) -> None:
    shares = [numeric.checked_fixed_point(share) for share in split.receivers.values()]
    out_of_range = [
        addr for addr, share in zip(split.receivers, shares) if not numeric.share_in_range(share)
    ]
    if out_of_range:
        ctx.record_invalid_field(
            key,
            field,
            f"invalid share: should be between 0 and 1 for {', '.join(out_of_range)}",
        )

    total = sum(shares, numeric.ZERO)
    if numeric.shares_sum_to_one(shares):
        ctx.record_valid_field(key, field, "receiver shares sum up to 1", expected=1, actual=total)
    else:
        ctx.record_invalid_field(
            key, field, "invalid split: receiver shares should sum up to 1", expected=1, actual=total
        )

    configured = set(split.receivers)
    if configured == receiver_addrs:
        ctx.record_valid_field(key, f"{field}.receivers", "party receivers verified")
    else:
        missing = sorted(receiver_addrs - configured)
        unexpected = sorted(configured - receiver_addrs)
        details = []
        if missing:
            details.append(f"missing {', '.join(missing)}")
        if unexpected:
            details.append(f"unexpected {', '.join(unexpected)}")
        ctx.record_invalid_field(
            key,
            f"{field}.receivers",
            f"invalid receivers: {'; '.join(details)}",
            expected=", ".join(sorted(receiver_addrs)),
            actual=", ".join(sorted(configured)),
        )


def verify_splits(
    ctx: ValidationContext,
    splits: Mapping[str, SplitConfig],
    fallback_split: Optional[SplitConfig],
    receiver_addrs: set[str],
    covenant_denoms: Optional[set[str]] = None,
) -> None:
    """Check every denom split, the fallback split, and denom coverage."""
    if not splits:
        ctx.record_invalid(SPLITS_KEY, "no splits configured")
    for denom, split in splits.items():
        verify_split(ctx, denom, split, receiver_addrs)

    if covenant_denoms:
        for denom in sorted(covenant_denoms - set(splits)):
            if fallback_split is None:
                ctx.record_invalid_field(
                    SPLITS_KEY, denom, "no split configured and no fallback split"
                )
            else:
                ctx.record_valid_field(SPLITS_KEY, denom, "covered by fallback split")

    if fallback_split is not None:
        verify_split(ctx, "fallback_split", fallback_split, receiver_addrs)
