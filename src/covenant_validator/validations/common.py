"""
Checks shared by every covenant pipeline: labels, addresses, expirations.

Each helper records exactly one entry on the context. Only collaborator
failures (block height lookup) raise.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from bech32 import bech32_decode

from covenant_validator.context import ValidationContext
from covenant_validator.messages import Expiration

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def is_valid_bech32_address(address: str) -> bool:
    """Lower-case, checksum-valid Bech32; the human-readable part is not checked."""
    if not address or address != address.lower():
        return False
    hrp, data = bech32_decode(address)[:2]
    return hrp is not None and data is not None


def validate_party_address(ctx: ValidationContext, key: str, field: str, address: str) -> bool:
    if is_valid_bech32_address(address):
        ctx.record_valid_field(key, field, "valid Bech32 address", actual=address)
        return True
    ctx.record_invalid_field(key, field, "invalid Bech32 address", actual=address)
    return False


def validate_optional_address(
    ctx: ValidationContext, key: str, field: str, address: Optional[str]
) -> None:
    """Addresses that may be omitted are only checked when present."""
    if address:
        validate_party_address(ctx, key, field, address)


def validate_label(ctx: ValidationContext, label: str) -> None:
    if label.strip():
        ctx.record_valid_field("covenant", "label", "valid", actual=label)
    else:
        ctx.record_invalid_field("covenant", "label", "required")


def verify_expiration(
    ctx: ValidationContext,
    services: Any,
    key: str,
    field: str,
    deadline: Expiration,
    clock: Clock = time.time,
) -> bool:
    """A deadline is valid iff it lies strictly in the future.

    Block heights are compared with the live Neutron height, times with
    the wall clock; ``never`` always passes.
    """
    if deadline.at_height is not None:
        current = services.neutron.get_latest_block_height()
        if deadline.at_height > current:
            ctx.record_valid_field(key, field, "verified", expected=f"> {current}", actual=deadline.at_height)
            return True
        ctx.record_invalid_field(
            key,
            field,
            "invalid block height: should be in the future",
            expected=f"> {current}",
            actual=deadline.at_height,
        )
        return False

    if deadline.at_time is not None:
        now = int(clock())
        seconds = deadline.at_time_seconds
        if seconds is not None and seconds > now:
            ctx.record_valid_field(key, field, "verified", expected=f"> {now}", actual=seconds)
            return True
        ctx.record_invalid_field(
            key,
            field,
            "invalid timestamp: should be in the future",
            expected=f"> {now}",
            actual=seconds,
        )
        return False

    ctx.record_valid_field(key, field, "verified (note: never expires)", actual="never")
    return True


def expiration_is_later(later: Expiration, earlier: Expiration) -> Optional[bool]:
    """Whether ``later`` expires strictly after ``earlier``.

    ``None`` when the two use different clocks (height vs time) and
    cannot be ordered.
    """
    if later.kind == "never":
        return earlier.kind != "never"
    if earlier.kind == "never":
        return False
    if later.kind != earlier.kind:
        return None
    if later.kind == "at_height":
        return later.at_height > earlier.at_height  # type: ignore[operator]
    return later.at_time > earlier.at_time  # type: ignore[operator]


def verify_expiration_order(
    ctx: ValidationContext,
    key: str,
    field: str,
    later: Expiration,
    earlier: Expiration,
    earlier_name: str,
) -> None:
    ordered = expiration_is_later(later, earlier)
    if ordered is None:
        ctx.record_invalid_field(
            key,
            field,
            f"cannot compare {later} with {earlier_name} {earlier}: different expiration kinds",
            expected=f"same kind as {earlier_name}",
            actual=later.kind,
        )
    elif ordered:
        ctx.record_valid_field(
            key, field, f"after {earlier_name}", expected=f"> {earlier}", actual=str(later)
        )
    else:
        ctx.record_invalid_field(
            key,
            field,
            f"invalid expiration: should be after {earlier_name}",
            expected=f"> {earlier}",
            actual=str(later),
        )
