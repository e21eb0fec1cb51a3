"""
ICS-20 voucher denom derivation.

A token that crosses one IBC hop is minted on the receiving chain as
``ibc/<HASH>``, where ``HASH`` is the upper-case hex SHA-256 of the denom
trace ``transfer/<channel>/<base denom>`` and ``<channel>`` is the
channel id on the receiving chain.
"""

from __future__ import annotations

import hashlib

from covenant_validator.types import TRANSFER_PORT_ID

IBC_DENOM_PREFIX = "ibc/"


def denom_trace(channel_id: str, base_denom: str) -> str:
    return f"{TRANSFER_PORT_ID}/{channel_id}/{base_denom}"


def derive_voucher_denom(channel_id: str, base_denom: str) -> str:
    """Voucher denom of ``base_denom`` received over ``channel_id``."""
    digest = hashlib.sha256(denom_trace(channel_id, base_denom).encode("utf-8"))
    return IBC_DENOM_PREFIX + digest.hexdigest().upper()
