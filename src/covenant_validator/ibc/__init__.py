"""
IBC helpers: path/channel resolution and ICS-20 denom derivation.

Public API::

    from covenant_validator.ibc import (
        ResolvedPath,
        derive_voucher_denom,
        resolve_path,
        select_channel,
    )
"""

from covenant_validator.ibc.denom import denom_trace, derive_voucher_denom
from covenant_validator.ibc.path import ResolvedPath, resolve_path, select_channel

__all__ = [
    "ResolvedPath",
    "denom_trace",
    "derive_voucher_denom",
    "resolve_path",
    "select_channel",
]
