"""
Core enums and constants shared across covenant validation.

Chain names and port ids mirror the public chain registry; contract
names mirror the release manifest after prefix/extension stripping.
"""

from __future__ import annotations

from enum import Enum


HUB_CHAIN_NAME = "neutron"
TRANSFER_PORT_ID = "transfer"
WASM_PORT_PREFIX = "wasm."

DEFAULT_SINGLE_SIDE_LP_LIMIT_PCT = 10
DEFAULT_RELEASE_TAG = "v0.1.0"


class CovenantType(str, Enum):
    """Covenant contract variants, keyed by the declared contract string."""

    SINGLE_PARTY_POL = "valence-covenant-single-party-pol"
    TWO_PARTY_POL = "valence-covenant-two-party-pol"
    SWAP = "valence-covenant-swap"

    @property
    def is_two_party(self) -> bool:
        """Whether metadata must name a second party chain."""
        return self in (CovenantType.TWO_PARTY_POL, CovenantType.SWAP)

    @classmethod
    def parse(cls, value: str) -> "CovenantType":
        """Accept the full contract name or its short alias (``swap``)."""
        for member in cls:
            if value in (member.value, member.value.removeprefix("valence-covenant-")):
                return member
        raise ValueError(value)


class LiquidStakingProvider(str, Enum):
    """Liquid staking provider used by single-party covenants."""

    STRIDE = "stride"
    PERSISTENCE = "persistence"

    @property
    def chain_name(self) -> str:
        return self.value

    @property
    def staker_contract(self) -> str:
        return f"{self.value}_liquid_staker"
