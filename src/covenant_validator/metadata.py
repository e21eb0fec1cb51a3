"""
Loading of the two run inputs: covenant metadata (TOML) and the
instantiation message (JSON).

Metadata file layout::

    [covenant]
    contract = "valence-covenant-two-party-pol"
    party_a_chain_name = "cosmoshub"
    party_b_chain_name = "neutron"
    party_a_channel_uses_wasm_port = false   # optional
    ls_provider = "stride"                   # optional, single-party only
    single_side_lp_limit_pct = 10            # optional
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from covenant_validator.context import ValidationContext
from covenant_validator.errors import InputError
from covenant_validator.types import DEFAULT_SINGLE_SIDE_LP_LIMIT_PCT, CovenantType, LiquidStakingProvider

logger = logging.getLogger(__name__)


class CovenantMetadata(BaseModel):
    """The ``[covenant]`` table of a metadata file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    contract: CovenantType
    party_a_chain_name: str = Field(min_length=1)
    party_b_chain_name: Optional[str] = None
    party_a_channel_uses_wasm_port: bool = False
    ls_provider: LiquidStakingProvider = LiquidStakingProvider.STRIDE
    single_side_lp_limit_pct: int = Field(default=DEFAULT_SINGLE_SIDE_LP_LIMIT_PCT, ge=0, le=100)

    @field_validator("contract", mode="before")
    @classmethod
    def parse_contract(cls, v: Any) -> Any:
        if isinstance(v, str):
            return CovenantType.parse(v)
        return v

    @model_validator(mode="after")
    def check_party_b(self) -> "CovenantMetadata":
        if self.contract.is_two_party and not self.party_b_chain_name:
            raise ValueError(f"party_b_chain_name is required for {self.contract.value}")
        return self

    def to_context(self) -> ValidationContext:
        return ValidationContext(
            party_a_chain_name=self.party_a_chain_name,
            party_b_chain_name=self.party_b_chain_name,
            party_a_uses_contract_port=self.party_a_channel_uses_wasm_port,
            liquid_staking_provider=self.ls_provider,
            single_side_lp_limit_pct=self.single_side_lp_limit_pct,
        )


def _read(path: Union[str, Path], what: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read {what} file {path}: {e}") from e


def parse_metadata(content: str, source: str = "<metadata>") -> CovenantMetadata:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise InputError(f"Invalid TOML in {source}: {e}") from e

    table = data.get("covenant")
    if not isinstance(table, dict):
        raise InputError(f"Missing [covenant] table in {source}")
    try:
        metadata = CovenantMetadata.model_validate(table)
    except ValidationError as e:
        raise InputError(f"Invalid covenant metadata in {source}: {e}") from e
    logger.debug("Loaded metadata from %s: %s", source, metadata)
    return metadata


def load_metadata(path: Union[str, Path]) -> CovenantMetadata:
    return parse_metadata(_read(path, "metadata"), str(path))


def load_instantiation(path: Union[str, Path]) -> Any:
    """Read the instantiation JSON; schema checks happen when the validator is built."""
    content = _read(path, "instantiation")
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}") from e
