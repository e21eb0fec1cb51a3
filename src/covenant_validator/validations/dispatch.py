"""
Covenant validator selection.

The set of covenants is closed: the declared contract string picks one of
three validators, each bound to its strictly parsed instantiation
message. This is the only place that maps contract strings to validators.
"""

from __future__ import annotations

import logging
from typing import Any, Union

from pydantic import ValidationError

from covenant_validator.errors import InputError, UnsupportedCovenantError
from covenant_validator.messages import (
    SinglePartyPolInstantiateMsg,
    SwapInstantiateMsg,
    TwoPartyPolInstantiateMsg,
)
from covenant_validator.types import CovenantType
from covenant_validator.validations.single_party_pol import SinglePartyPolCovenantValidator
from covenant_validator.validations.swap import SwapCovenantValidator
from covenant_validator.validations.two_party_pol import TwoPartyPolCovenantValidator

logger = logging.getLogger(__name__)

CovenantValidator = Union[
    SinglePartyPolCovenantValidator,
    TwoPartyPolCovenantValidator,
    SwapCovenantValidator,
]


def parse_covenant_type(contract: Union[str, CovenantType]) -> CovenantType:
    if isinstance(contract, CovenantType):
        return contract
    try:
        return CovenantType.parse(contract)
    except ValueError:
        raise UnsupportedCovenantError(contract) from None


def build_validator(contract: Union[str, CovenantType], payload: Any) -> CovenantValidator:
    """Parse ``payload`` for the declared covenant and wrap it in its validator.

    Raises:
        UnsupportedCovenantError: ``contract`` names no known covenant.
        InputError: ``payload`` does not match the covenant's message schema.
    """
    covenant_type = parse_covenant_type(contract)
    logger.debug("Building %s validator", covenant_type.value)
    try:
        if covenant_type is CovenantType.SINGLE_PARTY_POL:
            return SinglePartyPolCovenantValidator(SinglePartyPolInstantiateMsg.model_validate(payload))
        if covenant_type is CovenantType.TWO_PARTY_POL:
            return TwoPartyPolCovenantValidator(TwoPartyPolInstantiateMsg.model_validate(payload))
        if covenant_type is CovenantType.SWAP:
            return SwapCovenantValidator(SwapInstantiateMsg.model_validate(payload))
    except ValidationError as e:
        raise InputError(f"Invalid {covenant_type.value} instantiation message: {e}") from e
    raise UnsupportedCovenantError(covenant_type.value)
