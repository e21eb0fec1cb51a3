"""
Covenant validation pipelines.

Each validator records its findings on a ``ValidationContext`` and only
raises for infrastructure failures.
"""

from covenant_validator.validations.dispatch import (
    CovenantValidator,
    build_validator,
    parse_covenant_type,
)
from covenant_validator.validations.single_party_pol import SinglePartyPolCovenantValidator
from covenant_validator.validations.swap import SwapCovenantValidator
from covenant_validator.validations.two_party_pol import TwoPartyPolCovenantValidator

__all__ = [
    "CovenantValidator",
    "SinglePartyPolCovenantValidator",
    "SwapCovenantValidator",
    "TwoPartyPolCovenantValidator",
    "build_validator",
    "parse_covenant_type",
]
