"""
Covenant Validator - pre-deployment checks for IBC-bridged liquidity covenants.

Cross-checks a covenant instantiation message against live chain data
(chain registry, IBC path tables, Astroport pool state, release code-id
manifests, block height) and reports every discrepancy in one pass.

Example usage:
    from covenant_validator import Collaborators, ValidationContext, build_validator

    ctx = ValidationContext(party_a_chain_name="cosmoshub", party_b_chain_name="neutron")
    with Collaborators.from_config() as services:
        build_validator("valence-covenant-two-party-pol", payload).validate(ctx, services)

    if ctx.has_errors():
        for key, messages in ctx.errors().items():
            print(key, messages)
"""

__version__ = "0.1.0"
__all__ = [
    "Collaborators",
    "ValidationContext",
    "ValidationRecord",
    "build_validator",
    "derive_voucher_denom",
    "resolve_path",
    "__version__",
]


# Lazy imports to avoid loading httpx/pydantic at import time
def __getattr__(name: str):
    if name == "Collaborators":
        from covenant_validator.clients import Collaborators

        return Collaborators
    if name in ("ValidationContext", "ValidationRecord"):
        from covenant_validator import context

        return getattr(context, name)
    if name == "build_validator":
        from covenant_validator.validations.dispatch import build_validator

        return build_validator
    if name == "derive_voucher_denom":
        from covenant_validator.ibc.denom import derive_voucher_denom

        return derive_voucher_denom
    if name == "resolve_path":
        from covenant_validator.ibc.path import resolve_path

        return resolve_path
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
