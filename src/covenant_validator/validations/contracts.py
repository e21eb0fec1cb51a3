"""
Code-id verification against a pinned covenants release.

The manifest is fetched once per run; each configured ``*_code`` field is
then checked against the entry for its contract name:

- same id -> ``verified``
- different id -> field error ``invalid code id`` (expected/actual kept)
- name absent -> key-level error ``unknown contract name <name>``
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from covenant_validator.context import ValidationContext

logger = logging.getLogger(__name__)

CONTRACT_CODES_KEY = "contract_codes"


def verify_code_id(
    ctx: ValidationContext,
    field: str,
    code_ids: Mapping[str, int],
    contract_name: str,
    code_id: int,
) -> None:
    if contract_name not in code_ids:
        ctx.record_invalid(CONTRACT_CODES_KEY, f"unknown contract name {contract_name}")
        return
    expected = code_ids[contract_name]
    if expected == code_id:
        ctx.record_valid_field(CONTRACT_CODES_KEY, field, "verified", expected=expected, actual=code_id)
    else:
        ctx.record_invalid_field(
            CONTRACT_CODES_KEY, field, "invalid code id", expected=expected, actual=code_id
        )


def verify_contract_codes(
    ctx: ValidationContext,
    services: Any,
    release_tag: str,
    fields_to_contracts: Mapping[str, str],
    contract_codes: Any,
) -> None:
    """Verify every ``field -> contract name`` pair of a ``contract_codes`` block."""
    code_ids = services.releases.get_code_ids(release_tag)
    logger.debug("Verifying %d code ids against release %s", len(fields_to_contracts), release_tag)
    for field, contract_name in fields_to_contracts.items():
        verify_code_id(ctx, field, code_ids, contract_name, getattr(contract_codes, field))
