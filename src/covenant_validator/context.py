"""
Validation context: the append-only result accumulator for one run.

Every check in a covenant pipeline writes exactly one record here, either
a passing check or an error. Nothing is removed or overwritten, and
insertion order is kept per key so the rendered report is deterministic.
``has_errors()`` is the only success signal of a run.

Records are structured (key, field, outcome, expected/actual) so callers
can assert on them before they are formatted for humans.

Usage::

    from covenant_validator.context import ValidationContext

    ctx = ValidationContext(party_a_chain_name="cosmoshub")
    ctx.record_valid_field("covenant", "label", "valid")
    ctx.verify_equals("ls_info", "ls_denom", "stuatom", configured, "invalid denom: expected {} | actual {}")
    if ctx.has_errors():
        ...
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from covenant_validator.types import (
    DEFAULT_SINGLE_SIDE_LP_LIMIT_PCT,
    LiquidStakingProvider,
)

logger = logging.getLogger(__name__)


class ValidationRecord(BaseModel):
    """A single check outcome."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    key: str = Field(..., min_length=1, description="Subsystem under test")
    field: Optional[str] = Field(None, description="Property under test")
    valid: bool
    message: str = ""
    expected: Optional[str] = None
    actual: Optional[str] = None
    warning: bool = Field(
        default=False,
        description="Passing check that still deserves attention",
    )

    def render(self) -> str:
        """Message as shown in the report (``field: message``)."""
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ValidationSummary(BaseModel):
    """Counts derived from a context."""

    model_config = ConfigDict(extra="forbid")

    passed: bool
    checks: int = 0
    errors: int = 0
    warnings: int = 0
    keys: list[str] = Field(default_factory=list)


def _stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


class ValidationContext:
    """Process-scoped state for a single validation run."""

    def __init__(
        self,
        party_a_chain_name: str = "",
        party_b_chain_name: Optional[str] = None,
        party_a_uses_contract_port: bool = False,
        liquid_staking_provider: LiquidStakingProvider = LiquidStakingProvider.STRIDE,
        single_side_lp_limit_pct: int = DEFAULT_SINGLE_SIDE_LP_LIMIT_PCT,
    ) -> None:
        self.party_a_chain_name = party_a_chain_name
        self.party_b_chain_name = party_b_chain_name
        self.party_a_uses_contract_port = party_a_uses_contract_port
        self.liquid_staking_provider = liquid_staking_provider
        self.single_side_lp_limit_pct = single_side_lp_limit_pct
        self._records: list[ValidationRecord] = []

    # -- accumulator -------------------------------------------------------

    def _append(self, record: ValidationRecord) -> ValidationRecord:
        self._records.append(record)
        if not record.valid:
            logger.debug("[%s] invalid: %s", record.key, record.render())
        return record

    def record_valid(
        self, key: str, message: str, *, warning: bool = False
    ) -> ValidationRecord:
        return self._append(
            ValidationRecord(key=key, valid=True, message=message, warning=warning)
        )

    def record_valid_field(
        self,
        key: str,
        field: str,
        message: str,
        *,
        expected: Any = None,
        actual: Any = None,
        warning: bool = False,
    ) -> ValidationRecord:
        return self._append(
            ValidationRecord(
                key=key,
                field=field,
                valid=True,
                message=message,
                expected=_stringify(expected),
                actual=_stringify(actual),
                warning=warning,
            )
        )

    def record_invalid(self, key: str, message: str) -> ValidationRecord:
        return self._append(ValidationRecord(key=key, valid=False, message=message))

    def record_invalid_field(
        self,
        key: str,
        field: str,
        message: str,
        *,
        expected: Any = None,
        actual: Any = None,
    ) -> ValidationRecord:
        return self._append(
            ValidationRecord(
                key=key,
                field=field,
                valid=False,
                message=message,
                expected=_stringify(expected),
                actual=_stringify(actual),
            )
        )

    # -- shared checks -----------------------------------------------------

    def verify_equals(
        self,
        key: str,
        field: str,
        expected: Any,
        actual: Any,
        error_template: str,
    ) -> bool:
        """Record ``verified`` if equal, otherwise an error built from the template.

        The template receives ``expected`` and ``actual`` positionally.
        """
        logger.debug("%s/%s: expected %s | actual %s", key, field, expected, actual)
        if actual == expected:
            self.record_valid_field(key, field, "verified", expected=expected, actual=actual)
            return True
        self.record_invalid_field(
            key,
            field,
            error_template.format(expected, actual),
            expected=expected,
            actual=actual,
        )
        return False

    def required_or_ignored(self, key: str, field: str, value: Optional[str]) -> None:
        """Fields the covenant overwrites: present means ignored, empty is an error."""
        if not value:
            self.record_invalid_field(key, field, "required")
        else:
            self.record_valid_field(key, field, "ignored")

    # -- queries -----------------------------------------------------------

    def records(self) -> list[ValidationRecord]:
        return list(self._records)

    def records_for(self, key: str, field: Optional[str] = None) -> list[ValidationRecord]:
        return [
            r for r in self._records
            if r.key == key and (field is None or r.field == field)
        ]

    def _grouped(self, valid: bool) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for record in self._records:
            if record.valid is valid:
                grouped.setdefault(record.key, []).append(record.render())
        return grouped

    def checks(self) -> dict[str, list[str]]:
        """Passing records grouped by key, insertion-ordered."""
        return self._grouped(True)

    def errors(self) -> dict[str, list[str]]:
        """Error records grouped by key, insertion-ordered."""
        return self._grouped(False)

    def has_errors(self) -> bool:
        return any(not r.valid for r in self._records)

    def summary(self) -> ValidationSummary:
        keys: list[str] = []
        for record in self._records:
            if record.key not in keys:
                keys.append(record.key)
        return ValidationSummary(
            passed=not self.has_errors(),
            checks=sum(1 for r in self._records if r.valid),
            errors=sum(1 for r in self._records if not r.valid),
            warnings=sum(1 for r in self._records if r.warning),
            keys=keys,
        )
