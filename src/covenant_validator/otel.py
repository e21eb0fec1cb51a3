"""
OTel span event emission for validation runs.

Events land on the current span and are dropped when it is not
recording, so running without a configured tracer provider costs nothing.

Usage::

    from covenant_validator.otel import emit_validation_result, emit_validation_errors

    emit_validation_result(ctx, covenant_type)
    emit_validation_errors(ctx)
"""

from __future__ import annotations

import logging

from opentelemetry import trace as otel_trace

from covenant_validator.context import ValidationContext, ValidationRecord
from covenant_validator.types import CovenantType

logger = logging.getLogger(__name__)


def _add_span_event(name: str, attributes: dict[str, str | int | float | bool]) -> None:
    """Add an event to the current OTel span if available."""
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)


def emit_validation_result(ctx: ValidationContext, covenant_type: CovenantType) -> None:
    """Emit a span event summarising the run.

    Event name: ``covenant.validation.result``
    """
    summary = ctx.summary()
    attrs: dict[str, str | int | float | bool] = {
        "covenant.type": covenant_type.value,
        "validation.passed": summary.passed,
        "validation.check_count": summary.checks,
        "validation.error_count": summary.errors,
        "validation.warning_count": summary.warnings,
    }
    if summary.passed:
        logger.debug(
            "Validation passed: checks=%d warnings=%d", summary.checks, summary.warnings
        )
    else:
        logger.error(
            "Covenant validation failed: errors=%d checks=%d", summary.errors, summary.checks
        )
    _add_span_event("covenant.validation.result", attrs)


def emit_validation_record(record: ValidationRecord) -> None:
    """Event name: ``covenant.validation.record``"""
    attrs: dict[str, str | int | float | bool] = {
        "validation.key": record.key,
        "validation.field": record.field or "",
        "validation.valid": record.valid,
        "validation.message": record.message,
    }
    if record.expected is not None:
        attrs["validation.expected"] = record.expected
    if record.actual is not None:
        attrs["validation.actual"] = record.actual
    _add_span_event("covenant.validation.record", attrs)


def emit_validation_errors(ctx: ValidationContext) -> None:
    for record in ctx.records():
        if not record.valid:
            emit_validation_record(record)
