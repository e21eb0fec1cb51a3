"""
One validation run: build the validator, run its pipeline, emit telemetry.

The returned context holds every check and error; a run only raises for
input problems (before the pipeline starts) and collaborator failures.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from opentelemetry import trace as otel_trace

from covenant_validator.context import ValidationContext
from covenant_validator.metadata import CovenantMetadata
from covenant_validator.otel import emit_validation_errors, emit_validation_result
from covenant_validator.types import DEFAULT_RELEASE_TAG
from covenant_validator.validations.common import Clock
from covenant_validator.validations.dispatch import build_validator

logger = logging.getLogger(__name__)

tracer = otel_trace.get_tracer(__name__)


def validate_covenant(
    metadata: CovenantMetadata,
    payload: Any,
    services: Any,
    release_tag: Optional[str] = None,
    clock: Clock = time.time,
) -> ValidationContext:
    """Validate ``payload`` against live state and return the filled context."""
    validator = build_validator(metadata.contract, payload)
    ctx = metadata.to_context()
    release_tag = release_tag or DEFAULT_RELEASE_TAG

    logger.info("Validating %s deployment (release %s)", metadata.contract.value, release_tag)
    with tracer.start_as_current_span(
        "covenant.validate",
        attributes={
            "covenant.type": metadata.contract.value,
            "covenant.release": release_tag,
            "covenant.party_a_chain": metadata.party_a_chain_name,
        },
    ):
        validator.validate(ctx, services, release_tag=release_tag, clock=clock)
        emit_validation_errors(ctx)
        emit_validation_result(ctx, metadata.contract)
    return ctx
