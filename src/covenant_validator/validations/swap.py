"""Swap covenant validation."""

from __future__ import annotations

import logging
import time
from typing import Any

from covenant_validator.context import ValidationContext
from covenant_validator.messages import SwapInstantiateMsg
from covenant_validator.types import DEFAULT_RELEASE_TAG, CovenantType
from covenant_validator.validations.common import Clock, validate_label

logger = logging.getLogger(__name__)


class SwapCovenantValidator:
    """Validate a swap covenant instantiation message.

    Only the label is checked so far; the report carries a warning so a
    swap covenant never reads as fully verified.
    """

    covenant_type = CovenantType.SWAP

    def __init__(self, msg: SwapInstantiateMsg) -> None:
        self.msg = msg

    def validate(
        self,
        ctx: ValidationContext,
        services: Any,
        release_tag: str = DEFAULT_RELEASE_TAG,
        clock: Clock = time.time,
    ) -> None:
        msg = self.msg
        logger.debug("%s: %r", self.covenant_type.value, msg)
        logger.info("Processing covenant %r", msg.label)

        validate_label(ctx, msg.label)

        logger.warning("swap covenant: only the label is validated")
        ctx.record_valid_field(
            "covenant",
            "validation",
            "swap-specific checks are not implemented: only the label was validated",
            warning=True,
        )
