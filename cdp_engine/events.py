"""Event listeners shipped with the engine."""
from __future__ import annotations

import logging

from .models import CollateralDeposited, CollateralRedeemed, EngineEvent

logger = logging.getLogger(__name__)


class LoggingEventListener:
    """Log every committed engine event at INFO."""

    def on_event(self, event: EngineEvent) -> None:
        if isinstance(event, CollateralDeposited):
            logger.info(
                "CollateralDeposited account=%s asset=%s amount=%d",
                event.account,
                event.asset,
                event.amount,
            )
        elif isinstance(event, CollateralRedeemed):
            logger.info(
                "CollateralRedeemed from=%s to=%s asset=%s amount=%d",
                event.redeemed_from,
                event.redeemed_to,
                event.asset,
                event.amount,
            )
        else:
            logger.info("Engine event %r", event)
