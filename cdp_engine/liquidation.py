"""Liquidation of undercollateralized positions."""
from __future__ import annotations

import logging

from .engine import PositionEngine
from .errors import HealthFactorNotImproved, HealthFactorOk
from .guard import NonReentrant, non_reentrant
from .ledger import require_more_than_zero
from .models import LiquidationResult

logger = logging.getLogger(__name__)


class LiquidationEngine:
    """Seizes collateral from unsafe accounts for liquidators who repay their debt.

    Shares the store and the reentrancy guard of the wrapped
    :class:`PositionEngine`, so a liquidation cannot interleave with any other
    engine call.
    """

    def __init__(self, engine: PositionEngine) -> None:
        self._engine = engine

    @property
    def _guard(self) -> NonReentrant:
        return self._engine.guard

    def preview(self, asset: str, debt_to_cover: int) -> tuple[int, int]:
        """Return ``(collateral_seized, bonus)`` for covering ``debt_to_cover``."""
        params = self._engine.params
        seized = self._engine._oracle.asset_amount_for_usd(asset, debt_to_cover)
        bonus = seized * params.liquidation_bonus // params.liquidation_precision
        return seized, bonus

    @non_reentrant
    def liquidate(
        self, liquidator: str, asset: str, victim: str, debt_to_cover: int
    ) -> LiquidationResult:
        """Repay ``debt_to_cover`` of ``victim``'s debt from ``liquidator``'s
        synthetic balance, paying the liquidator the equivalent collateral plus
        the liquidation bonus.

        Raises:
            HealthFactorOk: the victim is not below the minimum health factor.
            HealthFactorNotImproved: the victim's health factor did not
                strictly increase.
        """
        engine = self._engine
        require_more_than_zero(debt_to_cover)
        engine.registry.require(asset)

        starting = engine._health.health_factor(victim)
        if starting >= engine.params.min_health_factor:
            raise HealthFactorOk(starting)

        seized, bonus = self.preview(asset, debt_to_cover)

        with engine._store.transaction():
            engine._collateral.withdraw(victim, liquidator, asset, seized + bonus)
            engine._debt.burn(victim, liquidator, debt_to_cover)

            ending = engine._health.health_factor(victim)
            if ending <= starting:
                logger.warning(
                    "Liquidation of %s by %s did not improve health factor (%d -> %d)",
                    victim,
                    liquidator,
                    starting,
                    ending,
                )
                raise HealthFactorNotImproved(starting, ending)

        logger.info(
            "%s liquidated %s: covered %d debt for %d %s (bonus %d), HF %d -> %d",
            liquidator,
            victim,
            debt_to_cover,
            seized + bonus,
            asset,
            bonus,
            starting,
            ending,
        )
        return LiquidationResult(
            victim=victim,
            liquidator=liquidator,
            asset=asset,
            debt_covered=debt_to_cover,
            collateral_seized=seized,
            bonus=bonus,
            starting_health_factor=starting,
            ending_health_factor=ending,
        )
