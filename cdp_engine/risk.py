"""Health factor — threshold-adjusted collateral value over debt."""
from __future__ import annotations

from .constants import MAX_HEALTH_FACTOR
from .ledger import CollateralLedger, DebtLedger
from .models import AccountInformation, RiskParameters
from .pricing import PriceOracleAdapter
from .registry import AssetRegistry


def calculate_health_factor(
    total_debt: int, collateral_value_usd: int, params: RiskParameters
) -> int:
    """Calculate health factor (18-decimal fixed point).

    health_factor = (collateral * threshold / liquidation_precision) * PRECISION / debt

    An account without debt is unconditionally safe and gets
    ``MAX_HEALTH_FACTOR``.
    """
    if total_debt == 0:
        return MAX_HEALTH_FACTOR
    adjusted = (
        collateral_value_usd * params.liquidation_threshold // params.liquidation_precision
    )
    return adjusted * params.precision // total_debt


class HealthFactorCalculator:
    """Reads both ledgers and the oracle on every call; nothing is cached."""

    def __init__(
        self,
        registry: AssetRegistry,
        collateral: CollateralLedger,
        debt: DebtLedger,
        oracle: PriceOracleAdapter,
        params: RiskParameters,
    ) -> None:
        self._registry = registry
        self._collateral = collateral
        self._debt = debt
        self._oracle = oracle
        self._params = params

    def account_collateral_value(self, account: str) -> int:
        total = 0
        for asset in self._registry:
            amount = self._collateral.balance(account, asset.symbol)
            if amount:
                total += self._oracle.usd_value(asset.symbol, amount)
        return total

    def account_information(self, account: str) -> AccountInformation:
        return AccountInformation(
            total_debt=self._debt.balance(account),
            collateral_value_usd=self.account_collateral_value(account),
        )

    def health_factor(self, account: str) -> int:
        debt = self._debt.balance(account)
        if debt == 0:
            return MAX_HEALTH_FACTOR
        return calculate_health_factor(
            debt, self.account_collateral_value(account), self._params
        )

    def is_safe(self, account: str) -> bool:
        return self.health_factor(account) >= self._params.min_health_factor
