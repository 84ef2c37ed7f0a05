"""Position engine — deposit, mint, burn and redeem under the health invariant."""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Mapping, TypeVar

from .constants import ENGINE_CUSTODY
from .errors import HealthFactorBroken
from .guard import NonReentrant, non_reentrant
from .interfaces.event_listener import EventListener
from .interfaces.price_feed import PriceFeed
from .interfaces.token import CollateralToken, SyntheticAsset
from .ledger import CollateralLedger, DebtLedger, LedgerStore
from .models import AccountInformation, RiskParameters
from .pricing import PriceOracleAdapter
from .registry import AssetRegistry
from .risk import HealthFactorCalculator, calculate_health_factor

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def committed_read(method: F) -> F:
    """Answer ``method`` from committed ledger state, never a staged overlay."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._store.committed_view():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class PositionEngine:
    """Orchestrates collateral and debt ledgers for every account.

    Each public mutating call is atomic and non-reentrant: it either commits
    all of its ledger writes and collaborator calls, or none of them. Any
    account left with debt must end the call with a health factor of at
    least ``min_health_factor``.

    The ledgers are private. Queries only ever report committed balances, so
    a collaborator called back mid-operation sees the state from before the
    call.
    """

    def __init__(
        self,
        registry: AssetRegistry,
        price_feed: PriceFeed,
        collateral_tokens: Mapping[str, CollateralToken],
        synthetic: SyntheticAsset,
        params: RiskParameters | None = None,
        custody: str = ENGINE_CUSTODY,
    ) -> None:
        self.registry = registry
        self.params = params or RiskParameters()
        self.custody = custody

        self._store = LedgerStore()
        self._guard = NonReentrant()
        self._oracle = PriceOracleAdapter(registry, price_feed)
        self._collateral = CollateralLedger(
            self._store, registry, collateral_tokens, custody
        )
        self._debt = DebtLedger(self._store, synthetic)
        self._health = HealthFactorCalculator(
            registry, self._collateral, self._debt, self._oracle, self.params
        )

    @property
    def guard(self) -> NonReentrant:
        return self._guard

    def subscribe(self, listener: EventListener) -> None:
        """Deliver committed CollateralDeposited / CollateralRedeemed events."""
        self._store.subscribe(listener)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    @non_reentrant
    def deposit_collateral(self, account: str, asset: str, amount: int) -> None:
        with self._store.transaction():
            self._collateral.deposit(account, asset, amount)
        logger.info("%s deposited %d %s", account, amount, asset)

    @non_reentrant
    def deposit_collateral_and_mint(
        self, account: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        with self._store.transaction():
            self._collateral.deposit(account, asset, collateral_amount)
            self._debt.mint(account, debt_amount)
            self._revert_if_health_factor_is_broken(account)
        logger.info(
            "%s deposited %d %s and minted %d",
            account,
            collateral_amount,
            asset,
            debt_amount,
        )

    @non_reentrant
    def redeem_collateral(self, account: str, asset: str, amount: int) -> None:
        with self._store.transaction():
            self._collateral.withdraw(account, account, asset, amount)
            self._revert_if_health_factor_is_broken(account)
        logger.info("%s redeemed %d %s", account, amount, asset)

    @non_reentrant
    def redeem_collateral_for_debt(
        self, account: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        with self._store.transaction():
            self._debt.burn(account, account, debt_amount)
            self._collateral.withdraw(account, account, asset, collateral_amount)
            self._revert_if_health_factor_is_broken(account)
        logger.info(
            "%s burned %d and redeemed %d %s",
            account,
            debt_amount,
            collateral_amount,
            asset,
        )

    @non_reentrant
    def burn_debt(self, account: str, amount: int) -> None:
        with self._store.transaction():
            self._debt.burn(account, account, amount)
            # Burning cannot lower the health factor; checked for symmetry.
            self._revert_if_health_factor_is_broken(account)
        logger.info("%s burned %d", account, amount)

    @non_reentrant
    def mint_debt(self, account: str, amount: int) -> None:
        with self._store.transaction():
            self._debt.mint(account, amount)
            self._revert_if_health_factor_is_broken(account)
        logger.info("%s minted %d", account, amount)

    def _revert_if_health_factor_is_broken(self, account: str) -> None:
        health_factor = self._health.health_factor(account)
        if health_factor < self.params.min_health_factor:
            logger.warning(
                "Rejected operation for %s: health factor %d below %d",
                account,
                health_factor,
                self.params.min_health_factor,
            )
            raise HealthFactorBroken(health_factor)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @committed_read
    def get_account_information(self, account: str) -> AccountInformation:
        return self._health.account_information(account)

    @committed_read
    def get_collateral_balance(self, account: str, asset: str) -> int:
        return self._collateral.balance(account, asset)

    @committed_read
    def get_account_collateral_value(self, account: str) -> int:
        return self._health.account_collateral_value(account)

    def get_usd_value(self, asset: str, amount: int) -> int:
        return self._oracle.usd_value(asset, amount)

    def get_token_amount_from_usd(self, asset: str, usd_amount: int) -> int:
        return self._oracle.asset_amount_for_usd(asset, usd_amount)

    def get_collateral_tokens(self) -> tuple[str, ...]:
        return self.registry.symbols

    def get_collateral_price_feed(self, asset: str) -> str:
        return self.registry.get(asset).feed_id

    @committed_read
    def get_health_factor(self, account: str) -> int:
        return self._health.health_factor(account)

    def calculate_health_factor(self, total_debt: int, collateral_value_usd: int) -> int:
        return calculate_health_factor(total_debt, collateral_value_usd, self.params)

    @committed_read
    def get_total_collateral(self, asset: str) -> int:
        return self._collateral.total(asset)

    @committed_read
    def get_total_debt(self) -> int:
        return self._debt.total()

    @property
    def precision(self) -> int:
        return self.params.precision

    @property
    def liquidation_threshold(self) -> int:
        return self.params.liquidation_threshold

    @property
    def liquidation_precision(self) -> int:
        return self.params.liquidation_precision

    @property
    def liquidation_bonus(self) -> int:
        return self.params.liquidation_bonus

    @property
    def min_health_factor(self) -> int:
        return self.params.min_health_factor
