"""Per-account, per-asset collateral balances held in engine custody."""
from __future__ import annotations

import logging
from typing import Mapping

from ..errors import InsufficientCollateral, TransferFailed
from ..interfaces.token import CollateralToken
from ..models import CollateralDeposited, CollateralRedeemed
from ..registry import AssetRegistry
from .store import Effect, LedgerStore, require_more_than_zero

logger = logging.getLogger(__name__)


class CollateralLedger:
    """Deposit / withdraw primitives over the store's collateral balances."""

    def __init__(
        self,
        store: LedgerStore,
        registry: AssetRegistry,
        tokens: Mapping[str, CollateralToken],
        custody: str,
    ) -> None:
        missing = [s for s in registry.symbols if s not in tokens]
        if missing:
            raise ValueError(f"No token collaborator for collateral {missing}")
        self._store = store
        self._registry = registry
        self._tokens = dict(tokens)
        self._custody = custody

    def balance(self, account: str, asset: str) -> int:
        self._registry.require(asset)
        return self._store.collateral(account, asset)

    def balances(self, account: str) -> dict[str, int]:
        return {s: self._store.collateral(account, s) for s in self._registry.symbols}

    def total(self, asset: str) -> int:
        """Collateral of ``asset`` held in custody across all accounts."""
        self._registry.require(asset)
        return self._store.collateral_total(asset)

    def deposit(self, account: str, asset: str, amount: int) -> None:
        require_more_than_zero(amount)
        self._registry.require(asset)
        token = self._tokens[asset]
        custody = self._custody

        with self._store.transaction() as tx:
            balance = self._store.collateral(account, asset)
            self._store.set_collateral(account, asset, balance + amount)
            logger.debug("Collateral %s/%s: %d -> %d", account, asset, balance, balance + amount)
            tx.emit(CollateralDeposited(account=account, asset=asset, amount=amount))
            tx.defer(
                Effect(
                    description=f"pull {amount} {asset} from {account}",
                    action=lambda: token.transfer_from(account, custody, amount),
                    failure=lambda: TransferFailed(
                        f"{asset} transfer_from {account} -> {custody} ({amount})"
                    ),
                    compensate=lambda: token.transfer(custody, account, amount),
                )
            )

    def withdraw(self, redeemed_from: str, redeemed_to: str, asset: str, amount: int) -> None:
        """Move ``amount`` of ``from``'s collateral out of custody to ``to``."""
        require_more_than_zero(amount)
        self._registry.require(asset)
        token = self._tokens[asset]
        custody = self._custody

        with self._store.transaction() as tx:
            balance = self._store.collateral(redeemed_from, asset)
            if amount > balance:
                raise InsufficientCollateral(redeemed_from, asset, balance, amount)
            self._store.set_collateral(redeemed_from, asset, balance - amount)
            logger.debug(
                "Collateral %s/%s: %d -> %d", redeemed_from, asset, balance, balance - amount
            )
            tx.emit(
                CollateralRedeemed(
                    redeemed_from=redeemed_from,
                    redeemed_to=redeemed_to,
                    asset=asset,
                    amount=amount,
                )
            )
            tx.defer(
                Effect(
                    description=f"push {amount} {asset} to {redeemed_to}",
                    action=lambda: token.transfer(custody, redeemed_to, amount),
                    failure=lambda: TransferFailed(
                        f"{asset} transfer {custody} -> {redeemed_to} ({amount})"
                    ),
                )
            )
