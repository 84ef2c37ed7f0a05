"""Per-account debt in synthetic-dollar units (18 decimals)."""
from __future__ import annotations

import logging

from ..errors import InsufficientDebt, MintFailed, TransferFailed
from ..interfaces.token import SyntheticAsset
from .store import Effect, LedgerStore, require_more_than_zero

logger = logging.getLogger(__name__)


class DebtLedger:
    """Mint / burn primitives over the store's debt balances."""

    def __init__(self, store: LedgerStore, synthetic: SyntheticAsset) -> None:
        self._store = store
        self._synthetic = synthetic

    def balance(self, account: str) -> int:
        return self._store.debt(account)

    def total(self) -> int:
        return self._store.debt_total()

    def mint(self, account: str, amount: int) -> None:
        require_more_than_zero(amount)
        synthetic = self._synthetic

        with self._store.transaction() as tx:
            debt = self._store.debt(account)
            self._store.set_debt(account, debt + amount)
            logger.debug("Debt %s: %d -> %d", account, debt, debt + amount)
            tx.defer(
                Effect(
                    description=f"mint {amount} to {account}",
                    action=lambda: synthetic.mint(account, amount),
                    failure=lambda: MintFailed(account, amount),
                )
            )

    def burn(self, on_behalf_of: str, payer: str, amount: int) -> None:
        """Reduce ``on_behalf_of``'s debt, destroying ``amount`` pulled from ``payer``."""
        require_more_than_zero(amount)
        synthetic = self._synthetic

        with self._store.transaction() as tx:
            debt = self._store.debt(on_behalf_of)
            if amount > debt:
                raise InsufficientDebt(on_behalf_of, debt, amount)
            self._store.set_debt(on_behalf_of, debt - amount)
            logger.debug("Debt %s: %d -> %d", on_behalf_of, debt, debt - amount)
            tx.defer(
                Effect(
                    description=f"burn {amount} from {payer}",
                    action=lambda: synthetic.burn_from(payer, amount),
                    failure=lambda: TransferFailed(f"burn_from {payer} ({amount})"),
                    compensate=lambda: synthetic.mint(payer, amount),
                )
            )
