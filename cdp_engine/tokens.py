"""In-memory token used as collateral transferor and synthetic issuer."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Fungible balance map.

    Transfers and burns report ``False`` instead of raising when the source
    cannot cover them, the way ERC-20 style collaborators signal failure.
    """

    def __init__(self, symbol: str, decimals: int = 18) -> None:
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def mint(self, to: str, amount: int) -> bool:
        if amount <= 0:
            return False
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        logger.debug("%s mint %d to %s", self.symbol, amount, to)
        return True

    def burn_from(self, payer: str, amount: int) -> bool:
        balance = self.balance_of(payer)
        if amount <= 0 or amount > balance:
            return False
        self._balances[payer] = balance - amount
        self._total_supply -= amount
        logger.debug("%s burn %d from %s", self.symbol, amount, payer)
        return True

    def transfer(self, src: str, dst: str, amount: int) -> bool:
        balance = self.balance_of(src)
        if amount < 0 or amount > balance:
            return False
        self._balances[src] = balance - amount
        self._balances[dst] = self.balance_of(dst) + amount
        logger.debug("%s transfer %d %s -> %s", self.symbol, amount, src, dst)
        return True

    def transfer_from(self, src: str, dst: str, amount: int) -> bool:
        return self.transfer(src, dst, amount)
