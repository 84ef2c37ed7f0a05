"""Collateral and debt ledgers backed by a transactional store."""
from .collateral import CollateralLedger
from .debt import DebtLedger
from .store import Effect, LedgerStore, Transaction, require_more_than_zero

__all__ = [
    "CollateralLedger",
    "DebtLedger",
    "Effect",
    "LedgerStore",
    "Transaction",
    "require_more_than_zero",
]
