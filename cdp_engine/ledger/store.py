"""Ledger state with transactional overlays.

All collateral and debt balances of one engine live in a :class:`LedgerStore`.
Mutations are only allowed inside :meth:`LedgerStore.transaction`, which
stages them in an overlay. Calls to external collaborators are deferred onto
the open transaction and run once the calling operation has validated its
invariants. The overlay is committed only if every deferred call succeeds;
any exception discards it, so a failed call leaves no trace.

Reads see the open overlay, except inside :meth:`LedgerStore.committed_view`,
which serves the last committed balances to callers outside the running
operation.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from ..errors import EngineError, NeedsMoreThanZero
from ..interfaces.event_listener import EventListener
from ..models import EngineEvent

logger = logging.getLogger(__name__)


def require_more_than_zero(amount: int) -> None:
    if amount <= 0:
        raise NeedsMoreThanZero(amount)


@dataclass(frozen=True)
class Effect:
    """A deferred collaborator call.

    ``action`` returns the collaborator's success flag; ``failure`` builds the
    error raised when it reports ``False``. Effects with a ``compensate``
    callable pull value into the engine and can be undone; those without
    push value out and run after every pull.
    """

    description: str
    action: Callable[[], bool]
    failure: Callable[[], EngineError]
    compensate: Optional[Callable[[], bool]] = None


class Transaction:
    """Overlay of staged writes, deferred effects and pending events."""

    def __init__(self) -> None:
        self.collateral: dict[tuple[str, str], int] = {}
        self.debt: dict[str, int] = {}
        self.events: list[EngineEvent] = []
        self._pulls: list[Effect] = []
        self._pushes: list[Effect] = []

    def defer(self, effect: Effect) -> None:
        if effect.compensate is not None:
            self._pulls.append(effect)
        else:
            self._pushes.append(effect)

    def emit(self, event: EngineEvent) -> None:
        self.events.append(event)

    def run_effects(self) -> None:
        """Run pulls then pushes; undo applied pulls if any call fails."""
        applied: list[Effect] = []
        for effect in [*self._pulls, *self._pushes]:
            logger.debug("Running %s", effect.description)
            try:
                ok = effect.action()
            except Exception:
                self._compensate(applied)
                raise
            if not ok:
                self._compensate(applied)
                raise effect.failure()
            applied.append(effect)

    @staticmethod
    def _compensate(applied: list[Effect]) -> None:
        for effect in reversed(applied):
            if effect.compensate is None:
                continue
            try:
                undone = effect.compensate()
            except Exception:
                logger.exception("Undo of %s raised", effect.description)
                continue
            if not undone:
                logger.error("Could not undo %s", effect.description)


class LedgerStore:
    """Committed balances of one engine plus the currently open transaction."""

    def __init__(self) -> None:
        self._collateral: dict[tuple[str, str], int] = {}
        self._debt: dict[str, int] = {}
        self._tx: Transaction | None = None
        self._hidden = 0
        self._listeners: list[EventListener] = []

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Open a transaction, or join the one already open."""
        if self._tx is not None:
            yield self._tx
            return

        tx = Transaction()
        self._tx = tx
        try:
            yield tx
            tx.run_effects()
        except BaseException:
            logger.debug(
                "Rolled back %d collateral / %d debt writes",
                len(tx.collateral),
                len(tx.debt),
            )
            raise
        else:
            self._collateral.update(tx.collateral)
            self._debt.update(tx.debt)
        finally:
            self._tx = None

        for event in tx.events:
            self._dispatch(event)

    @property
    def in_transaction(self) -> bool:
        return self._tx is not None

    @contextmanager
    def committed_view(self) -> Iterator[None]:
        """Serve reads inside the block from committed balances only."""
        self._hidden += 1
        try:
            yield
        finally:
            self._hidden -= 1

    def _overlay(self) -> Transaction | None:
        if self._tx is None or self._hidden:
            return None
        return self._tx

    def _current(self) -> Transaction:
        if self._tx is None:
            raise RuntimeError("Ledger writes require an open transaction")
        if self._hidden:
            raise RuntimeError("Ledger writes are not allowed in a committed view")
        return self._tx

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def _dispatch(self, event: EngineEvent) -> None:
        for listener in self._listeners:
            try:
                listener.on_event(event)
            except Exception:
                # State is already committed; a broken listener must not undo it.
                logger.exception("Event listener %r failed on %r", listener, event)

    # ------------------------------------------------------------------
    # Collateral
    # ------------------------------------------------------------------

    def collateral(self, account: str, asset: str) -> int:
        key = (account, asset)
        tx = self._overlay()
        if tx is not None and key in tx.collateral:
            return tx.collateral[key]
        return self._collateral.get(key, 0)

    def set_collateral(self, account: str, asset: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Negative collateral balance for {account}/{asset}")
        self._current().collateral[(account, asset)] = amount

    def collateral_total(self, asset: str) -> int:
        merged = dict(self._collateral)
        tx = self._overlay()
        if tx is not None:
            merged.update(tx.collateral)
        return sum(v for (_, a), v in merged.items() if a == asset)

    # ------------------------------------------------------------------
    # Debt
    # ------------------------------------------------------------------

    def debt(self, account: str) -> int:
        tx = self._overlay()
        if tx is not None and account in tx.debt:
            return tx.debt[account]
        return self._debt.get(account, 0)

    def set_debt(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Negative debt balance for {account}")
        self._current().debt[account] = amount

    def debt_total(self) -> int:
        merged = dict(self._debt)
        tx = self._overlay()
        if tx is not None:
            merged.update(tx.debt)
        return sum(merged.values())
