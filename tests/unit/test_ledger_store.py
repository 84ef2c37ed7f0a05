"""Unit tests for the transactional ledger store."""
from __future__ import annotations

import logging

import pytest

from cdp_engine.errors import NeedsMoreThanZero, TransferFailed
from cdp_engine.ledger.store import Effect, LedgerStore, require_more_than_zero
from cdp_engine.models import CollateralDeposited


class Recorder:
    def __init__(self) -> None:
        self.events: list = []

    def on_event(self, event) -> None:
        self.events.append(event)


def _effect(log: list[str], name: str, ok: bool = True, undo: bool = False) -> Effect:
    def action() -> bool:
        log.append(name)
        return ok

    def compensate() -> bool:
        log.append(f"undo {name}")
        return True

    return Effect(
        description=name,
        action=action,
        failure=lambda: TransferFailed(name),
        compensate=compensate if undo else None,
    )


class TestRequireMoreThanZero:
    @pytest.mark.parametrize("amount", [0, -1])
    def test_rejects_non_positive(self, amount: int) -> None:
        with pytest.raises(NeedsMoreThanZero) as exc:
            require_more_than_zero(amount)
        assert exc.value.amount == amount

    def test_accepts_positive(self) -> None:
        require_more_than_zero(1)


class TestTransactions:
    def test_commit_on_success(self) -> None:
        store = LedgerStore()
        with store.transaction():
            store.set_collateral("a", "WETH", 5)
            store.set_debt("a", 3)
            assert store.collateral("a", "WETH") == 5
        assert store.collateral("a", "WETH") == 5
        assert store.debt("a") == 3

    def test_rollback_on_exception(self) -> None:
        store = LedgerStore()
        with store.transaction():
            store.set_debt("a", 1)

        with pytest.raises(RuntimeError):
            with store.transaction():
                store.set_debt("a", 10)
                store.set_collateral("a", "WETH", 7)
                raise RuntimeError("boom")

        assert store.debt("a") == 1
        assert store.collateral("a", "WETH") == 0
        assert not store.in_transaction

    def test_nested_transaction_joins_outer(self) -> None:
        store = LedgerStore()
        with pytest.raises(ValueError):
            with store.transaction() as outer:
                with store.transaction() as inner:
                    assert inner is outer
                    store.set_debt("a", 4)
                raise ValueError("outer fails")
        assert store.debt("a") == 0

    def test_write_outside_transaction_raises(self) -> None:
        store = LedgerStore()
        with pytest.raises(RuntimeError):
            store.set_debt("a", 1)

    def test_negative_balances_rejected(self) -> None:
        store = LedgerStore()
        with pytest.raises(ValueError):
            with store.transaction():
                store.set_collateral("a", "WETH", -1)

    def test_totals_include_overlay(self) -> None:
        store = LedgerStore()
        with store.transaction():
            store.set_collateral("a", "WETH", 5)
            store.set_collateral("b", "WETH", 6)
            store.set_collateral("b", "WBTC", 1)
            store.set_debt("a", 2)
        with store.transaction():
            store.set_collateral("a", "WETH", 1)
            assert store.collateral_total("WETH") == 7
            store.set_debt("b", 3)
            assert store.debt_total() == 5


class TestEffects:
    def test_pulls_run_before_pushes(self) -> None:
        store = LedgerStore()
        log: list[str] = []
        with store.transaction() as tx:
            tx.defer(_effect(log, "push"))
            tx.defer(_effect(log, "pull", undo=True))
        assert log == ["pull", "push"]

    def test_effects_deferred_until_block_exit(self) -> None:
        store = LedgerStore()
        log: list[str] = []
        with store.transaction() as tx:
            tx.defer(_effect(log, "pull", undo=True))
            assert log == []
        assert log == ["pull"]

    def test_no_effects_when_block_raises(self) -> None:
        store = LedgerStore()
        log: list[str] = []
        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.defer(_effect(log, "pull", undo=True))
                raise RuntimeError("invariant")
        assert log == []

    def test_failed_push_compensates_pulls_and_rolls_back(self) -> None:
        store = LedgerStore()
        log: list[str] = []
        with pytest.raises(TransferFailed):
            with store.transaction() as tx:
                store.set_debt("a", 9)
                tx.defer(_effect(log, "pull-1", undo=True))
                tx.defer(_effect(log, "pull-2", undo=True))
                tx.defer(_effect(log, "push", ok=False))
        assert log == ["pull-1", "pull-2", "push", "undo pull-2", "undo pull-1"]
        assert store.debt("a") == 0

    def test_raising_effect_compensates(self) -> None:
        store = LedgerStore()
        log: list[str] = []

        def explode() -> bool:
            raise KeyError("collaborator bug")

        with pytest.raises(KeyError):
            with store.transaction() as tx:
                tx.defer(_effect(log, "pull", undo=True))
                tx.defer(Effect("push", explode, lambda: TransferFailed("push")))
        assert log == ["pull", "undo pull"]


class TestEvents:
    def test_dispatched_after_commit(self) -> None:
        store = LedgerStore()
        recorder = Recorder()
        store.subscribe(recorder)
        event = CollateralDeposited(account="a", asset="WETH", amount=1)
        with store.transaction() as tx:
            tx.emit(event)
            assert recorder.events == []
        assert recorder.events == [event]

    def test_not_dispatched_on_rollback(self) -> None:
        store = LedgerStore()
        recorder = Recorder()
        store.subscribe(recorder)
        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.emit(CollateralDeposited(account="a", asset="WETH", amount=1))
                raise RuntimeError("boom")
        assert recorder.events == []

    def test_failing_listener_does_not_undo_commit(self) -> None:
        store = LedgerStore()

        class Broken:
            def on_event(self, event) -> None:
                raise RuntimeError("listener down")

        store.subscribe(Broken())
        with store.transaction() as tx:
            store.set_debt("a", 1)
            tx.emit(CollateralDeposited(account="a", asset="WETH", amount=1))
        assert store.debt("a") == 1


class TestCompensation:
    def test_raising_undo_does_not_stop_the_rest(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = LedgerStore()
        log: list[str] = []

        def pull() -> bool:
            log.append("pull-2")
            return True

        def broken_undo() -> bool:
            raise RuntimeError("undo crashed")

        with caplog.at_level(logging.ERROR, logger="cdp_engine.ledger.store"):
            with pytest.raises(TransferFailed):
                with store.transaction() as tx:
                    tx.defer(_effect(log, "pull-1", undo=True))
                    tx.defer(
                        Effect(
                            "pull-2",
                            pull,
                            lambda: TransferFailed("pull-2"),
                            compensate=broken_undo,
                        )
                    )
                    tx.defer(_effect(log, "push", ok=False))

        assert log == ["pull-1", "pull-2", "push", "undo pull-1"]
        assert "Undo of pull-2 raised" in caplog.text

    def test_refused_undo_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        store = LedgerStore()
        with caplog.at_level(logging.ERROR, logger="cdp_engine.ledger.store"):
            with pytest.raises(TransferFailed):
                with store.transaction() as tx:
                    tx.defer(
                        Effect("pull", lambda: True, lambda: TransferFailed(), lambda: False)
                    )
                    tx.defer(Effect("push", lambda: False, lambda: TransferFailed("push")))
        assert "Could not undo pull" in caplog.text


class TestCommittedView:
    def test_hides_staged_writes(self) -> None:
        store = LedgerStore()
        with store.transaction():
            store.set_collateral("a", "WETH", 5)
        with store.transaction():
            store.set_collateral("a", "WETH", 9)
            store.set_debt("a", 3)
            with store.committed_view():
                assert store.collateral("a", "WETH") == 5
                assert store.collateral_total("WETH") == 5
                assert store.debt("a") == 0
                assert store.debt_total() == 0
            assert store.collateral("a", "WETH") == 9

    def test_rejects_writes(self) -> None:
        store = LedgerStore()
        with store.transaction():
            with store.committed_view():
                with pytest.raises(RuntimeError, match="committed view"):
                    store.set_debt("a", 1)

    def test_outside_transaction_reads_committed(self) -> None:
        store = LedgerStore()
        with store.transaction():
            store.set_debt("a", 4)
        with store.committed_view():
            assert store.debt("a") == 4
