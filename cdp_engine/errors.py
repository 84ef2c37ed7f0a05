"""Engine error taxonomy — every failure aborts the whole call."""
from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class NeedsMoreThanZero(EngineError):
    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(f"Amount must be more than zero, got {amount}")


class TokenNotAllowed(EngineError):
    def __init__(self, asset: str) -> None:
        self.asset = asset
        super().__init__(f"Token '{asset}' is not a supported collateral")


class TokenAddressesAndPriceFeedAddressesMustBeSameLength(EngineError):
    def __init__(self, assets: int, feeds: int) -> None:
        self.assets = assets
        self.feeds = feeds
        super().__init__(
            f"Got {assets} collateral assets but {feeds} price feeds"
        )


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class InsufficientCollateral(EngineError):
    def __init__(self, account: str, asset: str, balance: int, requested: int) -> None:
        self.account = account
        self.asset = asset
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"{account} holds {balance} {asset}, cannot withdraw {requested}"
        )


class InsufficientDebt(EngineError):
    def __init__(self, account: str, balance: int, requested: int) -> None:
        self.account = account
        self.balance = balance
        self.requested = requested
        super().__init__(f"{account} owes {balance}, cannot burn {requested}")


# ---------------------------------------------------------------------------
# Invariant / liquidation
# ---------------------------------------------------------------------------


class HealthFactorBroken(EngineError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"Health factor broken: {health_factor}")


class HealthFactorOk(EngineError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(
            f"Position is healthy ({health_factor}) and cannot be liquidated"
        )


class HealthFactorNotImproved(EngineError):
    def __init__(self, starting: int, ending: int) -> None:
        self.starting = starting
        self.ending = ending
        super().__init__(
            f"Liquidation did not improve health factor ({starting} -> {ending})"
        )


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class TransferFailed(EngineError):
    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"Transfer failed: {detail}" if detail else "Transfer failed")


class MintFailed(EngineError):
    def __init__(self, account: str, amount: int) -> None:
        self.account = account
        self.amount = amount
        super().__init__(f"Minting {amount} to {account} failed")


class PriceUnavailable(EngineError):
    def __init__(self, feed_id: str) -> None:
        self.feed_id = feed_id
        super().__init__(f"No price available for feed '{feed_id}'")


class ReentrantCall(EngineError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Reentrant call rejected: {operation}")
