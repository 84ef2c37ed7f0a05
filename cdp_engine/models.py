"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    PRECISION,
)


@dataclass(frozen=True)
class PriceData:
    """Latest answer of a price feed: ``price / 10**decimals`` USD."""

    price: int
    decimals: int = 8


@dataclass(frozen=True)
class SupportedAsset:
    """Registered collateral type."""

    symbol: str
    feed_id: str
    decimals: int = 18


@dataclass(frozen=True)
class RiskParameters:
    """Fixed risk parameters of an engine instance."""

    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_precision: int = LIQUIDATION_PRECISION
    liquidation_bonus: int = LIQUIDATION_BONUS
    min_health_factor: int = MIN_HEALTH_FACTOR
    precision: int = PRECISION


@dataclass(frozen=True)
class AccountInformation:
    """Debt and threshold-free collateral value of an account (18-decimal USD)."""

    total_debt: int
    collateral_value_usd: int


@dataclass(frozen=True)
class LiquidationResult:
    """Outcome of one committed liquidation."""

    victim: str
    liquidator: str
    asset: str
    debt_covered: int
    collateral_seized: int
    bonus: int
    starting_health_factor: int
    ending_health_factor: int

    @property
    def total_seized(self) -> int:
        return self.collateral_seized + self.bonus


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralDeposited:
    """Collateral moved from an account into engine custody."""

    account: str
    asset: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    """Collateral released from one account's position to a recipient."""

    redeemed_from: str
    redeemed_to: str
    asset: str
    amount: int


EngineEvent = Union[CollateralDeposited, CollateralRedeemed]
