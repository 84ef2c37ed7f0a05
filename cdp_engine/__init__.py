"""Overcollateralized synthetic-dollar accounting engine."""
from .engine import PositionEngine
from .errors import (
    EngineError,
    HealthFactorBroken,
    HealthFactorNotImproved,
    HealthFactorOk,
    InsufficientCollateral,
    InsufficientDebt,
    MintFailed,
    NeedsMoreThanZero,
    PriceUnavailable,
    ReentrantCall,
    TokenAddressesAndPriceFeedAddressesMustBeSameLength,
    TokenNotAllowed,
    TransferFailed,
)
from .liquidation import LiquidationEngine
from .models import (
    AccountInformation,
    CollateralDeposited,
    CollateralRedeemed,
    LiquidationResult,
    PriceData,
    RiskParameters,
    SupportedAsset,
)
from .registry import AssetRegistry

__all__ = [
    "AccountInformation",
    "AssetRegistry",
    "CollateralDeposited",
    "CollateralRedeemed",
    "EngineError",
    "HealthFactorBroken",
    "HealthFactorNotImproved",
    "HealthFactorOk",
    "InsufficientCollateral",
    "InsufficientDebt",
    "LiquidationEngine",
    "LiquidationResult",
    "MintFailed",
    "NeedsMoreThanZero",
    "PositionEngine",
    "PriceData",
    "PriceUnavailable",
    "ReentrantCall",
    "RiskParameters",
    "SupportedAsset",
    "TokenAddressesAndPriceFeedAddressesMustBeSameLength",
    "TokenNotAllowed",
    "TransferFailed",
]
