"""Unit tests for data models and constants."""
from __future__ import annotations

import pytest

from cdp_engine.constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from cdp_engine.models import (
    CollateralDeposited,
    CollateralRedeemed,
    LiquidationResult,
    PriceData,
    RiskParameters,
    SupportedAsset,
)


class TestRiskParameters:
    def test_defaults(self) -> None:
        params = RiskParameters()
        assert params.liquidation_threshold == LIQUIDATION_THRESHOLD == 50
        assert params.liquidation_precision == LIQUIDATION_PRECISION == 100
        assert params.liquidation_bonus == LIQUIDATION_BONUS == 10
        assert params.min_health_factor == MIN_HEALTH_FACTOR == 10**18
        assert params.precision == PRECISION == 10**18

    def test_frozen(self) -> None:
        params = RiskParameters()
        with pytest.raises(AttributeError):
            params.liquidation_bonus = 50  # type: ignore[misc]

    def test_max_health_factor_is_uint256_max(self) -> None:
        assert MAX_HEALTH_FACTOR == 2**256 - 1


class TestSupportedAsset:
    def test_default_decimals(self) -> None:
        asset = SupportedAsset(symbol="WETH", feed_id="eth-usd")
        assert asset.decimals == 18

    def test_equality(self) -> None:
        assert SupportedAsset("WETH", "eth-usd") == SupportedAsset("WETH", "eth-usd")


class TestPriceData:
    def test_default_decimals(self) -> None:
        assert PriceData(price=2000 * 10**8).decimals == 8


class TestLiquidationResult:
    def test_total_seized(self) -> None:
        result = LiquidationResult(
            victim="v",
            liquidator="l",
            asset="WETH",
            debt_covered=100,
            collateral_seized=50,
            bonus=5,
            starting_health_factor=1,
            ending_health_factor=2,
        )
        assert result.total_seized == 55


class TestEvents:
    def test_frozen(self) -> None:
        event = CollateralDeposited(account="a", asset="WETH", amount=1)
        with pytest.raises(AttributeError):
            event.amount = 2  # type: ignore[misc]

    def test_redeemed_fields(self) -> None:
        event = CollateralRedeemed(
            redeemed_from="a", redeemed_to="b", asset="WETH", amount=3
        )
        assert (event.redeemed_from, event.redeemed_to) == ("a", "b")


@pytest.mark.parametrize(
    "model",
    [
        PriceData,
        SupportedAsset,
        RiskParameters,
        LiquidationResult,
        CollateralDeposited,
        CollateralRedeemed,
    ],
)
def test_models_are_documented(model: type) -> None:
    # dataclass() fills in "Name(field: type, ...)" when no docstring is written
    assert model.__doc__
    assert not model.__doc__.startswith(f"{model.__name__}(")
