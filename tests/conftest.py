"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from cdp_engine.config import AssetConfig, EngineConfig, PriceOracleConfig, PythConfig, RiskConfig
from cdp_engine.engine import PositionEngine
from cdp_engine.liquidation import LiquidationEngine
from cdp_engine.models import EngineEvent
from cdp_engine.oracles.static import StaticPriceFeed
from cdp_engine.registry import AssetRegistry
from cdp_engine.tokens import InMemoryToken

ETH_FEED = "eth-usd"
BTC_FEED = "btc-usd"
ETH_USD_PRICE = 2000 * 10**8  # $2000, 8-decimal feed
BTC_USD_PRICE = 1000 * 10**8

USER = "alice"
LIQUIDATOR = "liquidator"
STARTING_BALANCE = 10 * 10**18
COLLATERAL_AMOUNT = 10 * 10**18
AMOUNT_TO_MINT = 100 * 10**18


class RecordingListener:
    """Collects every delivered event."""

    def __init__(self) -> None:
        self.events: list[EngineEvent] = []

    def on_event(self, event: EngineEvent) -> None:
        self.events.append(event)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> AssetRegistry:
    return AssetRegistry.from_lists(["WETH", "WBTC"], [ETH_FEED, BTC_FEED])


@pytest.fixture()
def price_feed() -> StaticPriceFeed:
    feed = StaticPriceFeed()
    feed.set_price(ETH_FEED, ETH_USD_PRICE)
    feed.set_price(BTC_FEED, BTC_USD_PRICE)
    return feed


@pytest.fixture()
def weth() -> InMemoryToken:
    token = InMemoryToken("WETH")
    token.mint(USER, STARTING_BALANCE)
    return token


@pytest.fixture()
def wbtc() -> InMemoryToken:
    token = InMemoryToken("WBTC")
    token.mint(USER, STARTING_BALANCE)
    return token


@pytest.fixture()
def synthetic() -> InMemoryToken:
    return InMemoryToken("cdpUSD")


@pytest.fixture()
def engine(
    registry: AssetRegistry,
    price_feed: StaticPriceFeed,
    weth: InMemoryToken,
    wbtc: InMemoryToken,
    synthetic: InMemoryToken,
) -> PositionEngine:
    return PositionEngine(registry, price_feed, {"WETH": weth, "WBTC": wbtc}, synthetic)


@pytest.fixture()
def liquidations(engine: PositionEngine) -> LiquidationEngine:
    return LiquidationEngine(engine)


@pytest.fixture()
def listener(engine: PositionEngine) -> RecordingListener:
    recorder = RecordingListener()
    engine.subscribe(recorder)
    return recorder


@pytest.fixture()
def deposited(engine: PositionEngine) -> PositionEngine:
    engine.deposit_collateral(USER, "WETH", COLLATERAL_AMOUNT)
    return engine


@pytest.fixture()
def deposited_and_minted(engine: PositionEngine) -> PositionEngine:
    engine.deposit_collateral_and_mint(USER, "WETH", COLLATERAL_AMOUNT, AMOUNT_TO_MINT)
    return engine


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_engine_config() -> EngineConfig:
    return EngineConfig(
        risk=RiskConfig(),
        assets=(
            AssetConfig(symbol="WETH", feed_id="aaa111", decimals=18),
            AssetConfig(symbol="WBTC", feed_id="bbb222", decimals=8),
        ),
        price_oracle=PriceOracleConfig(
            provider="pyth",
            pyth=PythConfig(hermes_url="https://hermes.example.com", timeout=5),
        ),
    )


SAMPLE_YAML = textwrap.dedent("""\
    risk:
      liquidation_threshold: 50
      liquidation_precision: 100
      liquidation_bonus: 10
      min_health_factor: 1e18
    assets:
      - symbol: WETH
        feed_id: "0xaaa111"
        decimals: 18
      - symbol: WBTC
        feed_id: "0xbbb222"
        decimals: 8
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        timeout: 10
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
