"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
)
from .models import RiskParameters, SupportedAsset

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiskConfig:
    liquidation_threshold: int = LIQUIDATION_THRESHOLD
    liquidation_precision: int = LIQUIDATION_PRECISION
    liquidation_bonus: int = LIQUIDATION_BONUS
    min_health_factor: int = MIN_HEALTH_FACTOR


@dataclass(frozen=True)
class AssetConfig:
    symbol: str = ""
    feed_id: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    timeout: int = 30


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class EngineConfig:
    risk: RiskConfig = field(default_factory=RiskConfig)
    assets: tuple[AssetConfig, ...] = ()
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)

    def risk_parameters(self) -> RiskParameters:
        return RiskParameters(
            liquidation_threshold=self.risk.liquidation_threshold,
            liquidation_precision=self.risk.liquidation_precision,
            liquidation_bonus=self.risk.liquidation_bonus,
            min_health_factor=self.risk.min_health_factor,
        )

    def supported_assets(self) -> list[SupportedAsset]:
        return [
            SupportedAsset(symbol=a.symbol, feed_id=a.feed_id, decimals=a.decimals)
            for a in self.assets
        ]


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _as_int(value: Any) -> int:
    """Exact integer from YAML scalars; "1e18" is read as a string by YAML."""
    return int(Decimal(str(value)))


def _build_risk(raw: dict[str, Any]) -> RiskConfig:
    return RiskConfig(
        liquidation_threshold=int(raw.get("liquidation_threshold", LIQUIDATION_THRESHOLD)),
        liquidation_precision=int(raw.get("liquidation_precision", LIQUIDATION_PRECISION)),
        liquidation_bonus=int(raw.get("liquidation_bonus", LIQUIDATION_BONUS)),
        min_health_factor=_as_int(raw.get("min_health_factor", MIN_HEALTH_FACTOR)),
    )


def _build_assets(raw: list[dict[str, Any]]) -> tuple[AssetConfig, ...]:
    assets: list[AssetConfig] = []
    for a in raw:
        assets.append(
            AssetConfig(
                symbol=str(a.get("symbol", "")),
                feed_id=str(a.get("feed_id", "")),
                decimals=int(a.get("decimals", 18)),
            )
        )
    return tuple(assets)


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url") or PythConfig.hermes_url,
            timeout=int(pyth_raw.get("timeout", PythConfig.timeout)),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> EngineConfig:
    """Load and validate engine configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = EngineConfig(
        risk=_build_risk(raw.get("risk", {}) or {}),
        assets=_build_assets(raw.get("assets", []) or []),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}) or {}),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: EngineConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.assets:
        raise ValueError("At least one collateral asset must be configured")

    seen: set[str] = set()
    for asset in cfg.assets:
        if not asset.symbol:
            raise ValueError("Collateral asset has no symbol")
        if asset.symbol in seen:
            raise ValueError(f"Collateral asset '{asset.symbol}' configured twice")
        seen.add(asset.symbol)
        if not asset.feed_id:
            raise ValueError(f"Collateral asset '{asset.symbol}' has no feed_id")
        if asset.decimals < 0:
            raise ValueError(f"Collateral asset '{asset.symbol}' has negative decimals")

    risk = cfg.risk
    if risk.liquidation_precision <= 0:
        raise ValueError("liquidation_precision must be positive")
    if not 0 < risk.liquidation_threshold <= risk.liquidation_precision:
        raise ValueError(
            "liquidation_threshold must be in (0, liquidation_precision]"
        )
    if risk.liquidation_bonus < 0:
        raise ValueError("liquidation_bonus must not be negative")
    if risk.min_health_factor <= 0:
        raise ValueError("min_health_factor must be positive")
