"""Fixed-point conversions between collateral amounts and 18-decimal USD."""
from __future__ import annotations

from .constants import FEED_TARGET_DECIMALS, PRECISION
from .interfaces.price_feed import PriceFeed
from .models import PriceData, SupportedAsset
from .registry import AssetRegistry


def scale_price(price: PriceData) -> int:
    """Rescale a feed answer to ``FEED_TARGET_DECIMALS`` fixed point.

    An 8-decimal feed is multiplied by ``10**10`` (the additional feed
    precision).
    """
    if price.decimals <= FEED_TARGET_DECIMALS:
        return price.price * 10 ** (FEED_TARGET_DECIMALS - price.decimals)
    return price.price // 10 ** (price.decimals - FEED_TARGET_DECIMALS)


def _to_base(amount: int, decimals: int) -> int:
    if decimals <= 18:
        return amount * 10 ** (18 - decimals)
    return amount // 10 ** (decimals - 18)


def _from_base(amount: int, decimals: int) -> int:
    if decimals <= 18:
        return amount // 10 ** (18 - decimals)
    return amount * 10 ** (decimals - 18)


class PriceOracleAdapter:
    """Values collateral in USD using the latest feed answer, never cached."""

    def __init__(self, registry: AssetRegistry, feed: PriceFeed) -> None:
        self._registry = registry
        self._feed = feed

    def _price(self, asset: SupportedAsset) -> int:
        return scale_price(self._feed.latest_price(asset.feed_id))

    def usd_value(self, asset: str, amount: int) -> int:
        """USD value (18 decimals) of ``amount`` native units of ``asset``."""
        supported = self._registry.get(asset)
        return self._price(supported) * _to_base(amount, supported.decimals) // PRECISION

    def asset_amount_for_usd(self, asset: str, usd_amount: int) -> int:
        """Native units of ``asset`` worth ``usd_amount`` (18 decimals), rounded down.

        A zero price propagates as ``ZeroDivisionError``; feeds are trusted to
        never report one.
        """
        supported = self._registry.get(asset)
        base = usd_amount * PRECISION // self._price(supported)
        return _from_base(base, supported.decimals)
