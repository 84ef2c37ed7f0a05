"""Pyth Network price feed — snapshots Hermes answers for synchronous reads."""
from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Iterable

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import PriceUnavailable
from ..models import PriceData

logger = logging.getLogger(__name__)


def _normalize_feed_id(feed_id: str) -> str:
    """Hermes returns ids lowercase and without the ``0x`` prefix."""
    feed_id = feed_id.lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def parse_price_item(item: dict) -> PriceData:
    """Convert a Hermes ``parsed`` entry into a fixed-point :class:`PriceData`.

    Hermes reports ``price * 10^expo``; a negative exponent maps directly to
    the number of decimals.
    """
    price_data = item.get("price", {})
    price_raw = int(price_data.get("price", 0))
    expo = int(price_data.get("expo", 0))
    if expo > 0:
        return PriceData(price=price_raw * 10**expo, decimals=0)
    return PriceData(price=price_raw, decimals=-expo)


class PythPriceFeed:
    """Fetch prices from Pyth Network and serve the last snapshot."""

    def __init__(self, config: PythConfig, feed_ids: Iterable[str]) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout
        self.feed_ids = list(dict.fromkeys(_normalize_feed_id(f) for f in feed_ids))
        self._prices: dict[str, PriceData] = {}

    async def refresh(self) -> dict[str, PriceData]:
        """Pull the latest prices for every configured feed.

        Returns the prices fetched by this call. On HTTP or network errors
        the previous snapshot is kept and an empty dict is returned.
        """
        fetched: dict[str, PriceData] = {}
        if not self.feed_ids:
            return fetched

        query_params = "&".join([f"ids[]={fid}" for fid in self.feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return fetched

                    data = await response.json()
                    for item in data.get("parsed", []):
                        feed_id = _normalize_feed_id(item.get("id", ""))
                        if feed_id in self.feed_ids:
                            fetched[feed_id] = parse_price_item(item)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return fetched

        self._prices.update(fetched)
        logger.info("Fetched %d prices from Pyth Network", len(fetched))
        for feed_id, price in sorted(fetched.items()):
            logger.debug("  %s: %s (decimals=%s)", feed_id, price.price, price.decimals)
        return fetched

    def latest_price(self, feed_id: str) -> PriceData:
        price = self._prices.get(_normalize_feed_id(feed_id))
        if price is None:
            raise PriceUnavailable(feed_id)
        return price
