"""In-memory price feed, set explicitly by the caller."""
from __future__ import annotations

import logging

from ..errors import PriceUnavailable
from ..models import PriceData

logger = logging.getLogger(__name__)


class StaticPriceFeed:
    """Price feed whose answers are pushed in with :meth:`set_price`."""

    def __init__(self, prices: dict[str, PriceData] | None = None) -> None:
        self._prices: dict[str, PriceData] = dict(prices or {})

    def set_price(self, feed_id: str, price: int, decimals: int = 8) -> None:
        """Publish a new answer for ``feed_id`` (``price / 10**decimals`` USD)."""
        self._prices[feed_id] = PriceData(price=price, decimals=decimals)
        logger.debug("Feed %s set to %s (decimals=%s)", feed_id, price, decimals)

    def latest_price(self, feed_id: str) -> PriceData:
        try:
            return self._prices[feed_id]
        except KeyError:
            raise PriceUnavailable(feed_id) from None

    def clear(self, feed_id: str) -> None:
        """Withdraw the answer for ``feed_id``; later reads raise PriceUnavailable."""
        self._prices.pop(feed_id, None)
