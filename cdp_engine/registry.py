"""Collateral registry — fixed at engine construction, ordered by insertion."""
from __future__ import annotations

from typing import Iterator, Sequence

from .errors import TokenAddressesAndPriceFeedAddressesMustBeSameLength, TokenNotAllowed
from .models import SupportedAsset


class AssetRegistry:
    """Immutable mapping of collateral symbol to its price feed."""

    def __init__(self, assets: Sequence[SupportedAsset]) -> None:
        self._assets: dict[str, SupportedAsset] = {}
        for asset in assets:
            if asset.symbol in self._assets:
                raise ValueError(f"Collateral '{asset.symbol}' registered twice")
            self._assets[asset.symbol] = asset

    @classmethod
    def from_lists(
        cls,
        symbols: Sequence[str],
        feed_ids: Sequence[str],
        decimals: Sequence[int] | None = None,
    ) -> AssetRegistry:
        """Build a registry from parallel symbol / feed (/ decimals) lists."""
        if len(symbols) != len(feed_ids):
            raise TokenAddressesAndPriceFeedAddressesMustBeSameLength(
                len(symbols), len(feed_ids)
            )
        if decimals is None:
            decimals = [18] * len(symbols)
        elif len(decimals) != len(symbols):
            raise ValueError(
                f"Got {len(symbols)} collateral assets but {len(decimals)} decimals"
            )
        return cls(
            [
                SupportedAsset(symbol=s, feed_id=f, decimals=d)
                for s, f, d in zip(symbols, feed_ids, decimals)
            ]
        )

    def get(self, symbol: str) -> SupportedAsset:
        try:
            return self._assets[symbol]
        except KeyError:
            raise TokenNotAllowed(symbol) from None

    def require(self, symbol: str) -> None:
        if symbol not in self._assets:
            raise TokenNotAllowed(symbol)

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(self._assets)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._assets

    def __iter__(self) -> Iterator[SupportedAsset]:
        return iter(self._assets.values())

    def __len__(self) -> int:
        return len(self._assets)
