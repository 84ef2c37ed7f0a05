"""Token protocols — collateral transfers and synthetic-asset issuance."""
from typing import Protocol


class CollateralToken(Protocol):
    """Moves a collateral asset in and out of engine custody."""

    def transfer_from(self, src: str, dst: str, amount: int) -> bool: ...

    def transfer(self, src: str, dst: str, amount: int) -> bool: ...


class SyntheticAsset(Protocol):
    """Issuer of the USD-pegged synthetic asset; the engine is its only minter."""

    def mint(self, to: str, amount: int) -> bool: ...

    def burn_from(self, payer: str, amount: int) -> bool: ...
