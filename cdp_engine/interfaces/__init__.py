"""Protocol interfaces for the engine's external collaborators."""
from .event_listener import EventListener
from .price_feed import PriceFeed
from .token import CollateralToken, SyntheticAsset

__all__ = ["CollateralToken", "EventListener", "PriceFeed", "SyntheticAsset"]
