"""Protocol interfaces for the engine's external collaborators."""
from .checkpoint import Checkpointable
from .price_feed import PriceFeed
from .tokens import AssetToken, SyntheticToken

__all__ = ["AssetToken", "Checkpointable", "PriceFeed", "SyntheticToken"]
