"""Price oracle adapters and feeds."""
from .adapter import PriceOracleAdapter
from .pyth import PythOracle, PythPriceFeed
from .static import StaticPriceFeed

__all__ = ["PriceOracleAdapter", "PythOracle", "PythPriceFeed", "StaticPriceFeed"]
