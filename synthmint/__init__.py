"""Over-collateralized synthetic asset issuance engine."""
from .engine import IssuanceEngine
from .errors import EngineError
from .ledger import PositionLedger
from .oracles import PriceOracleAdapter, StaticPriceFeed
from .registry import CollateralRegistry
from .tokens import InMemoryToken

__all__ = [
    "CollateralRegistry",
    "EngineError",
    "InMemoryToken",
    "IssuanceEngine",
    "PositionLedger",
    "PriceOracleAdapter",
    "StaticPriceFeed",
]
