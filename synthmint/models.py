"""Data models, all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceQuote:
    """Validated oracle price with the number of decimals it carries."""

    price: int
    decimals: int


@dataclass(frozen=True)
class CollateralDeposited:
    """Emitted when an account adds collateral."""

    account: str
    asset: str
    amount: int


@dataclass(frozen=True)
class CollateralRedeemed:
    """Emitted when collateral leaves an account's position.

    ``from_account != to_account`` marks a liquidation seizure.
    """

    from_account: str
    to_account: str
    asset: str
    amount: int

    @property
    def is_liquidation(self) -> bool:
        return self.from_account != self.to_account


@dataclass(frozen=True)
class AccountInformation:
    """Minted debt and USD collateral value (both 18-decimal fixed point)."""

    debt: int
    collateral_value_usd: int


@dataclass(frozen=True)
class PythSnapshot:
    """Raw Pyth price: ``price * 10**expo`` USD, published at ``publish_time``."""

    price: int
    expo: int
    publish_time: int
