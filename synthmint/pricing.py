"""Pure fixed-point conversion functions, no I/O.

All values are integers. USD amounts and token amounts use 18-decimal fixed
point; feed prices carry ``feed_decimals`` decimals (8 for standard feeds).
Division floors, so conversions never credit more than the inputs cover.
"""
from __future__ import annotations

from .constants import (
    FEED_DECIMALS,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    PRECISION,
)
from .errors import StalePriceOrInvalidFeed


def feed_adjustment(feed_decimals: int = FEED_DECIMALS) -> int:
    """Factor lifting a feed price to 18 decimals (``10**10`` for 8-decimal feeds)."""
    if not 0 <= feed_decimals <= 18:
        raise StalePriceOrInvalidFeed(f"unsupported feed precision: {feed_decimals}")
    return 10 ** (18 - feed_decimals)


def _require_positive_price(price: int) -> None:
    if price <= 0:
        raise StalePriceOrInvalidFeed(f"invalid feed price: {price}")


def usd_value(price: int, amount: int, feed_decimals: int = FEED_DECIMALS) -> int:
    """USD value of ``amount`` token units.

    usd = price * adjustment * amount / 1e18
    """
    _require_positive_price(price)
    return price * feed_adjustment(feed_decimals) * amount // PRECISION


def token_amount_for_usd(
    price: int, usd_amount: int, feed_decimals: int = FEED_DECIMALS
) -> int:
    """Token units worth ``usd_amount``.

    amount = usd * 1e18 / (price * adjustment)
    """
    _require_positive_price(price)
    return usd_amount * PRECISION // (price * feed_adjustment(feed_decimals))


def bonus_collateral(seized_amount: int) -> int:
    """Bonus collateral paid on top of a seizure (10%, rounded down)."""
    return seized_amount * LIQUIDATION_BONUS // LIQUIDATION_PRECISION


def calculate_health_factor(debt: int, collateral_value_usd: int) -> int:
    """Compute health factor in 18-decimal fixed point.

    HF = (collateral_value * 50 / 100) * 1e18 / debt

    An account without debt is maximally healthy.
    """
    if debt == 0:
        return MAX_HEALTH_FACTOR
    adjusted = collateral_value_usd * LIQUIDATION_THRESHOLD // LIQUIDATION_PRECISION
    return adjusted * PRECISION // debt
