"""Validate one feed's latest price for the engine."""
from __future__ import annotations

import logging
import time
from typing import Callable

from ..errors import StalePriceOrInvalidFeed
from ..interfaces.price_feed import PriceFeed
from ..models import PriceQuote

logger = logging.getLogger(__name__)


class PriceOracleAdapter:
    """Wrap a PriceFeed and reject prices the engine must not use.

    Args:
        feed: The external price source.
        max_age: Optional staleness window in seconds. ``None`` trusts every
            positive price regardless of age.
        clock: Returns the current unix time; injectable for tests.
    """

    def __init__(
        self,
        feed: PriceFeed,
        max_age: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.feed = feed
        self.max_age = max_age
        self._clock = clock

    @property
    def decimals(self) -> int:
        return self.feed.decimals

    def quote(self) -> PriceQuote:
        """Return the latest ``(price, decimals)`` pair."""
        price, updated_at = self.feed.latest_price()
        if price <= 0:
            logger.warning("Rejected non-positive feed price %s", price)
            raise StalePriceOrInvalidFeed(f"invalid feed price: {price}")
        if self.max_age is not None:
            age = self._clock() - updated_at
            if age > self.max_age:
                logger.warning("Rejected stale feed price (age %.0fs)", age)
                raise StalePriceOrInvalidFeed(
                    f"price is {age:.0f}s old, limit {self.max_age}s"
                )
        return PriceQuote(price=price, decimals=self.feed.decimals)
