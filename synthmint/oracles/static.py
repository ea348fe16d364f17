"""In-memory price feed with a settable answer."""
from __future__ import annotations

import time

from ..constants import FEED_DECIMALS


class StaticPriceFeed:
    """Feed that reports whatever price it was last given.

    ``updated_at`` defaults to the time of each ``set_price`` call.
    """

    def __init__(
        self,
        price: int,
        decimals: int = FEED_DECIMALS,
        updated_at: int | None = None,
    ) -> None:
        self._decimals = decimals
        self.set_price(price, updated_at)

    @property
    def decimals(self) -> int:
        return self._decimals

    def set_price(self, price: int, updated_at: int | None = None) -> None:
        self.price = price
        self.updated_at = int(time.time()) if updated_at is None else updated_at

    def latest_price(self) -> tuple[int, int]:
        return self.price, self.updated_at
