"""Price feed protocol: one external price source per collateral asset."""
from typing import Protocol


class PriceFeed(Protocol):
    """Abstract interface for a latest-price query.

    ``latest_price`` returns ``(price, updated_at)`` where ``price`` is a signed
    integer scaled by ``10**decimals`` and ``updated_at`` a unix timestamp.
    """

    @property
    def decimals(self) -> int: ...

    def latest_price(self) -> tuple[int, int]: ...
