"""Pyth Network price oracle service."""
from __future__ import annotations

import logging
import ssl
from typing import Mapping

import aiohttp
import certifi

from ..config import PythConfig
from ..constants import FEED_DECIMALS
from ..errors import StalePriceOrInvalidFeed
from ..models import PythSnapshot

logger = logging.getLogger(__name__)


class PythPriceFeed:
    """Synchronous PriceFeed over the most recent Pyth snapshot.

    Pyth publishes ``price * 10**expo``; the feed rescales it to ``decimals``
    so the engine sees a fixed precision whatever exponent Hermes returns.
    """

    def __init__(self, symbol: str, decimals: int = FEED_DECIMALS) -> None:
        self.symbol = symbol
        self._decimals = decimals
        self._snapshot: PythSnapshot | None = None

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def has_price(self) -> bool:
        return self._snapshot is not None

    def update(self, snapshot: PythSnapshot) -> None:
        self._snapshot = snapshot

    def latest_price(self) -> tuple[int, int]:
        if self._snapshot is None:
            raise StalePriceOrInvalidFeed(f"no Pyth price received for {self.symbol}")
        shift = self._snapshot.expo + self._decimals
        if shift >= 0:
            price = self._snapshot.price * 10**shift
        else:
            price = self._snapshot.price // 10**-shift
        return price, self._snapshot.publish_time


class PythOracle:
    """Fetch prices from Pyth Network oracle."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)

    async def fetch_quotes(
        self, symbols: list[str] | None = None
    ) -> dict[str, PythSnapshot]:
        """Fetch current raw prices from Pyth Network.

        Args:
            symbols: Optional list of symbols to fetch. If None, fetches all
                     configured feeds.
        """
        quotes: dict[str, PythSnapshot] = {}

        feeds = self.price_feeds
        if symbols is not None:
            feeds = {k: v for k, v in self.price_feeds.items() if k in symbols}

        feed_ids = list(set(feeds.values()))
        if not feed_ids:
            return quotes

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return quotes

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    # Several symbols may share one feed id
                    id_to_assets: dict[str, list[str]] = {}
                    for asset, feed_id in feeds.items():
                        id_to_assets.setdefault(feed_id, []).append(asset)

                    for item in parsed:
                        feed_id = item.get("id")
                        if feed_id not in id_to_assets:
                            continue
                        price_data = item.get("price", {})
                        snapshot = PythSnapshot(
                            price=int(price_data.get("price", 0)),
                            expo=int(price_data.get("expo", 0)),
                            publish_time=int(price_data.get("publish_time", 0)),
                        )
                        for asset in id_to_assets[feed_id]:
                            quotes[asset] = snapshot

                    logger.info("Fetched prices from Pyth Network:")
                    for asset, snap in sorted(quotes.items()):
                        logger.info("  %s: %s x 10^%s", asset, snap.price, snap.expo)

        except (aiohttp.ClientError, ConnectionError, ValueError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)

        return quotes

    async def refresh(self, feeds: Mapping[str, PythPriceFeed]) -> int:
        """Push fresh snapshots into ``feeds``; returns how many were updated."""
        quotes = await self.fetch_quotes(list(feeds))
        for symbol, snapshot in quotes.items():
            feeds[symbol].update(snapshot)
        missing = sorted(set(feeds) - set(quotes))
        if missing:
            logger.warning("No Pyth price for: %s", ", ".join(missing))
        return len(quotes)
