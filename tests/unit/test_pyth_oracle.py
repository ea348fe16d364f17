"""Unit tests for Pyth oracle: price response parsing and error handling."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from synthmint.config import PythConfig
from synthmint.errors import StalePriceOrInvalidFeed
from synthmint.models import PythSnapshot
from synthmint.oracles.pyth import PythOracle, PythPriceFeed


@pytest.fixture()
def oracle(sample_pyth_config: PythConfig) -> PythOracle:
    return PythOracle(sample_pyth_config)


def _make_pyth_response(items: list[dict]) -> dict:
    return {"parsed": items}


def _mock_session(status: int = 200, data: dict | None = None) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data or {})
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


class TestPythOracleFetchQuotes:
    @pytest.mark.asyncio
    async def test_parses_response_correctly(self, oracle: PythOracle) -> None:
        mock_session = _mock_session(
            data=_make_pyth_response(
                [
                    {
                        "id": "aaa111",
                        "price": {"price": "350000000000", "expo": -8, "publish_time": 1700000000},
                    },
                    {
                        "id": "bbb222",
                        "price": {"price": "3000000000000", "expo": -8, "publish_time": 1700000001},
                    },
                    {"id": "ccc333", "price": {"price": "100000000", "expo": -8}},
                ]
            )
        )

        with patch("synthmint.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("synthmint.oracles.pyth.aiohttp.TCPConnector"):
                quotes = await oracle.fetch_quotes()

        assert quotes["WETH"] == PythSnapshot(350000000000, -8, 1700000000)
        assert quotes["WBTC"] == PythSnapshot(3000000000000, -8, 1700000001)
        assert quotes["USDC"].publish_time == 0

    @pytest.mark.asyncio
    async def test_handles_http_error(self, oracle: PythOracle) -> None:
        mock_session = _mock_session(status=500)

        with patch("synthmint.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("synthmint.oracles.pyth.aiohttp.TCPConnector"):
                quotes = await oracle.fetch_quotes()

        assert quotes == {}

    @pytest.mark.asyncio
    async def test_handles_network_error(self, oracle: PythOracle) -> None:
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=ConnectionError("timeout"))
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)

        with patch("synthmint.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("synthmint.oracles.pyth.aiohttp.TCPConnector"):
                quotes = await oracle.fetch_quotes()

        assert quotes == {}

    @pytest.mark.asyncio
    async def test_handles_client_error(self, oracle: PythOracle) -> None:
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=aiohttp.ClientError("reset"))
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)

        with patch("synthmint.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("synthmint.oracles.pyth.aiohttp.TCPConnector"):
                quotes = await oracle.fetch_quotes()

        assert quotes == {}

    @pytest.mark.asyncio
    async def test_filters_by_symbols(self, oracle: PythOracle) -> None:
        mock_session = _mock_session(
            data=_make_pyth_response(
                [
                    {"id": "aaa111", "price": {"price": "350000000000", "expo": -8}},
                    {"id": "bbb222", "price": {"price": "3000000000000", "expo": -8}},
                ]
            )
        )

        with patch("synthmint.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("synthmint.oracles.pyth.aiohttp.TCPConnector"):
                quotes = await oracle.fetch_quotes(symbols=["WETH"])

        assert list(quotes) == ["WETH"]
        url = mock_session.get.call_args[0][0]
        assert "ids[]=aaa111" in url
        assert "bbb222" not in url

    @pytest.mark.asyncio
    async def test_no_matching_symbols_skips_request(self, oracle: PythOracle) -> None:
        with patch("synthmint.oracles.pyth.aiohttp.ClientSession") as session_cls:
            quotes = await oracle.fetch_quotes(symbols=["DOGE"])

        assert quotes == {}
        session_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_shared_feed_id(self) -> None:
        oracle = PythOracle(
            PythConfig(hermes_url="https://h.example", feeds={"WETH": "eth", "ETH": "eth"})
        )
        mock_session = _mock_session(
            data=_make_pyth_response(
                [{"id": "eth", "price": {"price": "200000000000", "expo": -8}}]
            )
        )

        with patch("synthmint.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("synthmint.oracles.pyth.aiohttp.TCPConnector"):
                quotes = await oracle.fetch_quotes()

        assert quotes["WETH"] == quotes["ETH"]


class TestPythOracleRefresh:
    @pytest.mark.asyncio
    async def test_updates_feeds(self, oracle: PythOracle) -> None:
        feeds = {"WETH": PythPriceFeed("WETH"), "WBTC": PythPriceFeed("WBTC")}
        snapshot = PythSnapshot(price=200000000000, expo=-8, publish_time=1700000000)

        with patch.object(oracle, "fetch_quotes", AsyncMock(return_value={"WETH": snapshot})):
            updated = await oracle.refresh(feeds)

        assert updated == 1
        assert feeds["WETH"].latest_price() == (200000000000, 1700000000)
        assert not feeds["WBTC"].has_price


class TestPythPriceFeed:
    def test_no_snapshot_raises(self) -> None:
        feed = PythPriceFeed("WETH")
        assert not feed.has_price
        with pytest.raises(StalePriceOrInvalidFeed, match="WETH"):
            feed.latest_price()

    def test_matching_exponent(self) -> None:
        feed = PythPriceFeed("WETH")
        feed.update(PythSnapshot(price=200000000000, expo=-8, publish_time=5))
        assert feed.latest_price() == (200000000000, 5)

    def test_scales_up_coarser_exponent(self) -> None:
        feed = PythPriceFeed("WETH")
        feed.update(PythSnapshot(price=2000, expo=0, publish_time=5))
        assert feed.latest_price() == (2000 * 10**8, 5)

    def test_scales_down_finer_exponent(self) -> None:
        feed = PythPriceFeed("WETH")
        feed.update(PythSnapshot(price=2000123456789, expo=-9, publish_time=5))
        assert feed.latest_price() == (200012345678, 5)

    def test_custom_decimals(self) -> None:
        feed = PythPriceFeed("WETH", decimals=18)
        feed.update(PythSnapshot(price=200000000000, expo=-8, publish_time=5))
        assert feed.decimals == 18
        assert feed.latest_price() == (2000 * 10**18, 5)
