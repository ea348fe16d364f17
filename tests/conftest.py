"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from synthmint.config import (
    AppConfig,
    CollateralConfig,
    EngineConfig,
    PriceOracleConfig,
    PythConfig,
)
from synthmint.engine import IssuanceEngine
from synthmint.oracles.adapter import PriceOracleAdapter
from synthmint.oracles.static import StaticPriceFeed
from synthmint.registry import CollateralRegistry
from synthmint.tokens import InMemoryToken

ENGINE = "engine"
ETH = 10**18
WETH_PRICE = 2000 * 10**8
WBTC_PRICE = 30000 * 10**8


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def weth_feed() -> StaticPriceFeed:
    return StaticPriceFeed(WETH_PRICE)


@pytest.fixture()
def wbtc_feed() -> StaticPriceFeed:
    return StaticPriceFeed(WBTC_PRICE)


@pytest.fixture()
def weth() -> InMemoryToken:
    token = InMemoryToken("WETH", operator=ENGINE)
    token.mint("alice", 10 * ETH)
    token.mint("bob", 10 * ETH)
    return token


@pytest.fixture()
def wbtc() -> InMemoryToken:
    token = InMemoryToken("WBTC", operator=ENGINE)
    token.mint("alice", 1 * ETH)
    token.mint("liquidator", 1 * ETH)
    return token


@pytest.fixture()
def synthetic() -> InMemoryToken:
    return InMemoryToken("SYN", operator=ENGINE)


@pytest.fixture()
def registry(
    weth_feed: StaticPriceFeed,
    wbtc_feed: StaticPriceFeed,
    weth: InMemoryToken,
    wbtc: InMemoryToken,
) -> CollateralRegistry:
    return CollateralRegistry(
        ["WETH", "WBTC"],
        [PriceOracleAdapter(weth_feed), PriceOracleAdapter(wbtc_feed)],
        [weth, wbtc],
    )


@pytest.fixture()
def engine(registry: CollateralRegistry, synthetic: InMemoryToken) -> IssuanceEngine:
    return IssuanceEngine(registry, synthetic, address=ENGINE)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"WETH": "aaa111", "WBTC": "bbb222", "USDC": "ccc333"},
    )


@pytest.fixture()
def sample_app_config(sample_pyth_config: PythConfig) -> AppConfig:
    return AppConfig(
        engine=EngineConfig(
            collateral=(
                CollateralConfig(symbol="WETH", feed_id="aaa111"),
                CollateralConfig(symbol="WBTC", feed_id="bbb222"),
            ),
            price_timeout_seconds=3600,
        ),
        price_oracle=PriceOracleConfig(provider="pyth", pyth=sample_pyth_config),
    )


SAMPLE_YAML = textwrap.dedent("""\
    engine:
      price_timeout_seconds: 3600
      collateral:
        - {symbol: WETH, feed_id: "aaa", decimals: 18}
        - {symbol: WBTC, feed_id: "bbb", decimals: 18}
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Scenario fixture
# ---------------------------------------------------------------------------

SAMPLE_SCENARIO = textwrap.dedent("""\
    collateral:
      WETH: {price: 2000}
      WBTC: {price: 30000}
    balances:
      alice: {WETH: 10}
      bob: {WBTC: 1}
    steps:
      - {action: deposit_and_mint, account: alice, asset: WETH, amount: 10, mint: 8000}
      - {action: deposit_and_mint, account: bob, asset: WBTC, amount: 1, mint: 4000}
      - {action: liquidate, account: bob, asset: WETH, target: alice, debt: 4000}
      - {action: set_price, asset: WETH, price: 1500}
      - {action: liquidate, account: bob, asset: WETH, target: alice, debt: 4000}
      - {action: burn, account: alice, amount: 4000}
""")


@pytest.fixture()
def sample_scenario_path(tmp_path: Path) -> Path:
    path = tmp_path / "scenario.yaml"
    path.write_text(SAMPLE_SCENARIO)
    return path
