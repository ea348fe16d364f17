"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .constants import DEFAULT_PRICE_TIMEOUT_SECONDS, TOKEN_DECIMALS

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollateralConfig:
    symbol: str = ""
    feed_id: str = ""
    decimals: int = TOKEN_DECIMALS


@dataclass(frozen=True)
class EngineConfig:
    collateral: tuple[CollateralConfig, ...] = ()
    price_timeout_seconds: int = DEFAULT_PRICE_TIMEOUT_SECONDS


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_collateral(raw: list[dict[str, Any]]) -> tuple[CollateralConfig, ...]:
    assets: list[CollateralConfig] = []
    for c in raw:
        assets.append(
            CollateralConfig(
                symbol=c.get("symbol", ""),
                feed_id=c.get("feed_id", ""),
                decimals=int(c.get("decimals", TOKEN_DECIMALS)),
            )
        )
    return tuple(assets)


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        collateral=_build_collateral(raw.get("collateral", [])),
        price_timeout_seconds=int(
            raw.get("price_timeout_seconds", DEFAULT_PRICE_TIMEOUT_SECONDS)
        ),
    )


def _build_price_oracle(raw: dict[str, Any], engine: EngineConfig) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    # Feed ids declared on collateral entries fill in for missing pyth.feeds
    feeds = {c.symbol: c.feed_id for c in engine.collateral if c.feed_id}
    feeds.update(pyth_raw.get("feeds", {}))
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=feeds,
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    engine = _build_engine(raw.get("engine", {}))
    cfg = AppConfig(
        engine=engine,
        price_oracle=_build_price_oracle(raw.get("price_oracle", {}), engine),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.engine.collateral:
        raise ValueError("At least one collateral asset must be configured")

    if cfg.engine.price_timeout_seconds <= 0:
        raise ValueError("price_timeout_seconds must be positive")

    seen: set[str] = set()
    for asset in cfg.engine.collateral:
        if not asset.symbol:
            raise ValueError("Collateral entry has no symbol")
        if asset.symbol in seen:
            raise ValueError(f"Collateral '{asset.symbol}' configured twice")
        seen.add(asset.symbol)
        if asset.decimals != TOKEN_DECIMALS:
            raise ValueError(
                f"Collateral '{asset.symbol}' has {asset.decimals} decimals, "
                f"only {TOKEN_DECIMALS} are supported"
            )
        if cfg.price_oracle.provider == "pyth" and not cfg.price_oracle.pyth.feeds.get(
            asset.symbol
        ):
            raise ValueError(f"Collateral '{asset.symbol}' has no price feed")
