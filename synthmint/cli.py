"""Command-line interface for the synthmint issuance engine."""
from __future__ import annotations

import argparse
import asyncio
import sys
from decimal import Decimal

from .config import load_config
from .constants import PRECISION
from .errors import StalePriceOrInvalidFeed
from .logging_setup import configure_logging
from .oracles.adapter import PriceOracleAdapter
from .oracles.pyth import PythOracle, PythPriceFeed
from .simulation import SimulationReport, load_scenario, run_scenario


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="synthmint",
        description="Over-collateralized synthetic asset issuance engine",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("prices", help="Fetch Pyth prices for configured collateral")

    simulate_parser = sub.add_parser("simulate", help="Replay a YAML scenario")
    simulate_parser.add_argument("scenario", help="Path to the scenario file")

    return parser


async def _show_prices(config_path: str | None) -> int:
    config = load_config(config_path)
    oracle = PythOracle(config.price_oracle.pyth)
    feeds = {c.symbol: PythPriceFeed(c.symbol) for c in config.engine.collateral}
    await oracle.refresh(feeds)

    usable = 0
    for symbol, feed in feeds.items():
        if not feed.has_price:
            print(f"{symbol:<8} unavailable")
            continue
        price, published = feed.latest_price()
        usd = Decimal(price) / (10**feed.decimals)
        adapter = PriceOracleAdapter(feed, max_age=config.engine.price_timeout_seconds)
        try:
            adapter.quote()
        except StalePriceOrInvalidFeed as e:
            print(f"{symbol:<8} ${usd:>14,.4f}  REJECTED ({e})")
            continue
        usable += 1
        print(f"{symbol:<8} ${usd:>14,.4f}  (published {published})")
    return 0 if usable == len(feeds) else 1


def _print_report(report: SimulationReport) -> None:
    for step in report.steps:
        status = "ok" if step.ok else f"REJECTED ({step.error})"
        print(f"[{step.index:>3}] {step.action:<17} {status}")
    print()
    for acct in report.accounts:
        debt = Decimal(acct.debt) / PRECISION
        value = Decimal(acct.collateral_value_usd) / PRECISION
        print(
            f"{acct.account:<12} debt {debt:>14,.4f}  "
            f"collateral ${value:>14,.4f}  HF {acct.health_factor_display}"
        )


def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)

    if args.command == "prices":
        return asyncio.run(_show_prices(args.config))
    if args.command == "simulate":
        report = run_scenario(load_scenario(args.scenario))
        _print_report(report)
        return 0
    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(_run(args))
