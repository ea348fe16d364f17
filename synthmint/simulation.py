"""Replay a YAML script against an in-memory engine.

Scenario format::

    collateral:            # asset -> starting USD price
      WETH: {price: 2000}
    balances:              # starting wallet balances, whole units
      alice: {WETH: 10}
    steps:
      - {action: deposit_and_mint, account: alice, asset: WETH, amount: 10, mint: 8000}
      - {action: set_price, asset: WETH, price: 1500}
      - {action: liquidate, account: bob, asset: WETH, target: alice, debt: 4000}

Amounts are whole units converted to 18-decimal integers; prices are USD
converted to the standard 8-decimal feed precision.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from pathlib import Path
from typing import Any, Callable

import yaml

from .constants import FEED_DECIMALS, MAX_HEALTH_FACTOR, PRECISION
from .engine import IssuanceEngine
from .errors import EngineError
from .oracles.adapter import PriceOracleAdapter
from .oracles.static import StaticPriceFeed
from .registry import CollateralRegistry
from .tokens import InMemoryToken

logger = logging.getLogger(__name__)

ENGINE_ADDRESS = "engine"
SYNTHETIC_SYMBOL = "SYN"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Step:
    action: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Scenario:
    prices: dict[str, Decimal]
    balances: dict[str, dict[str, Decimal]] = field(default_factory=dict)
    steps: tuple[Step, ...] = ()


@dataclass(frozen=True)
class StepResult:
    index: int
    action: str
    ok: bool
    error: str = ""


@dataclass(frozen=True)
class AccountSnapshot:
    account: str
    debt: int
    collateral_value_usd: int
    health_factor: int
    wallet: dict[str, int] = field(default_factory=dict)

    @property
    def health_factor_display(self) -> str:
        if self.health_factor == MAX_HEALTH_FACTOR:
            return "inf"
        return f"{Decimal(self.health_factor) / PRECISION:.4f}"


@dataclass(frozen=True)
class SimulationReport:
    steps: tuple[StepResult, ...]
    accounts: tuple[AccountSnapshot, ...]


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------


def to_wad(value: Any) -> int:
    """Whole units → 18-decimal integer (rounded down)."""
    return int((Decimal(str(value)) * PRECISION).to_integral_value(rounding=ROUND_DOWN))


def to_feed_price(value: Any, decimals: int = FEED_DECIMALS) -> int:
    """USD price → integer feed answer with ``decimals`` decimals."""
    scaled = Decimal(str(value)) * (10**decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


# ---------------------------------------------------------------------------
# Step dispatch
# ---------------------------------------------------------------------------

_Handler = Callable[[IssuanceEngine, dict[str, Any]], None]

_ENGINE_ACTIONS: dict[str, _Handler] = {
    "deposit": lambda e, p: e.deposit_collateral(p["account"], p["asset"], to_wad(p["amount"])),
    "mint": lambda e, p: e.mint(p["account"], to_wad(p["amount"])),
    "deposit_and_mint": lambda e, p: e.deposit_and_mint(
        p["account"], p["asset"], to_wad(p["amount"]), to_wad(p["mint"])
    ),
    "redeem": lambda e, p: e.redeem_collateral(p["account"], p["asset"], to_wad(p["amount"])),
    "burn": lambda e, p: e.burn(p["account"], to_wad(p["amount"])),
    "redeem_for_burn": lambda e, p: e.redeem_for_burn(
        p["account"], p["asset"], to_wad(p["amount"]), to_wad(p["burn"])
    ),
    "liquidate": lambda e, p: e.liquidate(
        p["account"], p["asset"], p["target"], to_wad(p["debt"])
    ),
}

ACTIONS = frozenset(_ENGINE_ACTIONS) | {"set_price"}

# Keys each action reads from its step
_REQUIRED: dict[str, tuple[str, ...]] = {
    "deposit": ("account", "asset", "amount"),
    "mint": ("account", "amount"),
    "deposit_and_mint": ("account", "asset", "amount", "mint"),
    "redeem": ("account", "asset", "amount"),
    "burn": ("account", "amount"),
    "redeem_for_burn": ("account", "asset", "amount", "burn"),
    "liquidate": ("account", "asset", "target", "debt"),
    "set_price": ("asset", "price"),
}


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def parse_scenario(raw: dict[str, Any]) -> Scenario:
    """Build and validate a Scenario from decoded YAML."""
    collateral = raw.get("collateral") or {}
    if not collateral:
        raise ValueError("Scenario must declare at least one collateral asset")
    prices = {sym: Decimal(str(cfg.get("price", 0))) for sym, cfg in collateral.items()}

    balances = {
        account: {sym: Decimal(str(amount)) for sym, amount in (held or {}).items()}
        for account, held in (raw.get("balances") or {}).items()
    }
    for account, held in balances.items():
        for sym in held:
            if sym not in prices:
                raise ValueError(f"Balance of '{account}' uses unknown asset '{sym}'")

    steps: list[Step] = []
    for i, s in enumerate(raw.get("steps") or []):
        params = dict(s)
        action = params.pop("action", "")
        if action not in ACTIONS:
            raise ValueError(f"Step {i}: unknown action '{action}'")
        missing = [key for key in _REQUIRED[action] if key not in params]
        if missing:
            raise ValueError(f"Step {i}: {action} is missing {', '.join(missing)}")
        if action == "set_price" and params["asset"] not in prices:
            raise ValueError(f"Step {i}: set_price on undeclared asset '{params['asset']}'")
        steps.append(Step(action=action, params=params))

    return Scenario(prices=prices, balances=balances, steps=tuple(steps))


def load_scenario(path: str | Path) -> Scenario:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return parse_scenario(raw)


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------


def _step_accounts(steps: tuple[Step, ...]) -> set[str]:
    names: set[str] = set()
    for step in steps:
        for key in ("account", "target"):
            if key in step.params:
                names.add(step.params[key])
    return names


def run_scenario(scenario: Scenario) -> SimulationReport:
    """Execute every step in order; rejected steps are recorded, not fatal."""
    synthetic = InMemoryToken(SYNTHETIC_SYMBOL, operator=ENGINE_ADDRESS)
    symbols = list(scenario.prices)
    tokens = {sym: InMemoryToken(sym, operator=ENGINE_ADDRESS) for sym in symbols}
    feeds = {sym: StaticPriceFeed(to_feed_price(scenario.prices[sym])) for sym in symbols}
    registry = CollateralRegistry(
        symbols,
        [PriceOracleAdapter(feeds[sym]) for sym in symbols],
        [tokens[sym] for sym in symbols],
    )
    engine = IssuanceEngine(registry, synthetic, address=ENGINE_ADDRESS)

    for account, held in scenario.balances.items():
        for sym, amount in held.items():
            tokens[sym].mint(account, to_wad(amount))

    results: list[StepResult] = []
    for i, step in enumerate(scenario.steps):
        try:
            if step.action == "set_price":
                feeds[step.params["asset"]].set_price(to_feed_price(step.params["price"]))
            else:
                _ENGINE_ACTIONS[step.action](engine, step.params)
        except EngineError as e:
            logger.info("Step %d (%s) rejected: %s", i, step.action, e)
            results.append(StepResult(i, step.action, ok=False, error=type(e).__name__))
        else:
            results.append(StepResult(i, step.action, ok=True))

    accounts = set(scenario.balances) | _step_accounts(scenario.steps)
    snapshots: list[AccountSnapshot] = []
    for account in sorted(accounts):
        info = engine.get_account_information(account)
        wallet = {sym: tok.balance_of(account) for sym, tok in tokens.items()}
        wallet[SYNTHETIC_SYMBOL] = synthetic.balance_of(account)
        snapshots.append(
            AccountSnapshot(
                account=account,
                debt=info.debt,
                collateral_value_usd=info.collateral_value_usd,
                health_factor=engine.get_health_factor(account),
                wallet=wallet,
            )
        )

    return SimulationReport(steps=tuple(results), accounts=tuple(snapshots))
