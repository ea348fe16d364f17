"""Issuance engine: collateral custody, synthetic minting and liquidation.

Every state-changing entry point follows the same order: validate inputs,
enter the guarded atomic scope, update the ledger, record the event, call the
external collaborator, then re-check solvency. A failure anywhere restores the
ledger and every checkpointable collaborator and discards the call's events.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Union

from .constants import (
    LIQUIDATION_BONUS,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from .errors import (
    HealthFactorBroken,
    HealthFactorNotImproved,
    HealthFactorOk,
    InvalidAmount,
    MintFailed,
    ReentrancyDetected,
    TransferFailed,
)
from .interfaces.checkpoint import Checkpointable
from .interfaces.tokens import SyntheticToken
from .ledger import PositionLedger
from .models import AccountInformation, CollateralDeposited, CollateralRedeemed
from .oracles.adapter import PriceOracleAdapter
from .pricing import (
    bonus_collateral,
    calculate_health_factor,
    token_amount_for_usd,
    usd_value,
)
from .registry import CollateralRegistry

logger = logging.getLogger(__name__)

Event = Union[CollateralDeposited, CollateralRedeemed]


def _require_positive(amount: int, name: str = "amount") -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(f"{name} must be a positive integer, got {amount!r}")


class IssuanceEngine:
    """Over-collateralized issuer of a pegged synthetic unit.

    Args:
        registry: Approved collateral assets with their oracles and tokens.
        synthetic: The synthetic token; the engine must be its operator.
        address: Account id under which the engine holds custody.
    """

    precision = PRECISION
    liquidation_threshold = LIQUIDATION_THRESHOLD
    liquidation_bonus = LIQUIDATION_BONUS
    min_health_factor = MIN_HEALTH_FACTOR

    def __init__(
        self,
        registry: CollateralRegistry,
        synthetic: SyntheticToken,
        address: str = "engine",
    ) -> None:
        self.registry = registry
        self.synthetic = synthetic
        self.address = address
        self.ledger = PositionLedger()
        self._entered = False
        self._pending_events: list[Event] = []
        self._events: list[Event] = []

    # ------------------------------------------------------------------
    # Guard and atomic scope
    # ------------------------------------------------------------------

    def _participants(self) -> list[Checkpointable]:
        participants: list[Checkpointable] = [self.ledger]
        seen = {id(self.ledger)}
        candidates = [self.synthetic] + [
            self.registry.token_for(asset) for asset in self.registry.list_assets()
        ]
        for candidate in candidates:
            if id(candidate) not in seen and isinstance(candidate, Checkpointable):
                seen.add(id(candidate))
                participants.append(candidate)
        return participants

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        if self._entered:
            logger.warning("%s rejected: ReentrancyDetected", operation)
            raise ReentrancyDetected(f"{operation} called while another call is in flight")
        self._entered = True
        snapshots = [(p, p.checkpoint()) for p in self._participants()]
        try:
            yield
        except Exception as e:
            for participant, state in reversed(snapshots):
                participant.rollback(state)
            self._pending_events.clear()
            logger.warning("%s rejected: %s", operation, type(e).__name__)
            raise
        else:
            for event in self._pending_events:
                logger.info("%s", event)
            self._events.extend(self._pending_events)
            self._pending_events.clear()
        finally:
            self._entered = False

    def _emit(self, event: Event) -> None:
        self._pending_events.append(event)

    @property
    def events(self) -> tuple[Event, ...]:
        """Events of every successful call since the last drain, oldest first.

        The log is kept in memory until ``drain_events`` is called.
        """
        return tuple(self._events)

    def drain_events(self) -> list[Event]:
        """Return the committed events and clear the log."""
        drained, self._events = self._events, []
        return drained

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def deposit_collateral(self, caller: str, asset: str, amount: int) -> None:
        _require_positive(amount)
        self.registry.get(asset)
        with self._atomic("deposit_collateral"):
            self._deposit(caller, asset, amount)

    def mint(self, caller: str, amount: int) -> None:
        _require_positive(amount)
        with self._atomic("mint"):
            self._mint(caller, amount)

    def deposit_and_mint(
        self, caller: str, asset: str, amount: int, mint_amount: int
    ) -> None:
        _require_positive(amount)
        _require_positive(mint_amount, "mint_amount")
        self.registry.get(asset)
        with self._atomic("deposit_and_mint"):
            self._deposit(caller, asset, amount)
            self._mint(caller, mint_amount)

    def redeem_collateral(self, caller: str, asset: str, amount: int) -> None:
        _require_positive(amount)
        self.registry.get(asset)
        with self._atomic("redeem_collateral"):
            self._redeem(asset, amount, caller, caller)
            self._require_healthy(caller)

    def burn(self, caller: str, amount: int) -> None:
        _require_positive(amount)
        with self._atomic("burn"):
            self._burn(amount, caller, caller)
            self._require_healthy(caller)

    def redeem_for_burn(
        self, caller: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        _require_positive(collateral_amount, "collateral_amount")
        _require_positive(debt_amount, "debt_amount")
        self.registry.get(asset)
        with self._atomic("redeem_for_burn"):
            self._burn(debt_amount, caller, caller)
            self._redeem(asset, collateral_amount, caller, caller)
            self._require_healthy(caller)

    def liquidate(
        self, caller: str, asset: str, target: str, debt_to_cover: int
    ) -> None:
        """Repay part of ``target``'s debt and seize collateral plus a bonus.

        Only accounts below the minimum health factor can be liquidated, and
        the liquidation must strictly raise the target's health factor. The
        liquidator's own position is not checked.
        """
        _require_positive(debt_to_cover, "debt_to_cover")
        self.registry.get(asset)
        with self._atomic("liquidate"):
            starting = self._health_factor(target)
            if starting >= MIN_HEALTH_FACTOR:
                raise HealthFactorOk(f"{target} health factor {starting} is not below minimum")

            seized = self.get_token_amount_from_usd(asset, debt_to_cover)
            total_seized = seized + bonus_collateral(seized)
            self._redeem(asset, total_seized, target, caller)
            self._burn(debt_to_cover, target, caller)

            ending = self._health_factor(target)
            if ending <= starting:
                raise HealthFactorNotImproved(
                    f"{target} health factor {starting} -> {ending}"
                )
            logger.info(
                "%s liquidated %s: covered %s, seized %s %s, health factor %s -> %s",
                caller, target, debt_to_cover, total_seized, asset, starting, ending,
            )

    # ------------------------------------------------------------------
    # Internal steps (run inside the atomic scope)
    # ------------------------------------------------------------------

    def _deposit(self, caller: str, asset: str, amount: int) -> None:
        self.ledger.add_collateral(caller, asset, amount)
        self._emit(CollateralDeposited(account=caller, asset=asset, amount=amount))
        token = self.registry.token_for(asset)
        if not token.transfer_from(caller, self.address, amount):
            raise TransferFailed(f"could not pull {amount} {asset} from {caller}")

    def _mint(self, caller: str, amount: int) -> None:
        self.ledger.add_debt(caller, amount)
        self._require_healthy(caller)
        if not self.synthetic.mint(caller, amount):
            raise MintFailed(f"synthetic token refused to mint {amount} to {caller}")

    def _redeem(self, asset: str, amount: int, from_: str, to: str) -> None:
        self.ledger.remove_collateral(from_, asset, amount)
        self._emit(
            CollateralRedeemed(from_account=from_, to_account=to, asset=asset, amount=amount)
        )
        if not self.registry.token_for(asset).transfer(to, amount):
            raise TransferFailed(f"could not send {amount} {asset} to {to}")

    def _burn(self, amount: int, on_behalf_of: str, payer: str) -> None:
        self.ledger.remove_debt(on_behalf_of, amount)
        if not self.synthetic.transfer_from(payer, self.address, amount):
            raise TransferFailed(f"could not pull {amount} synthetic from {payer}")
        self.synthetic.burn(amount)

    def _require_healthy(self, account: str) -> None:
        health_factor = self._health_factor(account)
        if health_factor < MIN_HEALTH_FACTOR:
            raise HealthFactorBroken(health_factor)

    def _health_factor(self, account: str) -> int:
        info = self.get_account_information(account)
        health_factor = calculate_health_factor(info.debt, info.collateral_value_usd)
        logger.debug(
            "%s: debt %s, collateral $%s, health factor %s",
            account, info.debt, info.collateral_value_usd, health_factor,
        )
        return health_factor

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def get_usd_value(self, asset: str, amount: int) -> int:
        quote = self.registry.oracle_for(asset).quote()
        return usd_value(quote.price, amount, quote.decimals)

    def get_token_amount_from_usd(self, asset: str, usd_amount: int) -> int:
        quote = self.registry.oracle_for(asset).quote()
        return token_amount_for_usd(quote.price, usd_amount, quote.decimals)

    def get_account_collateral_value(self, account: str) -> int:
        """Sum of USD values over approved assets, in registration order."""
        total = 0
        for asset in self.registry.list_assets():
            amount = self.ledger.collateral_of(account, asset)
            if amount:
                total += self.get_usd_value(asset, amount)
        return total

    def get_account_information(self, account: str) -> AccountInformation:
        return AccountInformation(
            debt=self.ledger.debt_of(account),
            collateral_value_usd=self.get_account_collateral_value(account),
        )

    def get_health_factor(self, account: str) -> int:
        return self._health_factor(account)

    def calculate_health_factor(self, debt: int, collateral_value_usd: int) -> int:
        return calculate_health_factor(debt, collateral_value_usd)

    def get_collateral_balance(self, account: str, asset: str) -> int:
        return self.ledger.collateral_of(account, asset)

    def get_collateral_tokens(self) -> tuple[str, ...]:
        return self.registry.list_assets()

    def get_collateral_price_feed(self, asset: str) -> PriceOracleAdapter:
        return self.registry.oracle_for(asset)
