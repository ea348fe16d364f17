"""Per-account collateral and debt bookkeeping.

The ledger is owned by one engine instance; it never talks to tokens or
oracles. Underflow is rejected rather than clamped.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field

from .errors import InsufficientCollateral, InsufficientDebt


@dataclass
class Position:
    """One account's deposited collateral and minted debt."""

    collateral: dict[str, int] = field(default_factory=dict)
    debt: int = 0

    def is_empty(self) -> bool:
        return self.debt == 0 and not self.collateral


class PositionLedger:
    """Mapping of account -> Position.

    Positions appear on first write and only disappear when a rollback undoes
    their creation. Zero collateral entries are dropped so a fully redeemed
    position compares equal to a fresh one.
    """

    def __init__(self) -> None:
        self._positions: dict[str, Position] = {}
        self._journal: dict[str, Position | None] | None = None

    def _position(self, account: str) -> Position:
        """Writable position; records its pre-write state in the open journal."""
        if self._journal is not None and account not in self._journal:
            original = self._positions.get(account)
            self._journal[account] = None if original is None else copy.deepcopy(original)
        if account not in self._positions:
            self._positions[account] = Position()
        return self._positions[account]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def collateral_of(self, account: str, asset: str) -> int:
        position = self._positions.get(account)
        return position.collateral.get(asset, 0) if position else 0

    def debt_of(self, account: str) -> int:
        position = self._positions.get(account)
        return position.debt if position else 0

    def position(self, account: str) -> Position:
        """Copy of an account's position (empty if never touched)."""
        return copy.deepcopy(self._positions.get(account, Position()))

    def accounts(self) -> list[str]:
        return sorted(self._positions)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_collateral(self, account: str, asset: str, amount: int) -> None:
        position = self._position(account)
        position.collateral[asset] = position.collateral.get(asset, 0) + amount

    def remove_collateral(self, account: str, asset: str, amount: int) -> None:
        held = self.collateral_of(account, asset)
        if amount > held:
            raise InsufficientCollateral(
                f"{account} holds {held} {asset}, cannot remove {amount}"
            )
        position = self._position(account)
        remaining = held - amount
        if remaining:
            position.collateral[asset] = remaining
        else:
            position.collateral.pop(asset, None)

    def add_debt(self, account: str, amount: int) -> None:
        self._position(account).debt += amount

    def remove_debt(self, account: str, amount: int) -> None:
        owed = self.debt_of(account)
        if amount > owed:
            raise InsufficientDebt(f"{account} owes {owed}, cannot burn {amount}")
        self._position(account).debt = owed - amount

    # ------------------------------------------------------------------
    # Checkpointing
    # ------------------------------------------------------------------

    def checkpoint(self) -> dict[str, Position | None]:
        """Open a journal of the accounts written from now on.

        Only the first write to each account is copied, so the cost follows the
        accounts a call touches. Opening a new checkpoint supersedes the last.
        """
        self._journal = {}
        return self._journal

    def rollback(self, state: dict[str, Position | None]) -> None:
        for account, original in state.items():
            if original is None:
                self._positions.pop(account, None)
            else:
                self._positions[account] = copy.deepcopy(original)
        if self._journal is state:
            self._journal = None
