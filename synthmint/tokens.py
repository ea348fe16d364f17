"""In-memory fungible token used for collateral assets and the synthetic unit."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Balances-only token.

    ``operator`` is the account that caller-scoped operations act for
    (``transfer`` and ``burn``). The engine passes its custody address.
    """

    def __init__(self, symbol: str, operator: str) -> None:
        self.symbol = symbol
        self.operator = operator
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def _move(self, from_: str, to: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(from_) < amount:
            logger.debug(
                "%s transfer of %s from %s refused (balance %s)",
                self.symbol, amount, from_, self.balance_of(from_),
            )
            return False
        self._balances[from_] = self.balance_of(from_) - amount
        self._balances[to] = self.balance_of(to) + amount
        return True

    def transfer_from(self, from_: str, to: str, amount: int) -> bool:
        return self._move(from_, to, amount)

    def transfer(self, to: str, amount: int) -> bool:
        return self._move(self.operator, to, amount)

    def mint(self, to: str, amount: int) -> bool:
        if amount <= 0:
            return False
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        return True

    def burn(self, amount: int) -> None:
        held = self.balance_of(self.operator)
        if amount <= 0 or amount > held:
            raise ValueError(f"{self.symbol}: cannot burn {amount}, operator holds {held}")
        self._balances[self.operator] = held - amount
        self._total_supply -= amount

    def checkpoint(self) -> tuple[dict[str, int], int]:
        return dict(self._balances), self._total_supply

    def rollback(self, state: tuple[dict[str, int], int]) -> None:
        balances, total_supply = state
        self._balances = dict(balances)
        self._total_supply = total_supply
