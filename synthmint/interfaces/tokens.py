"""Token protocols: collateral assets and the synthetic unit.

Operator-scoped calls (``transfer``, ``burn``) act on the balance of the
account the token treats as its caller, which is the engine's custody address.
"""
from typing import Protocol


class AssetToken(Protocol):
    """Fungible collateral asset."""

    def balance_of(self, account: str) -> int: ...

    def transfer_from(self, from_: str, to: str, amount: int) -> bool: ...

    def transfer(self, to: str, amount: int) -> bool: ...


class SyntheticToken(Protocol):
    """Pegged synthetic unit; only the engine may mint or burn it."""

    def balance_of(self, account: str) -> int: ...

    def transfer_from(self, from_: str, to: str, amount: int) -> bool: ...

    def mint(self, to: str, amount: int) -> bool: ...

    def burn(self, amount: int) -> None: ...
