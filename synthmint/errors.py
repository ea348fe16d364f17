"""Typed failures raised by the issuance engine.

Every failure aborts the whole call: the engine restores its ledger and any
checkpointable collaborators before the exception reaches the caller.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


class InvalidAmount(EngineError):
    """Raised when an amount is zero, negative or not an integer."""


class AssetNotApproved(EngineError):
    """Raised when an asset is not registered as collateral."""


class ConfigurationMismatch(EngineError):
    """Raised at construction when asset, oracle and token lists disagree."""


class TransferFailed(EngineError):
    """Raised when a token collaborator reports a failed transfer."""


class MintFailed(EngineError):
    """Raised when the synthetic token refuses to mint."""


class InsufficientCollateral(EngineError):
    """Raised when a redeem or seizure exceeds the deposited collateral."""


class InsufficientDebt(EngineError):
    """Raised when a burn exceeds the account's minted debt."""


class HealthFactorBroken(EngineError):
    """Raised when an operation would leave an account below the minimum health factor."""

    def __init__(self, health_factor: int) -> None:
        super().__init__(f"health factor {health_factor} below minimum")
        self.health_factor = health_factor


class HealthFactorOk(EngineError):
    """Raised when liquidating an account that is still solvent."""


class HealthFactorNotImproved(EngineError):
    """Raised when a liquidation does not raise the target's health factor."""


class ReentrancyDetected(EngineError):
    """Raised when a guarded entry point is called while another is in flight."""


class StalePriceOrInvalidFeed(EngineError):
    """Raised when a feed reports a non-positive, missing or outdated price."""
