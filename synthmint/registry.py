"""Approved collateral assets, fixed at construction."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .errors import AssetNotApproved, ConfigurationMismatch
from .interfaces.tokens import AssetToken
from .oracles.adapter import PriceOracleAdapter


@dataclass(frozen=True)
class CollateralAsset:
    """An approved asset with its oracle and transfer collaborator."""

    asset_id: str
    token: AssetToken
    oracle: PriceOracleAdapter


class CollateralRegistry:
    """Mapping from approved asset id to its oracle, in registration order."""

    def __init__(
        self,
        asset_ids: Sequence[str],
        oracles: Sequence[PriceOracleAdapter],
        tokens: Sequence[AssetToken],
    ) -> None:
        if not len(asset_ids) == len(oracles) == len(tokens):
            raise ConfigurationMismatch(
                f"{len(asset_ids)} assets, {len(oracles)} oracles, {len(tokens)} tokens"
            )
        self._assets: dict[str, CollateralAsset] = {}
        for asset_id, oracle, token in zip(asset_ids, oracles, tokens):
            if asset_id in self._assets:
                raise ConfigurationMismatch(f"Asset '{asset_id}' registered twice")
            self._assets[asset_id] = CollateralAsset(asset_id, token, oracle)

    def is_approved(self, asset: str) -> bool:
        return asset in self._assets

    def get(self, asset: str) -> CollateralAsset:
        try:
            return self._assets[asset]
        except KeyError:
            raise AssetNotApproved(f"Asset '{asset}' is not approved collateral") from None

    def oracle_for(self, asset: str) -> PriceOracleAdapter:
        return self.get(asset).oracle

    def token_for(self, asset: str) -> AssetToken:
        return self.get(asset).token

    def list_assets(self) -> tuple[str, ...]:
        """Approved asset ids in registration order."""
        return tuple(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
