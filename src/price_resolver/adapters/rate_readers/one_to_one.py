from __future__ import annotations

from ...domain import RateKind, WrappedAssetLink
from ...snapshot import ChainSnapshot
from ...units import WAD
from .base import BaseRateReader


class OneToOneRateReader(BaseRateReader):
    """Wrappers pegged 1:1 to their underlying (Aave aTokens, WETH)."""

    @property
    def rate_kind(self) -> RateKind:
        return RateKind.ONE_TO_ONE

    def read_rate(self, snapshot: ChainSnapshot, link: WrappedAssetLink) -> int:
        return WAD
