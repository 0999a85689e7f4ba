from __future__ import annotations

import logging
from decimal import Decimal, localcontext

from ...abi import load_uniswap_v3_pool_abi
from ...constants import DEFAULT_TWAP_WINDOW_SECONDS
from ...domain import Venue, VenueFamily
from ...errors import ZeroRateError
from ...snapshot import ChainSnapshot
from ...units import WAD
from .base import BaseVenueAdapter

logger = logging.getLogger(__name__)

TICK_BASE = Decimal("1.0001")


def tick_to_price(tick: int, decimals0: int, decimals1: int) -> int:
    """Convert a pool tick to an 18-decimal price of token0 in token1.

    ``1.0001**tick`` is raw token1 per raw token0; rescaling by the two
    token precisions gives normalized units.
    """
    with localcontext() as ctx:
        ctx.prec = 78
        raw = TICK_BASE**tick
        normalized = raw * Decimal(10**decimals0) / Decimal(10**decimals1)
        return int(normalized * WAD)


class ConcentratedLiquidityAdapter(BaseVenueAdapter):
    """Adapter for Uniswap V3 pools priced by their time-weighted average tick."""

    @property
    def family(self) -> VenueFamily:
        return VenueFamily.CONCENTRATED_LIQUIDITY

    def average_tick(self, snapshot: ChainSnapshot, venue: Venue) -> int:
        window = venue.twap_window or DEFAULT_TWAP_WINDOW_SECONDS
        tick_cumulatives, _ = snapshot.call(
            venue.address, load_uniswap_v3_pool_abi(), "observe", [window, 0]
        )
        delta = int(tick_cumulatives[1]) - int(tick_cumulatives[0])
        # Floor division rounds toward negative infinity like OracleLibrary.consult
        return delta // window

    def quote(
        self, snapshot: ChainSnapshot, venue: Venue, asset_in: str, asset_out: str
    ) -> int:
        abi = load_uniswap_v3_pool_abi()
        if int(snapshot.call(venue.address, abi, "liquidity")) == 0:
            raise ZeroRateError(f"Pool {venue.address} has no in-range liquidity")

        token0 = snapshot.call(venue.address, abi, "token0")
        if token0.lower() == asset_in.lower():
            inverse = False
        elif token0.lower() == asset_out.lower():
            inverse = True
        else:
            raise ValueError(
                f"Pool {venue.address} token0 {token0} is neither {asset_in} nor {asset_out}"
            )

        tick = self.average_tick(snapshot, venue)
        token0_asset, token1_asset = (
            (asset_out, asset_in) if inverse else (asset_in, asset_out)
        )
        price = tick_to_price(
            tick, snapshot.decimals(token0_asset), snapshot.decimals(token1_asset)
        )
        logger.debug("Pool %s average tick %d -> price %d", venue.address, tick, price)

        if price == 0:
            raise ZeroRateError(f"Pool {venue.address} price rounds to zero")
        if inverse:
            return WAD * WAD // price
        return price
