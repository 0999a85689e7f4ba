from __future__ import annotations

import logging

from ...abi import load_uniswap_v2_pair_abi
from ...domain import Venue, VenueFamily
from ...errors import ZeroRateError
from ...snapshot import ChainSnapshot
from ...units import WAD, scale_to_18
from .base import BaseVenueAdapter

logger = logging.getLogger(__name__)


class ConstantProductAdapter(BaseVenueAdapter):
    """Adapter for x*y=k pairs (Uniswap V2, Sushiswap).

    The spot price is the ratio of the pair's reserves after normalizing
    both sides to 18 decimals.
    """

    @property
    def family(self) -> VenueFamily:
        return VenueFamily.CONSTANT_PRODUCT

    def quote(
        self, snapshot: ChainSnapshot, venue: Venue, asset_in: str, asset_out: str
    ) -> int:
        abi = load_uniswap_v2_pair_abi()
        reserve0, reserve1, _ = snapshot.call(venue.address, abi, "getReserves")
        token0 = snapshot.call(venue.address, abi, "token0")

        if token0.lower() == asset_in.lower():
            reserve_in, reserve_out = int(reserve0), int(reserve1)
        elif token0.lower() == asset_out.lower():
            reserve_in, reserve_out = int(reserve1), int(reserve0)
        else:
            raise ValueError(
                f"Pair {venue.address} token0 {token0} is neither {asset_in} nor {asset_out}"
            )

        if reserve_in == 0 or reserve_out == 0:
            raise ZeroRateError(f"Pair {venue.address} has empty reserves")

        reserve_in_18 = scale_to_18(reserve_in, snapshot.decimals(asset_in))
        reserve_out_18 = scale_to_18(reserve_out, snapshot.decimals(asset_out))
        if reserve_in_18 == 0:
            raise ZeroRateError(f"Pair {venue.address} reserve rounds to zero")

        return reserve_out_18 * WAD // reserve_in_18
