from __future__ import annotations

import logging

from ...abi import load_curve_pool_abi
from ...domain import Venue, VenueFamily
from ...errors import ZeroRateError
from ...snapshot import CHAIN_READ_ERRORS, ChainSnapshot
from ...units import WAD, scale_to_18
from .base import BaseVenueAdapter

logger = logging.getLogger(__name__)


class StableSwapAdapter(BaseVenueAdapter):
    """Adapter for Curve-style stable-swap pools.

    Venue assets are the pool coins in index order. The quote is the pool's
    own ``get_dy`` for one whole unit of ``asset_in``; pools whose ``get_dy``
    reverts fall back to the ratio of the two coin balances.
    """

    @property
    def family(self) -> VenueFamily:
        return VenueFamily.STABLE_SWAP

    def quote(
        self, snapshot: ChainSnapshot, venue: Venue, asset_in: str, asset_out: str
    ) -> int:
        abi = load_curve_pool_abi()
        i = venue.index_of(asset_in)
        j = venue.index_of(asset_out)
        decimals_in = snapshot.decimals(asset_in)
        decimals_out = snapshot.decimals(asset_out)
        amount_in = 10**decimals_in

        try:
            amount_out = int(snapshot.call(venue.address, abi, "get_dy", i, j, amount_in))
        except CHAIN_READ_ERRORS as e:
            logger.debug(
                "get_dy(%d, %d) failed on %s, using balances: %s", i, j, venue.address, e
            )
            return self._balance_ratio(snapshot, venue, i, j, decimals_in, decimals_out)

        if amount_out == 0:
            raise ZeroRateError(f"Pool {venue.address} get_dy returned zero")

        return scale_to_18(amount_out, decimals_out) * WAD // scale_to_18(
            amount_in, decimals_in
        )

    def _balance_ratio(
        self,
        snapshot: ChainSnapshot,
        venue: Venue,
        i: int,
        j: int,
        decimals_in: int,
        decimals_out: int,
    ) -> int:
        abi = load_curve_pool_abi()
        balance_in = scale_to_18(
            int(snapshot.call(venue.address, abi, "balances", i)), decimals_in
        )
        balance_out = scale_to_18(
            int(snapshot.call(venue.address, abi, "balances", j)), decimals_out
        )
        if balance_in == 0 or balance_out == 0:
            raise ZeroRateError(f"Pool {venue.address} has an empty coin balance")
        return balance_out * WAD // balance_in
