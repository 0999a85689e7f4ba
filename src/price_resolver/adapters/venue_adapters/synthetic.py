from __future__ import annotations

import logging

from ...abi import load_synthetix_exchange_rates_abi
from ...domain import Venue, VenueFamily
from ...errors import ZeroRateError
from ...snapshot import ChainSnapshot
from ...units import WAD
from .base import BaseVenueAdapter

logger = logging.getLogger(__name__)


def currency_key_to_bytes32(key: str) -> bytes:
    """Encode a Synthetix currency key (e.g. ``sETH``) as right-padded bytes32."""
    encoded = key.encode("utf-8")
    if len(encoded) > 32:
        raise ValueError(f"Currency key {key!r} longer than 32 bytes")
    return encoded.ljust(32, b"\x00")


class SyntheticAdapter(BaseVenueAdapter):
    """Adapter for synths quoted by their issuer's exchange-rate contract.

    The venue address is the exchange-rates contract; ``currency_keys`` are
    aligned with ``assets``. All synths settle through a common asset (sUSD)
    and carry 18 decimals, so ``effectiveValue`` of one unit is the price.
    """

    @property
    def family(self) -> VenueFamily:
        return VenueFamily.SYNTHETIC

    def quote(
        self, snapshot: ChainSnapshot, venue: Venue, asset_in: str, asset_out: str
    ) -> int:
        if venue.currency_keys is None:
            raise ValueError(f"Synthetic venue {venue.label} has no currency keys")

        source_key = venue.currency_keys[venue.index_of(asset_in)]
        destination_key = venue.currency_keys[venue.index_of(asset_out)]
        value = int(
            snapshot.call(
                venue.address,
                load_synthetix_exchange_rates_abi(),
                "effectiveValue",
                currency_key_to_bytes32(source_key),
                WAD,
                currency_key_to_bytes32(destination_key),
            )
        )
        if value == 0:
            raise ZeroRateError(
                f"Exchange rates {venue.address} have no rate for {source_key}/{destination_key}"
            )
        return value
