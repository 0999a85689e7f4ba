from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ...domain import Venue, VenueFamily
from ...errors import ZeroRateError
from ...snapshot import CHAIN_READ_ERRORS, ChainSnapshot

logger = logging.getLogger(__name__)


class BaseVenueAdapter(ABC):
    """Abstract base class for one venue family.

    An adapter owns every configured venue of its family and answers, for a
    concrete pair, whether it can quote it and what the quote is. Quotes are
    18-decimal prices: normalized units of ``asset_out`` per normalized unit
    of ``asset_in``.
    """

    def __init__(self, venues: list[Venue]):
        self.venues = [venue for venue in venues if venue.family == self.family]

    @property
    @abstractmethod
    def family(self) -> VenueFamily:
        """Return the venue family this adapter quotes."""
        ...

    @property
    def adapter_name(self) -> str:
        return self.family.value

    @abstractmethod
    def quote(
        self, snapshot: ChainSnapshot, venue: Venue, asset_in: str, asset_out: str
    ) -> int:
        """Quote ``asset_in`` in ``asset_out`` on one venue.

        Raises:
            ZeroRateError: If the venue has no usable liquidity for the pair.
        """
        ...

    def covering_venues(self, asset_in: str, asset_out: str) -> list[Venue]:
        return [venue for venue in self.venues if venue.covers(asset_in, asset_out)]

    def try_quote(
        self, snapshot: ChainSnapshot, asset_in: str, asset_out: str
    ) -> int | None:
        """Quote the pair on the first configured venue that can answer.

        Returns:
            The 18-decimal price, or None if no venue of this family covers
            the pair or every covering venue's state read failed.

        Raises:
            ZeroRateError: If every venue that could be read reported
                degenerate liquidity.
        """
        zero_rate: ZeroRateError | None = None
        for venue in self.covering_venues(asset_in, asset_out):
            try:
                price = self.quote(snapshot, venue, asset_in, asset_out)
            except ZeroRateError as e:
                logger.debug("Venue %s unusable: %s", venue.label, e)
                zero_rate = e
                continue
            except CHAIN_READ_ERRORS as e:
                logger.warning(
                    "Venue %s read failed for %s -> %s: %s",
                    venue.label,
                    asset_in,
                    asset_out,
                    e,
                )
                continue

            if price <= 0:
                zero_rate = ZeroRateError(f"Venue {venue.label} quoted {price}")
                continue

            logger.debug(
                "Venue %s quoted %s -> %s at %d", venue.label, asset_in, asset_out, price
            )
            return price

        if zero_rate is not None:
            raise zero_rate
        return None
