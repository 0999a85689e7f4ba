from __future__ import annotations

from ..domain import Venue, VenueFamily
from .rate_readers import get_rate_reader
from .venue_adapters import (
    BaseVenueAdapter,
    ConcentratedLiquidityAdapter,
    ConstantProductAdapter,
    StableSwapAdapter,
    SyntheticAdapter,
)


def get_venue_adapter_class(family: VenueFamily) -> type[BaseVenueAdapter]:
    """Return the adapter class quoting a venue family."""
    match family:
        case VenueFamily.STABLE_SWAP:
            return StableSwapAdapter
        case VenueFamily.CONCENTRATED_LIQUIDITY:
            return ConcentratedLiquidityAdapter
        case VenueFamily.CONSTANT_PRODUCT:
            return ConstantProductAdapter
        case VenueFamily.SYNTHETIC:
            return SyntheticAdapter
    raise ValueError(f"Unknown venue family: {family}")


def build_venue_adapters(
    family_priority: list[VenueFamily], venues: list[Venue]
) -> list[BaseVenueAdapter]:
    """Instantiate one adapter per family, in priority order.

    Families without configured venues are skipped.
    """
    adapters: list[BaseVenueAdapter] = []
    for family in family_priority:
        adapter = get_venue_adapter_class(family)(venues)
        if adapter.venues:
            adapters.append(adapter)
    return adapters


__all__ = [
    "build_venue_adapters",
    "get_rate_reader",
    "get_venue_adapter_class",
]
