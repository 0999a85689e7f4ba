"""Multi-venue price resolution engine."""

from __future__ import annotations

from .domain import (
    PriceResult,
    RateKind,
    UnwrapDirection,
    UnwrapResult,
    Venue,
    VenueFamily,
    WrappedAssetLink,
)
from .errors import (
    DepthExceededError,
    InvalidAssetError,
    NoPathError,
    PriceError,
    PriceErrorKind,
    PriceTimeoutError,
    RpcUnavailableError,
    ZeroRateError,
)
from .oracle import PriceOracle
from .resolver import PathResolver
from .settings import ResolverSettings
from .snapshot import ChainSnapshot
from .units import WAD

__all__ = [
    "WAD",
    "ChainSnapshot",
    "DepthExceededError",
    "InvalidAssetError",
    "NoPathError",
    "PathResolver",
    "PriceError",
    "PriceErrorKind",
    "PriceOracle",
    "PriceResult",
    "PriceTimeoutError",
    "RateKind",
    "RpcUnavailableError",
    "ResolverSettings",
    "UnwrapDirection",
    "UnwrapResult",
    "Venue",
    "VenueFamily",
    "WrappedAssetLink",
    "ZeroRateError",
]
