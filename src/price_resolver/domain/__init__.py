"""Domain models for the price resolver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors import PriceError


class VenueFamily(str, Enum):
    STABLE_SWAP = "stable_swap"
    CONCENTRATED_LIQUIDITY = "concentrated_liquidity"
    CONSTANT_PRODUCT = "constant_product"
    SYNTHETIC = "synthetic"


class RateKind(str, Enum):
    ONE_TO_ONE = "one_to_one"
    EXTERNAL_EXCHANGE_RATE = "external_exchange_rate"
    SHARE_PRICE = "share_price"
    POOL_VIRTUAL_PRICE = "pool_virtual_price"


class UnwrapDirection(str, Enum):
    """Which way a published rate converts.

    WRAPPED_TO_UNDERLYING: rate is underlying per wrapped.
    UNDERLYING_TO_WRAPPED: rate is wrapped per underlying.
    """

    WRAPPED_TO_UNDERLYING = "wrapped_to_underlying"
    UNDERLYING_TO_WRAPPED = "underlying_to_wrapped"


@dataclass(frozen=True)
class Venue:
    """A liquidity source able to quote any pair among its assets."""

    family: VenueFamily
    address: str
    assets: tuple[str, ...]
    currency_keys: tuple[str, ...] | None = None
    twap_window: int | None = None
    name: str | None = None

    def covers(self, asset_in: str, asset_out: str) -> bool:
        keys = [asset.lower() for asset in self.assets]
        return (
            asset_in.lower() != asset_out.lower()
            and asset_in.lower() in keys
            and asset_out.lower() in keys
        )

    def index_of(self, asset: str) -> int:
        """Position of ``asset`` among the venue assets, ignoring address case."""
        return [a.lower() for a in self.assets].index(asset.lower())

    @property
    def label(self) -> str:
        return self.name or f"{self.family.value}:{self.address}"


@dataclass(frozen=True)
class WrappedAssetLink:
    """Static relation between a wrapped asset and what it unwraps into."""

    wrapped: str
    underlying: str
    rate_kind: RateKind
    direction: UnwrapDirection = UnwrapDirection.WRAPPED_TO_UNDERLYING
    rate_source: str | None = None
    rate_function: str | None = None

    @property
    def rate_contract(self) -> str:
        """Contract publishing the rate; the wrapped token unless overridden."""
        return self.rate_source or self.wrapped


@dataclass(frozen=True)
class UnwrapResult:
    """Live conversion for one wrapped asset, valid for a single snapshot."""

    underlying: str
    rate: int  # 18 decimals, in ``direction``
    direction: UnwrapDirection


@dataclass(frozen=True)
class PriceResult:
    """Outcome of one pair in a batch query."""

    token_in: str
    token_out: str
    price: int | None = None  # 18 decimals
    error: PriceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.price is not None
