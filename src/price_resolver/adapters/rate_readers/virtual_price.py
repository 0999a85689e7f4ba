from __future__ import annotations

from ...abi import load_curve_pool_abi
from ...domain import RateKind, UnwrapDirection, WrappedAssetLink
from ...snapshot import ChainSnapshot
from .base import BaseRateReader

# get_virtual_price: stable pools. lp_price: crypto pools (tricrypto), priced in coin 0.
SUPPORTED_FUNCTIONS = frozenset({"get_virtual_price", "lp_price"})


class VirtualPriceReader(BaseRateReader):
    """Curve LP tokens valued by their pool.

    Both getters report the value of one LP token in 18 decimals. It is
    applied as if the LP token unwrapped into the link's underlying, which
    should be the pool's reference coin (coin 0 for crypto pools).
    """

    @property
    def rate_kind(self) -> RateKind:
        return RateKind.POOL_VIRTUAL_PRICE

    @property
    def supported_directions(self) -> frozenset[UnwrapDirection]:
        return frozenset({UnwrapDirection.WRAPPED_TO_UNDERLYING})

    def function_for(self, link: WrappedAssetLink) -> str:
        return link.rate_function or "get_virtual_price"

    def validate_link(self, link: WrappedAssetLink) -> None:
        super().validate_link(link)
        function = self.function_for(link)
        if function not in SUPPORTED_FUNCTIONS:
            raise ValueError(
                f"Unsupported pool price function {function!r} for {link.wrapped}"
            )

    def read_rate(self, snapshot: ChainSnapshot, link: WrappedAssetLink) -> int:
        return int(
            snapshot.call(
                link.rate_contract, load_curve_pool_abi(), self.function_for(link)
            )
        )
