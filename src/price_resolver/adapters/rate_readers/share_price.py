from __future__ import annotations

import logging

from ...abi import load_erc4626_abi, load_wsteth_abi, load_yearn_vault_abi
from ...domain import RateKind, UnwrapDirection, WrappedAssetLink
from ...snapshot import ChainSnapshot
from ...units import rescale_mantissa, scale_to_18
from .base import BaseRateReader

logger = logging.getLogger(__name__)

DEFAULT_FUNCTIONS = {
    UnwrapDirection.WRAPPED_TO_UNDERLYING: "convertToAssets",
    UnwrapDirection.UNDERLYING_TO_WRAPPED: "convertToShares",
}

# Functions taking one whole unit of the source asset, and the direction they answer
ONE_UNIT_FUNCTIONS = {
    "convertToAssets": UnwrapDirection.WRAPPED_TO_UNDERLYING,
    "convertToShares": UnwrapDirection.UNDERLYING_TO_WRAPPED,
    "getStETHByWstETH": UnwrapDirection.WRAPPED_TO_UNDERLYING,
    "getWstETHByStETH": UnwrapDirection.UNDERLYING_TO_WRAPPED,
}

WSTETH_FUNCTIONS = frozenset({"getStETHByWstETH", "getWstETHByStETH"})

# Functions that only answer "assets per share"
WRAPPED_TO_UNDERLYING_ONLY = frozenset({"pricePerShare", "getPricePerFullShare"})


class SharePriceReader(BaseRateReader):
    """Vault shares and non-rebasing wrappers.

    Supported rate functions:
    - ``convertToAssets`` / ``convertToShares``: ERC-4626, one whole unit in.
    - ``getStETHByWstETH`` / ``getWstETHByStETH``: Lido wstETH, one whole unit in.
    - ``pricePerShare``: Yearn v2, underlying per share in underlying decimals.
    - ``getPricePerFullShare``: Yearn v1, 1e18 mantissa.
    """

    @property
    def rate_kind(self) -> RateKind:
        return RateKind.SHARE_PRICE

    def function_for(self, link: WrappedAssetLink) -> str:
        return link.rate_function or DEFAULT_FUNCTIONS[link.direction]

    def validate_link(self, link: WrappedAssetLink) -> None:
        super().validate_link(link)
        function = self.function_for(link)
        if function in WRAPPED_TO_UNDERLYING_ONLY:
            if link.direction != UnwrapDirection.WRAPPED_TO_UNDERLYING:
                raise ValueError(
                    f"{function} only reports underlying per share ({link.wrapped})"
                )
        elif ONE_UNIT_FUNCTIONS.get(function) != link.direction:
            raise ValueError(
                f"Unsupported share price function {function!r} for {link.wrapped} "
                f"({link.direction.value})"
            )

    def read_rate(self, snapshot: ChainSnapshot, link: WrappedAssetLink) -> int:
        function = self.function_for(link)
        source_decimals, target_decimals = self.decimals_along(snapshot, link)

        match function:
            case "pricePerShare":
                raw = int(
                    snapshot.call(link.rate_contract, load_yearn_vault_abi(), function)
                )
                return scale_to_18(raw, target_decimals)
            case "getPricePerFullShare":
                raw = int(
                    snapshot.call(link.rate_contract, load_yearn_vault_abi(), function)
                )
                return rescale_mantissa(raw, source_decimals, target_decimals)
            case _:
                abi = (
                    load_wsteth_abi()
                    if function in WSTETH_FUNCTIONS
                    else load_erc4626_abi()
                )
                raw = int(
                    snapshot.call(link.rate_contract, abi, function, 10**source_decimals)
                )
                logger.debug("%s(1 unit) of %s -> %d", function, link.wrapped, raw)
                return scale_to_18(raw, target_decimals)
