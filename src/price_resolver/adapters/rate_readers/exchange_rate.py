from __future__ import annotations

import logging

from ...abi import load_ctoken_abi
from ...domain import RateKind, WrappedAssetLink
from ...snapshot import ChainSnapshot
from ...units import rescale_mantissa
from .base import BaseRateReader

logger = logging.getLogger(__name__)

SUPPORTED_FUNCTIONS = frozenset({"exchangeRateStored", "exchangeRateCurrent"})


class ExchangeRateReader(BaseRateReader):
    """Lending receipts (Compound cTokens, Cream crTokens).

    The protocol publishes raw underlying per raw receipt scaled by 1e18.
    For a cDAI with 8 decimals over DAI with 18 that is a 1e-10 shift; the
    reader rescales the mantissa so the result is a plain 18-decimal rate.
    """

    @property
    def rate_kind(self) -> RateKind:
        return RateKind.EXTERNAL_EXCHANGE_RATE

    def validate_link(self, link: WrappedAssetLink) -> None:
        super().validate_link(link)
        function = link.rate_function or "exchangeRateStored"
        if function not in SUPPORTED_FUNCTIONS:
            raise ValueError(
                f"Unsupported exchange rate function {function!r} for {link.wrapped}"
            )

    def read_rate(self, snapshot: ChainSnapshot, link: WrappedAssetLink) -> int:
        function = link.rate_function or "exchangeRateStored"
        mantissa = int(snapshot.call(link.rate_contract, load_ctoken_abi(), function))
        source_decimals, target_decimals = self.decimals_along(snapshot, link)
        rate = rescale_mantissa(mantissa, source_decimals, target_decimals)
        logger.debug(
            "Exchange rate of %s: mantissa %d -> %d", link.wrapped, mantissa, rate
        )
        return rate
