from __future__ import annotations

from ...domain import RateKind
from .base import BaseRateReader
from .exchange_rate import ExchangeRateReader
from .one_to_one import OneToOneRateReader
from .share_price import SharePriceReader
from .virtual_price import VirtualPriceReader


def get_rate_reader(rate_kind: RateKind) -> BaseRateReader:
    """Return the reader for a rate kind."""
    match rate_kind:
        case RateKind.ONE_TO_ONE:
            return OneToOneRateReader()
        case RateKind.EXTERNAL_EXCHANGE_RATE:
            return ExchangeRateReader()
        case RateKind.SHARE_PRICE:
            return SharePriceReader()
        case RateKind.POOL_VIRTUAL_PRICE:
            return VirtualPriceReader()
    raise ValueError(f"Unknown rate kind: {rate_kind}")


__all__ = [
    "BaseRateReader",
    "ExchangeRateReader",
    "OneToOneRateReader",
    "SharePriceReader",
    "VirtualPriceReader",
    "get_rate_reader",
]
