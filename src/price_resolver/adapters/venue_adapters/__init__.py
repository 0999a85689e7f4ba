from __future__ import annotations

from .base import BaseVenueAdapter
from .concentrated import ConcentratedLiquidityAdapter
from .constant_product import ConstantProductAdapter
from .stable_swap import StableSwapAdapter
from .synthetic import SyntheticAdapter

__all__ = [
    "BaseVenueAdapter",
    "ConcentratedLiquidityAdapter",
    "ConstantProductAdapter",
    "StableSwapAdapter",
    "SyntheticAdapter",
]
