from __future__ import annotations

from .pivots import PivotSet
from .unwrap import UnwrapRegistry

__all__ = ["PivotSet", "UnwrapRegistry"]
