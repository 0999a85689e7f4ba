from __future__ import annotations

from abc import ABC, abstractmethod

from ...domain import RateKind, UnwrapDirection, WrappedAssetLink
from ...snapshot import ChainSnapshot


class BaseRateReader(ABC):
    """Abstract base class for reading a wrapped asset's conversion rate."""

    @property
    @abstractmethod
    def rate_kind(self) -> RateKind:
        ...

    @property
    def supported_directions(self) -> frozenset[UnwrapDirection]:
        return frozenset(UnwrapDirection)

    def validate_link(self, link: WrappedAssetLink) -> None:
        """Reject links this reader cannot serve.

        Raises:
            ValueError: If the link's direction or rate function is unsupported.
        """
        if link.direction not in self.supported_directions:
            raise ValueError(
                f"{self.rate_kind.value} links do not support direction {link.direction.value} "
                f"(wrapped asset {link.wrapped})"
            )

    @abstractmethod
    def read_rate(self, snapshot: ChainSnapshot, link: WrappedAssetLink) -> int:
        """Return the current rate as an 18-decimal value in ``link.direction``."""
        ...

    def decimals_along(
        self, snapshot: ChainSnapshot, link: WrappedAssetLink
    ) -> tuple[int, int]:
        """Return (source, target) decimals for the link's direction."""
        wrapped_decimals = snapshot.decimals(link.wrapped)
        underlying_decimals = snapshot.decimals(link.underlying)
        if link.direction == UnwrapDirection.WRAPPED_TO_UNDERLYING:
            return wrapped_decimals, underlying_decimals
        return underlying_decimals, wrapped_decimals
