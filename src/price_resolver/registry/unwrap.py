from __future__ import annotations

import logging

from ..adapters.rate_readers import BaseRateReader, get_rate_reader
from ..domain import UnwrapResult, WrappedAssetLink
from ..errors import ZeroRateError
from ..snapshot import CHAIN_READ_ERRORS, ChainSnapshot

logger = logging.getLogger(__name__)


class UnwrapRegistry:
    """Maps wrapped assets to their underlying and live conversion rate.

    Links are static configuration; rates are read through the snapshot on
    every lookup. Each wrapped asset has at most one link and following
    links must never revisit an asset.
    """

    def __init__(self, links: list[WrappedAssetLink]):
        self._links: dict[str, WrappedAssetLink] = {}
        self._readers: dict[str, BaseRateReader] = {}

        for link in links:
            key = link.wrapped.lower()
            if key in self._links:
                raise ValueError(f"Wrapped asset {link.wrapped} has more than one link")
            if link.wrapped.lower() == link.underlying.lower():
                raise ValueError(f"Wrapped asset {link.wrapped} unwraps into itself")
            reader = get_rate_reader(link.rate_kind)
            reader.validate_link(link)
            self._links[key] = link
            self._readers[key] = reader

        self._reject_cycles()

    def _reject_cycles(self) -> None:
        for start in self._links:
            seen = {start}
            current = self._links[start].underlying.lower()
            while current in self._links:
                if current in seen:
                    raise ValueError(
                        f"Unwrap links starting at {self._links[start].wrapped} form a cycle"
                    )
                seen.add(current)
                current = self._links[current].underlying.lower()

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, asset: object) -> bool:
        return isinstance(asset, str) and asset.lower() in self._links

    def link_for(self, asset: str) -> WrappedAssetLink | None:
        return self._links.get(asset.lower())

    def chain_length(self, asset: str) -> int:
        """Number of unwrap steps from ``asset`` down to a base asset."""
        length = 0
        link = self.link_for(asset)
        while link is not None:
            length += 1
            link = self.link_for(link.underlying)
        return length

    def try_unwrap(self, snapshot: ChainSnapshot, asset: str) -> UnwrapResult | None:
        """Unwrap ``asset`` one level.

        Returns:
            The underlying asset with the current rate, or None when the asset
            has no link (it is a base asset).

        Raises:
            ZeroRateError: If the rate cannot be read or is zero.
        """
        key = asset.lower()
        link = self._links.get(key)
        if link is None:
            return None

        try:
            rate = self._readers[key].read_rate(snapshot, link)
        except CHAIN_READ_ERRORS as e:
            logger.warning(
                "Rate read failed for %s (%s): %s", link.wrapped, link.rate_kind.value, e
            )
            raise ZeroRateError(f"Unable to read unwrap rate of {link.wrapped}") from e

        if rate <= 0:
            raise ZeroRateError(f"Unwrap rate of {link.wrapped} is {rate}")

        logger.debug(
            "Unwrapped %s -> %s at %d (%s)",
            link.wrapped,
            link.underlying,
            rate,
            link.direction.value,
        )
        return UnwrapResult(
            underlying=link.underlying, rate=rate, direction=link.direction
        )
