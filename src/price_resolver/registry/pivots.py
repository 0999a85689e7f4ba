from __future__ import annotations

from collections.abc import Iterator


class PivotSet:
    """Ordered reserve assets used as hop points.

    The order is the search order; duplicates and blacklisted assets are
    dropped at construction.
    """

    def __init__(self, pivots: list[str], blacklist: list[str] | None = None):
        blocked = {asset.lower() for asset in blacklist or []}
        ordered: list[str] = []
        seen: set[str] = set()
        for pivot in pivots:
            key = pivot.lower()
            if key in blocked or key in seen:
                continue
            seen.add(key)
            ordered.append(pivot)
        self._pivots = tuple(ordered)

    def __iter__(self) -> Iterator[str]:
        return iter(self._pivots)

    def __len__(self) -> int:
        return len(self._pivots)

    def __contains__(self, asset: object) -> bool:
        return isinstance(asset, str) and any(
            asset.lower() == pivot.lower() for pivot in self._pivots
        )

    def candidates(self, token_in: str, token_out: str) -> list[str]:
        """Pivots to try for a pair, skipping the pair's own assets."""
        excluded = {token_in.lower(), token_out.lower()}
        return [pivot for pivot in self._pivots if pivot.lower() not in excluded]
