"""Path resolution across venues, unwrap links and pivot assets."""

from __future__ import annotations

import logging

from .adapters.venue_adapters import BaseVenueAdapter
from .constants import DEFAULT_MAX_DEPTH
from .domain import UnwrapDirection, UnwrapResult
from .errors import (
    DepthExceededError,
    NoPathError,
    PriceError,
    ZeroRateError,
)
from .registry import PivotSet, UnwrapRegistry
from .snapshot import ChainSnapshot
from .units import WAD, div_wad, mul_wad

logger = logging.getLogger(__name__)

# Failures that move resolution on to the next candidate. Anything else
# (depth exhaustion, timeouts, unreachable RPC) aborts the whole resolution.
CANDIDATE_FAILURES = (NoPathError, ZeroRateError)


def compose_unwrapped_input(unwrapped: UnwrapResult, inner_price: int) -> int:
    """Price of a wrapped input from the price of its underlying."""
    if unwrapped.direction == UnwrapDirection.WRAPPED_TO_UNDERLYING:
        return mul_wad(unwrapped.rate, inner_price)
    return div_wad(inner_price, unwrapped.rate)


def compose_unwrapped_output(unwrapped: UnwrapResult, inner_price: int) -> int:
    """Price in a wrapped output from the price in its underlying."""
    if unwrapped.direction == UnwrapDirection.WRAPPED_TO_UNDERLYING:
        return div_wad(inner_price, unwrapped.rate)
    return mul_wad(inner_price, unwrapped.rate)


class PathResolver:
    """Finds a single deterministic price for an arbitrary pair of assets.

    Candidates are tried in strict order and the first success wins:

    1. identity
    2. direct venue quote, families in configured priority order
    3. unwrap ``token_in`` and recurse
    4. unwrap ``token_out`` and recurse
    5. hop through each pivot in list order (legs may unwrap but not pivot)

    Every unwrap step and pivot leg spends one unit of the depth budget,
    which is passed explicitly through the recursion.
    """

    def __init__(
        self,
        adapters: list[BaseVenueAdapter],
        unwrap_registry: UnwrapRegistry,
        pivots: PivotSet,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.adapters = list(adapters)
        self.unwrap_registry = unwrap_registry
        self.pivots = pivots
        self.max_depth = max_depth

    @property
    def family_order(self) -> list[str]:
        return [adapter.adapter_name for adapter in self.adapters]

    def resolve(
        self,
        snapshot: ChainSnapshot,
        token_in: str,
        token_out: str,
        depth_budget: int | None = None,
    ) -> int:
        """Resolve the 18-decimal price of one ``token_in`` in ``token_out``.

        Args:
            snapshot: State handle every external read goes through.
            token_in: Canonical address of the asset being priced.
            token_out: Canonical address of the quote asset.
            depth_budget: Recursion budget; defaults to ``max_depth``.

        Raises:
            NoPathError: If no candidate prices the pair.
            ZeroRateError: If the last remaining candidate had a zero rate.
            DepthExceededError: If the budget ran out before a terminal quote.
            PriceTimeoutError: If an external read timed out.
            RpcUnavailableError: If the chain endpoint could not be reached.
        """
        budget = self.max_depth if depth_budget is None else depth_budget
        return self._resolve(snapshot, token_in, token_out, budget, allow_pivot=True)

    def direct_quote(
        self, snapshot: ChainSnapshot, token_in: str, token_out: str
    ) -> int | None:
        """Ask each venue family, in priority order, for a direct quote.

        Raises:
            ZeroRateError: If no family quoted and at least one reported a
                degenerate venue.
        """
        zero_rate: ZeroRateError | None = None
        for adapter in self.adapters:
            try:
                price = adapter.try_quote(snapshot, token_in, token_out)
            except ZeroRateError as e:
                zero_rate = e
                continue
            if price is not None:
                logger.debug(
                    "Direct %s quote %s -> %s: %d",
                    adapter.adapter_name,
                    token_in,
                    token_out,
                    price,
                )
                return price
        if zero_rate is not None:
            raise zero_rate
        return None

    def _resolve(
        self,
        snapshot: ChainSnapshot,
        token_in: str,
        token_out: str,
        budget: int,
        allow_pivot: bool,
    ) -> int:
        if token_in.lower() == token_out.lower():
            return WAD

        last_failure: PriceError | None = None

        try:
            price = self.direct_quote(snapshot, token_in, token_out)
        except ZeroRateError as e:
            last_failure = e
        else:
            if price is not None:
                return price

        if token_in in self.unwrap_registry:
            try:
                return self._unwrap_input(
                    snapshot, token_in, token_out, budget, allow_pivot
                )
            except CANDIDATE_FAILURES as e:
                last_failure = e

        if token_out in self.unwrap_registry:
            try:
                return self._unwrap_output(
                    snapshot, token_in, token_out, budget, allow_pivot
                )
            except CANDIDATE_FAILURES as e:
                last_failure = e

        if allow_pivot:
            for pivot in self.pivots.candidates(token_in, token_out):
                try:
                    return self._via_pivot(snapshot, token_in, pivot, token_out, budget)
                except CANDIDATE_FAILURES as e:
                    logger.debug(
                        "Pivot %s failed for %s -> %s: %s", pivot, token_in, token_out, e
                    )
                    last_failure = e

        if isinstance(last_failure, ZeroRateError):
            raise last_failure
        raise NoPathError(f"No price path from {token_in} to {token_out}")

    def _spend(self, budget: int, token_in: str, token_out: str) -> int:
        if budget <= 0:
            raise DepthExceededError(
                f"Depth budget of {self.max_depth} exhausted resolving {token_in} -> {token_out}"
            )
        return budget - 1

    def _unwrap(self, snapshot: ChainSnapshot, asset: str) -> UnwrapResult:
        unwrapped = self.unwrap_registry.try_unwrap(snapshot, asset)
        if unwrapped is None:
            raise NoPathError(f"{asset} has no unwrap link")
        return unwrapped

    def _unwrap_input(
        self,
        snapshot: ChainSnapshot,
        token_in: str,
        token_out: str,
        budget: int,
        allow_pivot: bool,
    ) -> int:
        remaining = self._spend(budget, token_in, token_out)
        unwrapped = self._unwrap(snapshot, token_in)
        inner = self._resolve(
            snapshot, unwrapped.underlying, token_out, remaining, allow_pivot
        )
        price = compose_unwrapped_input(unwrapped, inner)
        if price == 0:
            raise ZeroRateError(f"Price of {token_in} in {token_out} rounds to zero")
        return price

    def _unwrap_output(
        self,
        snapshot: ChainSnapshot,
        token_in: str,
        token_out: str,
        budget: int,
        allow_pivot: bool,
    ) -> int:
        remaining = self._spend(budget, token_in, token_out)
        unwrapped = self._unwrap(snapshot, token_out)
        inner = self._resolve(
            snapshot, token_in, unwrapped.underlying, remaining, allow_pivot
        )
        price = compose_unwrapped_output(unwrapped, inner)
        if price == 0:
            raise ZeroRateError(f"Price of {token_in} in {token_out} rounds to zero")
        return price

    def _via_pivot(
        self,
        snapshot: ChainSnapshot,
        token_in: str,
        pivot: str,
        token_out: str,
        budget: int,
    ) -> int:
        remaining = self._spend(budget, token_in, token_out)
        leg_in = self._resolve(snapshot, token_in, pivot, remaining, allow_pivot=False)
        leg_out = self._resolve(snapshot, pivot, token_out, remaining, allow_pivot=False)
        price = mul_wad(leg_in, leg_out)
        if price == 0:
            raise ZeroRateError(
                f"Price of {token_in} in {token_out} via {pivot} rounds to zero"
            )
        logger.debug("Priced %s -> %s via pivot %s: %d", token_in, token_out, pivot, price)
        return price
