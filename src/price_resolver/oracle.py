"""Public price API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from eth_typing import URI
from web3 import Web3

from .adapters import build_venue_adapters
from .constants import ZERO_ADDRESS
from .domain import PriceResult, UnwrapResult
from .errors import (
    DepthExceededError,
    InvalidAssetError,
    NoPathError,
    PriceError,
    PriceTimeoutError,
)
from .registry import PivotSet, UnwrapRegistry
from .resolver import PathResolver
from .settings import ResolverSettings, canonical_address
from .snapshot import ChainSnapshot

logger = logging.getLogger(__name__)

SnapshotFactory = Callable[[], ChainSnapshot]


class PriceOracle:
    """Entry point for consumers needing "1 unit of A in units of B".

    Every price is an ``int`` with 18 decimals. Configuration is fixed at
    construction; build a new oracle to change pivots or priorities.
    """

    def __init__(
        self,
        resolver: PathResolver,
        snapshot_factory: SnapshotFactory,
        aliases: dict[str, str] | None = None,
        batch_max_concurrency: int = 8,
        pair_timeout_seconds: float | None = None,
    ):
        self.resolver = resolver
        self._snapshot_factory = snapshot_factory
        self._aliases = {
            alias.lower(): target for alias, target in (aliases or {}).items()
        }
        self.batch_max_concurrency = batch_max_concurrency
        self.pair_timeout_seconds = pair_timeout_seconds

    @classmethod
    def from_settings(
        cls, settings: ResolverSettings, w3: Web3 | None = None
    ) -> "PriceOracle":
        """Build the engine from settings.

        Raises:
            ValueError: If the venue, link or pivot configuration is invalid.
        """
        resolver = PathResolver(
            adapters=build_venue_adapters(settings.family_priority, settings.venue_list()),
            unwrap_registry=UnwrapRegistry(settings.link_list()),
            pivots=PivotSet(settings.pivot_assets, settings.pivot_blacklist),
            max_depth=settings.max_depth,
        )

        if w3 is None:
            w3 = Web3(
                Web3.HTTPProvider(
                    URI(settings.rpc_url_required),
                    request_kwargs={"timeout": settings.rpc_timeout},
                )
            )
        connection = w3

        def snapshot_factory() -> ChainSnapshot:
            return ChainSnapshot.pinned(
                connection, settings.block_number, settings.asset_decimals
            )

        logger.debug(
            "Price oracle built: families=%s pivots=%d links=%d max_depth=%d",
            resolver.family_order,
            len(resolver.pivots),
            len(resolver.unwrap_registry),
            resolver.max_depth,
        )
        return cls(
            resolver,
            snapshot_factory,
            aliases=settings.alias_map,
            batch_max_concurrency=settings.batch_max_concurrency,
            pair_timeout_seconds=settings.pair_timeout_seconds,
        )

    def canonicalize(self, asset: str) -> str:
        """Return the checksum address ``asset`` stands for.

        Raises:
            InvalidAssetError: If ``asset`` is malformed or the zero address.
        """
        try:
            address = canonical_address(asset)
        except ValueError as e:
            raise InvalidAssetError(f"Invalid asset identifier: {asset!r}") from e
        address = self._aliases.get(address.lower(), address)
        if address == ZERO_ADDRESS:
            raise InvalidAssetError("The zero address is not an asset")
        return address

    def new_snapshot(self) -> ChainSnapshot:
        return self._snapshot_factory()

    def get_price(
        self,
        token_in: str,
        token_out: str,
        snapshot: ChainSnapshot | None = None,
    ) -> int:
        """Price of one ``token_in`` in ``token_out``, 18 decimals.

        Args:
            token_in: Asset being priced.
            token_out: Asset the price is expressed in.
            snapshot: Optional state handle to share across calls; a fresh
                snapshot pinned to one block is used otherwise.

        Raises:
            InvalidAssetError: If either identifier is malformed.
            NoPathError: If no venue, unwrap chain or pivot prices the pair.
            ZeroRateError: If the last candidate had a zero rate.
            DepthExceededError: If the recursion budget was exhausted.
            PriceTimeoutError: If an RPC read timed out.
            RpcUnavailableError: If the RPC endpoint could not be reached.
        """
        canonical_in = self.canonicalize(token_in)
        canonical_out = self.canonicalize(token_out)
        if snapshot is None:
            snapshot = self.new_snapshot()

        try:
            price = self.resolver.resolve(snapshot, canonical_in, canonical_out)
        except DepthExceededError as e:
            logger.warning(
                "Depth budget exhausted pricing %s -> %s; check unwrap and pivot configuration: %s",
                canonical_in,
                canonical_out,
                e,
            )
            raise e.for_pair(canonical_in, canonical_out) from e
        except NoPathError as e:
            logger.info("No price path for %s -> %s", canonical_in, canonical_out)
            raise e.for_pair(canonical_in, canonical_out) from e
        except PriceError as e:
            logger.warning(
                "Pricing %s -> %s failed (%s): %s",
                canonical_in,
                canonical_out,
                e.kind.value,
                e,
            )
            raise e.for_pair(canonical_in, canonical_out) from e

        logger.debug("Price %s -> %s = %d", canonical_in, canonical_out, price)
        return price

    def get_unwrap_rate(
        self, wrapped: str, snapshot: ChainSnapshot | None = None
    ) -> UnwrapResult:
        """Current conversion rate of a wrapped asset into its underlying.

        Raises:
            InvalidAssetError: If ``wrapped`` is malformed or has no link.
            ZeroRateError: If the rate cannot be read.
        """
        asset = self.canonicalize(wrapped)
        if asset not in self.resolver.unwrap_registry:
            raise InvalidAssetError(f"{asset} is not a registered wrapped asset")
        if snapshot is None:
            snapshot = self.new_snapshot()
        unwrapped = self.resolver.unwrap_registry.try_unwrap(snapshot, asset)
        assert unwrapped is not None
        return unwrapped

    async def get_prices(
        self,
        pairs: Sequence[tuple[str, str]],
        snapshot: ChainSnapshot | None = None,
    ) -> list[PriceResult]:
        """Price independent pairs concurrently against one snapshot.

        Results keep the order of ``pairs``; a failed pair carries its error
        instead of a price and never affects the others.
        """
        if not pairs:
            return []
        if snapshot is None:
            snapshot = await asyncio.to_thread(self.new_snapshot)
        shared_snapshot = snapshot

        semaphore = asyncio.Semaphore(self.batch_max_concurrency)
        timeout_s = self.pair_timeout_seconds

        async def _price_pair(token_in: str, token_out: str) -> PriceResult:
            async with semaphore:
                try:
                    if timeout_s is None:
                        price = await asyncio.to_thread(
                            self.get_price, token_in, token_out, shared_snapshot
                        )
                    else:
                        async with asyncio.timeout(timeout_s):
                            price = await asyncio.to_thread(
                                self.get_price, token_in, token_out, shared_snapshot
                            )
                except TimeoutError:
                    logger.warning(
                        "Pricing %s -> %s exceeded %ss", token_in, token_out, timeout_s
                    )
                    return PriceResult(
                        token_in=token_in,
                        token_out=token_out,
                        error=PriceTimeoutError(
                            f"Pricing exceeded {timeout_s}s",
                            token_in=token_in,
                            token_out=token_out,
                        ),
                    )
                except PriceError as e:
                    return PriceResult(token_in=token_in, token_out=token_out, error=e)
                return PriceResult(token_in=token_in, token_out=token_out, price=price)

        results = await asyncio.gather(
            *[_price_pair(token_in, token_out) for token_in, token_out in pairs]
        )
        return list(results)
