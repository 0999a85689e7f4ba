import asyncio
import time

import pytest
import requests

from price_resolver.adapters import build_venue_adapters
from price_resolver.constants import ETH_ASSET, ZERO_ADDRESS
from price_resolver.domain import (
    RateKind,
    UnwrapDirection,
    Venue,
    VenueFamily,
    WrappedAssetLink,
)
from price_resolver.errors import (
    InvalidAssetError,
    NoPathError,
    PriceErrorKind,
    PriceTimeoutError,
    RpcUnavailableError,
)
from price_resolver.oracle import PriceOracle
from price_resolver.registry import PivotSet, UnwrapRegistry
from price_resolver.resolver import PathResolver
from price_resolver.settings import DEFAULT_FAMILY_PRIORITY, ResolverSettings
from price_resolver.units import WAD

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
CDAI = "0x5d3a536E4D6DbD6114cc1Ead35777bAB948E3643"
TOKEN_X = "0x1111111111111111111111111111111111111111"
TOKEN_Y = "0x2222222222222222222222222222222222222222"
UNLISTED = "0x3333333333333333333333333333333333333333"

CURVE_POOL = "0xbEbc44782C7dB0a1A60Cb6fe97d0b483032FF1C7"
X_WETH_PAIR = "0x" + "a1" * 20
WETH_Y_PAIR = "0x" + "b2" * 20


@pytest.fixture
def snapshot(make_snapshot):
    snapshot = make_snapshot(
        {WETH: 18, DAI: 18, USDC: 6, CDAI: 8, TOKEN_X: 18, TOKEN_Y: 18}
    )
    snapshot.set(CURVE_POOL, "get_dy", 0, 1, 10**18, result=1_000_500)
    snapshot.set(X_WETH_PAIR, "token0", result=TOKEN_X)
    snapshot.set(X_WETH_PAIR, "getReserves", result=(10**18, 2000 * 10**18, 0))
    snapshot.set(WETH_Y_PAIR, "token0", result=WETH)
    snapshot.set(WETH_Y_PAIR, "getReserves", result=(1000 * 10**18, 5 * 10**17, 0))
    snapshot.set(CDAI, "exchangeRateStored", result=20015 * 10**22)
    return snapshot


@pytest.fixture
def resolver():
    venues = [
        Venue(family=VenueFamily.STABLE_SWAP, address=CURVE_POOL, assets=(DAI, USDC)),
        Venue(
            family=VenueFamily.CONSTANT_PRODUCT, address=X_WETH_PAIR, assets=(TOKEN_X, WETH)
        ),
        Venue(
            family=VenueFamily.CONSTANT_PRODUCT, address=WETH_Y_PAIR, assets=(WETH, TOKEN_Y)
        ),
    ]
    links = [
        WrappedAssetLink(
            wrapped=CDAI, underlying=DAI, rate_kind=RateKind.EXTERNAL_EXCHANGE_RATE
        )
    ]
    return PathResolver(
        adapters=build_venue_adapters(DEFAULT_FAMILY_PRIORITY, venues),
        unwrap_registry=UnwrapRegistry(links),
        pivots=PivotSet([WETH]),
    )


@pytest.fixture
def oracle(resolver, snapshot):
    return PriceOracle(resolver, lambda: snapshot, aliases={ETH_ASSET: WETH})


def test_canonicalize_is_case_insensitive(oracle):
    assert oracle.canonicalize(DAI.lower()) == DAI
    assert oracle.canonicalize(f"  {USDC.lower()} ") == USDC


def test_canonicalize_applies_aliases(oracle):
    assert oracle.canonicalize(ETH_ASSET) == WETH
    assert oracle.canonicalize(ETH_ASSET.lower()) == WETH


@pytest.mark.parametrize("asset", ["", "DAI", "0x1234", ZERO_ADDRESS])
def test_canonicalize_rejects_invalid_assets(oracle, asset):
    with pytest.raises(InvalidAssetError) as exc_info:
        oracle.canonicalize(asset)
    assert exc_info.value.kind == PriceErrorKind.INVALID_ASSET


def test_get_price_accepts_any_case(oracle):
    assert oracle.get_price(DAI.lower(), USDC.upper().replace("0X", "0x")) == 1_000_500_000_000_000_000


def test_get_price_of_an_asset_in_itself(oracle):
    assert oracle.get_price(DAI, DAI.lower()) == WAD


def test_native_eth_priced_as_weth(oracle):
    assert oracle.get_price(ETH_ASSET, TOKEN_Y) == 5 * 10**14


def test_get_price_through_pivot(oracle):
    assert oracle.get_price(TOKEN_X, TOKEN_Y) == WAD


def test_get_price_errors_carry_the_pair(oracle):
    with pytest.raises(NoPathError) as exc_info:
        oracle.get_price(UNLISTED, USDC.lower())
    error = exc_info.value
    assert error.kind == PriceErrorKind.NO_PATH
    assert error.token_in == UNLISTED
    assert error.token_out == USDC
    assert f"({UNLISTED} -> {USDC})" in str(error)
    assert isinstance(error.__cause__, NoPathError)


def test_get_price_uses_fresh_snapshot_per_call(resolver, snapshot):
    created = []

    def factory():
        created.append(snapshot)
        return snapshot

    oracle = PriceOracle(resolver, factory)
    oracle.get_price(DAI, USDC)
    oracle.get_price(DAI, USDC, snapshot=snapshot)
    assert len(created) == 1


def test_get_unwrap_rate(oracle):
    unwrapped = oracle.get_unwrap_rate(CDAI.lower())
    assert unwrapped.underlying == DAI
    assert unwrapped.rate == 20015 * 10**12
    assert unwrapped.direction == UnwrapDirection.WRAPPED_TO_UNDERLYING


def test_get_unwrap_rate_of_base_asset_is_invalid(oracle):
    with pytest.raises(InvalidAssetError):
        oracle.get_unwrap_rate(DAI)


@pytest.mark.asyncio
async def test_get_prices_keeps_order_and_isolates_failures(oracle):
    pairs = [
        (DAI, USDC),
        (UNLISTED, USDC),
        (TOKEN_X, TOKEN_Y),
        ("not-an-address", USDC),
        (CDAI, USDC),
    ]

    results = await oracle.get_prices(pairs)

    assert [(r.token_in, r.token_out) for r in results] == pairs
    assert results[0].price == 1_000_500_000_000_000_000
    assert not results[1].ok
    assert results[1].error.kind == PriceErrorKind.NO_PATH
    assert results[2].price == WAD
    assert results[3].error.kind == PriceErrorKind.INVALID_ASSET
    assert results[4].price == 20_025_007_500_000_000


@pytest.mark.asyncio
async def test_get_prices_unreachable_rpc_only_fails_its_pair(oracle, snapshot):
    snapshot.set(
        CURVE_POOL,
        "get_dy",
        0,
        1,
        10**18,
        result=requests.exceptions.ConnectionError("connection reset"),
    )

    results = await oracle.get_prices([(TOKEN_X, TOKEN_Y), (DAI, USDC)])

    assert results[0].price == WAD
    assert isinstance(results[1].error, RpcUnavailableError)
    assert results[1].error.kind == PriceErrorKind.RPC_UNAVAILABLE


@pytest.mark.asyncio
async def test_get_prices_shares_one_snapshot(resolver, snapshot):
    created = []

    def factory():
        created.append(snapshot)
        return snapshot

    oracle = PriceOracle(resolver, factory, batch_max_concurrency=2)
    results = await oracle.get_prices([(DAI, USDC)] * 5)

    assert len(created) == 1
    assert all(result.price == 1_000_500_000_000_000_000 for result in results)


@pytest.mark.asyncio
async def test_get_prices_empty_batch(oracle):
    assert await oracle.get_prices([]) == []


@pytest.mark.asyncio
async def test_get_prices_reports_pair_timeouts(resolver, snapshot):
    read = snapshot._read

    def slow_read(*args):
        time.sleep(0.3)
        return read(*args)

    snapshot._read = slow_read
    oracle = PriceOracle(resolver, lambda: snapshot, pair_timeout_seconds=0.05)

    results = await oracle.get_prices([(DAI, USDC), (DAI, DAI)])

    assert isinstance(results[0].error, PriceTimeoutError)
    assert results[0].error.kind == PriceErrorKind.TIMEOUT
    assert results[1].price == WAD
    # let the abandoned read finish before the loop closes
    await asyncio.sleep(0.3)


def test_from_settings_builds_pinned_oracle(tmp_path, monkeypatch):
    monkeypatch.setenv("PRICE_RESOLVER_CONFIG", str(tmp_path / "missing.toml"))
    settings = ResolverSettings(
        rpc_url="http://localhost:8545",
        block_number=19_000_000,
        venues=[
            {
                "family": "stable_swap",
                "address": CURVE_POOL.lower(),
                "assets": [DAI.lower(), USDC.lower()],
            }
        ],
        wrapped_assets=[
            {
                "wrapped": CDAI,
                "underlying": DAI,
                "rate_kind": "external_exchange_rate",
            }
        ],
        asset_decimals={CDAI: 8},
    )

    oracle = PriceOracle.from_settings(settings)

    assert oracle.resolver.family_order == ["stable_swap"]
    assert CDAI in oracle.resolver.unwrap_registry
    assert list(oracle.resolver.pivots)[0] == WETH
    assert oracle.canonicalize(ETH_ASSET) == WETH

    snapshot = oracle.new_snapshot()
    assert snapshot.block_identifier == 19_000_000
    assert snapshot.decimals(CDAI) == 8
