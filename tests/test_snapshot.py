from types import SimpleNamespace

import pytest
import requests
from web3.exceptions import ContractLogicError, ProviderConnectionError

from price_resolver.errors import PriceTimeoutError, RpcUnavailableError
from price_resolver.snapshot import ChainSnapshot

DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
POOL = "0xbEbc44782C7dB0a1A60Cb6fe97d0b483032FF1C7"


def test_reads_are_memoized_per_snapshot(make_snapshot):
    snapshot = make_snapshot()
    snapshot.set(POOL, "get_dy", 0, 1, 10**18, result=1_000_500)

    assert snapshot.call(POOL, [], "get_dy", 0, 1, 10**18) == 1_000_500
    assert snapshot.call(POOL.lower(), [], "get_dy", 0, 1, 10**18) == 1_000_500
    assert len(snapshot.reads) == 1

    other = make_snapshot()
    other.set(POOL, "get_dy", 0, 1, 10**18, result=1_000_400)
    assert other.call(POOL, [], "get_dy", 0, 1, 10**18) == 1_000_400


def test_reverts_are_not_memoized(make_snapshot):
    snapshot = make_snapshot()
    with pytest.raises(ContractLogicError):
        snapshot.call(POOL, [], "balances", 0)
    snapshot.set(POOL, "balances", 0, result=5)
    assert snapshot.call(POOL, [], "balances", 0) == 5


def test_rpc_timeout_becomes_price_timeout(make_snapshot):
    snapshot = make_snapshot()
    snapshot.set(POOL, "get_virtual_price", result=requests.exceptions.ReadTimeout())
    with pytest.raises(PriceTimeoutError, match="timed out at block 123"):
        snapshot.call(POOL, [], "get_virtual_price")


@pytest.mark.parametrize(
    "failure",
    [
        requests.exceptions.ConnectionError("connection reset"),
        requests.exceptions.HTTPError("502 Bad Gateway"),
        ProviderConnectionError("endpoint down"),
    ],
)
def test_transport_failures_become_rpc_unavailable(make_snapshot, failure):
    snapshot = make_snapshot()
    snapshot.set(POOL, "get_virtual_price", result=failure)
    with pytest.raises(RpcUnavailableError, match="failed at block 123"):
        snapshot.call(POOL, [], "get_virtual_price")


def test_decimals_prefer_overrides(make_snapshot):
    snapshot = make_snapshot({USDC.lower(): 6})
    snapshot.set(DAI, "decimals", result=18)
    assert snapshot.decimals(USDC) == 6
    assert snapshot.decimals(DAI) == 18
    assert snapshot.reads == [(DAI, "decimals", ())]


def test_pinned_reads_latest_block_once():
    w3 = SimpleNamespace(eth=SimpleNamespace(block_number=21_000_000))
    snapshot = ChainSnapshot.pinned(w3)
    assert snapshot.block_identifier == 21_000_000
    assert ChainSnapshot.pinned(w3, block_number=5).block_identifier == 5


def test_snapshot_without_connection_cannot_read():
    snapshot = ChainSnapshot(None, "latest")
    with pytest.raises(RuntimeError):
        snapshot.call(POOL, [], "get_virtual_price")
