import pytest

from price_resolver.adapters.rate_readers import (
    OneToOneRateReader,
    VirtualPriceReader,
    get_rate_reader,
)
from price_resolver.domain import RateKind, UnwrapDirection, WrappedAssetLink
from price_resolver.units import WAD

AUSDC = "0xBcca60bB61934080951369a648Fb03DF4F96263C"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
THREE_CRV = "0x6c3F90f043a72FA612cbac8115EE7e52BDe6E490"
THREE_POOL = "0xbEbc44782C7dB0a1A60Cb6fe97d0b483032FF1C7"


def test_one_to_one_reads_nothing(make_snapshot):
    snapshot = make_snapshot()
    link = WrappedAssetLink(wrapped=AUSDC, underlying=USDC, rate_kind=RateKind.ONE_TO_ONE)
    assert OneToOneRateReader().read_rate(snapshot, link) == WAD
    assert snapshot.reads == []


def test_virtual_price_is_read_from_pool(make_snapshot):
    snapshot = make_snapshot()
    snapshot.set(THREE_POOL, "get_virtual_price", result=1_023_000_000_000_000_000)
    link = WrappedAssetLink(
        wrapped=THREE_CRV,
        underlying=USDC,
        rate_kind=RateKind.POOL_VIRTUAL_PRICE,
        rate_source=THREE_POOL,
    )
    assert VirtualPriceReader().read_rate(snapshot, link) == 1_023_000_000_000_000_000


def test_virtual_price_rejects_reverse_direction():
    link = WrappedAssetLink(
        wrapped=THREE_CRV,
        underlying=USDC,
        rate_kind=RateKind.POOL_VIRTUAL_PRICE,
        direction=UnwrapDirection.UNDERLYING_TO_WRAPPED,
        rate_source=THREE_POOL,
    )
    with pytest.raises(ValueError, match="do not support direction"):
        VirtualPriceReader().validate_link(link)


@pytest.mark.parametrize("rate_kind", list(RateKind))
def test_every_rate_kind_has_a_reader(rate_kind):
    assert get_rate_reader(rate_kind).rate_kind == rate_kind


TRICRYPTO_LP = "0xc4AD29ba4B3c580e6D59105FFf484999997675Ff"
TRICRYPTO_POOL = "0xD51a44d3FaE010294C616388b506AcdA1bfAAE46"
USDT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"


def test_crypto_pool_lp_price(make_snapshot):
    snapshot = make_snapshot()
    snapshot.set(TRICRYPTO_POOL, "lp_price", result=1_450_000_000_000_000_000_000)
    link = WrappedAssetLink(
        wrapped=TRICRYPTO_LP,
        underlying=USDT,
        rate_kind=RateKind.POOL_VIRTUAL_PRICE,
        rate_source=TRICRYPTO_POOL,
        rate_function="lp_price",
    )
    reader = VirtualPriceReader()
    reader.validate_link(link)
    assert reader.read_rate(snapshot, link) == 1450 * WAD


def test_pool_price_rejects_unknown_function():
    link = WrappedAssetLink(
        wrapped=TRICRYPTO_LP,
        underlying=USDT,
        rate_kind=RateKind.POOL_VIRTUAL_PRICE,
        rate_source=TRICRYPTO_POOL,
        rate_function="price_oracle",
    )
    with pytest.raises(ValueError, match="Unsupported pool price function"):
        VirtualPriceReader().validate_link(link)
