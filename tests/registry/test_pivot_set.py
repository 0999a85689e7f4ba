from price_resolver.registry import PivotSet

WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WBTC = "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599"


def test_keeps_configured_order():
    pivots = PivotSet([WETH, DAI, USDC, WBTC])
    assert list(pivots) == [WETH, DAI, USDC, WBTC]
    assert len(pivots) == 4


def test_drops_duplicates_keeping_first_occurrence():
    pivots = PivotSet([DAI, WETH, DAI.lower(), USDC])
    assert list(pivots) == [DAI, WETH, USDC]


def test_blacklisted_assets_are_never_pivots():
    pivots = PivotSet([WETH, DAI, USDC], blacklist=[DAI.lower()])
    assert DAI not in pivots
    assert list(pivots) == [WETH, USDC]


def test_candidates_skip_the_pair_itself():
    pivots = PivotSet([WETH, DAI, USDC, WBTC])
    assert pivots.candidates(DAI, WBTC) == [WETH, USDC]
    assert pivots.candidates(WETH.lower(), "0x" + "11" * 20) == [DAI, USDC, WBTC]


def test_empty_set():
    pivots = PivotSet([])
    assert list(pivots) == []
    assert pivots.candidates(WETH, DAI) == []
