"""Blockchain address constants and engine defaults."""

from typing import Optional, TypedDict


class NetworkAssets(TypedDict):
    ETH: Optional[str]
    WETH: Optional[str]
    DAI: Optional[str]
    USDC: Optional[str]
    USDT: Optional[str]
    WBTC: Optional[str]


ETH_ASSET = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

ETH_MAINNET_ASSETS: NetworkAssets = {
    "ETH": ETH_ASSET,
    "WETH": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "DAI": "0x6B175474E89094C44Da98b954EedeAC495271d0F",
    "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "WBTC": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
}

SEPOLIA_ASSETS: NetworkAssets = {
    "ETH": ETH_ASSET,
    "WETH": "0xf531B8F309Be94191af87605CfBf600D71C2cFe0",
    "DAI": None,
    "USDC": "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
    "USDT": None,
    "WBTC": None,
}

BASE_ASSETS: NetworkAssets = {
    "ETH": ETH_ASSET,
    "WETH": "0x4200000000000000000000000000000000000006",
    "DAI": "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb",
    "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    "USDT": "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2",
    "WBTC": None,
}

# Hop order when no venue quotes a pair directly
DEFAULT_PIVOT_SYMBOLS: tuple[str, ...] = ("WETH", "DAI", "USDC", "WBTC")

DEFAULT_MAINNET_RPC_URL = "https://eth.drpc.org"
DEFAULT_SEPOLIA_RPC_URL = "https://sepolia.drpc.org"
DEFAULT_BASE_RPC_URL = "https://mainnet.base.org"

DEFAULT_MAX_DEPTH = 4
MAX_DEPTH_LIMIT = 8
DEFAULT_TWAP_WINDOW_SECONDS = 1800
