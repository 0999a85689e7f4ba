from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

ABIS_DIR = Path(__file__).parent / "abis"

ERC20_ABI_PATH = ABIS_DIR / "ERC20.json"
UNISWAP_V2_PAIR_ABI_PATH = ABIS_DIR / "UniswapV2Pair.json"
UNISWAP_V3_POOL_ABI_PATH = ABIS_DIR / "UniswapV3Pool.json"
CURVE_POOL_ABI_PATH = ABIS_DIR / "CurvePool.json"
SYNTHETIX_EXCHANGE_RATES_ABI_PATH = ABIS_DIR / "SynthetixExchangeRates.json"
CTOKEN_ABI_PATH = ABIS_DIR / "CToken.json"
ERC4626_ABI_PATH = ABIS_DIR / "ERC4626.json"
YEARN_VAULT_ABI_PATH = ABIS_DIR / "YearnVault.json"
WSTETH_ABI_PATH = ABIS_DIR / "WstETH.json"


@lru_cache(maxsize=None)
def _load_abi_cached(path: str) -> tuple[dict, ...]:
    with Path(path).open() as f:
        data = json.load(f)
    return tuple(data["abi"])


def load_abi(path: str | Path) -> list[dict]:
    """Load an ABI from a JSON file and return its "abi" field.

    Args:
        path: Path to the JSON file containing an "abi" field.

    Returns:
        ABI as a list of dictionaries.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        KeyError: If the JSON does not contain an "abi" field.
    """
    return list(_load_abi_cached(str(path)))


def load_erc20_abi() -> list[dict]:
    """Load the ERC20 ABI."""
    return load_abi(ERC20_ABI_PATH)


def load_uniswap_v2_pair_abi() -> list[dict]:
    """Load the Uniswap V2 pair ABI (also used for Sushiswap pairs)."""
    return load_abi(UNISWAP_V2_PAIR_ABI_PATH)


def load_uniswap_v3_pool_abi() -> list[dict]:
    return load_abi(UNISWAP_V3_POOL_ABI_PATH)


def load_curve_pool_abi() -> list[dict]:
    """Load the Curve pool ABI (stable-swap and crypto-pool getters)."""
    return load_abi(CURVE_POOL_ABI_PATH)


def load_synthetix_exchange_rates_abi() -> list[dict]:
    return load_abi(SYNTHETIX_EXCHANGE_RATES_ABI_PATH)


def load_ctoken_abi() -> list[dict]:
    """Load the Compound/Cream cToken ABI."""
    return load_abi(CTOKEN_ABI_PATH)


def load_erc4626_abi() -> list[dict]:
    return load_abi(ERC4626_ABI_PATH)


def load_yearn_vault_abi() -> list[dict]:
    """Load the Yearn vault ABI (v1 and v2 share price getters)."""
    return load_abi(YEARN_VAULT_ABI_PATH)


def load_wsteth_abi() -> list[dict]:
    """Load the wstETH ABI."""
    return load_abi(WSTETH_ABI_PATH)
