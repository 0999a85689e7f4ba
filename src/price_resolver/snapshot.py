"""Consistent read handle over external chain state."""

from __future__ import annotations

import logging
from typing import Any, Hashable

import requests
from eth_typing import BlockIdentifier
from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    ProviderConnectionError,
)

from .abi import load_erc20_abi
from .errors import PriceTimeoutError, RpcUnavailableError

logger = logging.getLogger(__name__)

# Reads that mean "this source cannot answer right now" rather than a bug.
CHAIN_READ_ERRORS = (BadFunctionCallOutput, ContractLogicError, ValueError)


def _freeze(value: Any) -> Hashable:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


class ChainSnapshot:
    """All reads for one price query, pinned to a single block.

    Every adapter and rate reader receives the snapshot explicitly so that
    prices composed within one resolution are observed at the same state.
    Results are memoized for the lifetime of the snapshot only.
    """

    def __init__(
        self,
        w3: Web3 | None,
        block_identifier: BlockIdentifier,
        decimals_overrides: dict[str, int] | None = None,
    ):
        self.w3 = w3
        self.block_identifier = block_identifier
        self._decimals_overrides = {
            addr.lower(): decimals
            for addr, decimals in (decimals_overrides or {}).items()
        }
        self._memo: dict[Hashable, Any] = {}

    @classmethod
    def pinned(
        cls,
        w3: Web3,
        block_number: int | None = None,
        decimals_overrides: dict[str, int] | None = None,
    ) -> "ChainSnapshot":
        """Create a snapshot at ``block_number`` or at the current head."""
        if block_number is None:
            block_number = w3.eth.block_number
        logger.debug("Pinned chain snapshot at block %s", block_number)
        return cls(w3, block_number, decimals_overrides)

    def call(self, address: str, abi: list[dict], function_name: str, *args: Any) -> Any:
        """Call a view function at the pinned block.

        Raises:
            PriceTimeoutError: If the RPC request times out.
            RpcUnavailableError: If the endpoint cannot be reached.
            web3 exceptions: Reverts and decoding failures propagate to the
                caller, which decides whether to fail closed.
        """
        key = (address.lower(), function_name, _freeze(args))
        if key in self._memo:
            return self._memo[key]

        try:
            result = self._read(address, abi, function_name, args)
        except requests.exceptions.Timeout as e:
            raise PriceTimeoutError(
                f"RPC read {function_name} on {address} timed out at block {self.block_identifier}"
            ) from e
        except (requests.exceptions.RequestException, ProviderConnectionError) as e:
            raise RpcUnavailableError(
                f"RPC read {function_name} on {address} failed at block {self.block_identifier}: {e}"
            ) from e

        self._memo[key] = result
        return result

    def _read(
        self, address: str, abi: list[dict], function_name: str, args: tuple[Any, ...]
    ) -> Any:
        if self.w3 is None:
            raise RuntimeError("ChainSnapshot has no web3 connection")
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(address), abi=abi
        )
        function = contract.get_function_by_name(function_name)
        return function(*args).call(block_identifier=self.block_identifier)

    def decimals(self, asset: str) -> int:
        """Decimal precision of ``asset``, from overrides or ``ERC20.decimals()``."""
        override = self._decimals_overrides.get(asset.lower())
        if override is not None:
            return override
        return int(self.call(asset, load_erc20_abi(), "decimals"))
