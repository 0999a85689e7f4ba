from __future__ import annotations

from typing import Any, Hashable

import pytest
from web3.exceptions import ContractLogicError

from price_resolver.snapshot import ChainSnapshot


def _key(address: str, function_name: str, args: tuple[Any, ...]) -> Hashable:
    def freeze(value: Any) -> Hashable:
        if isinstance(value, (list, tuple)):
            return tuple(freeze(v) for v in value)
        return value

    return (address.lower(), function_name, freeze(args))


class FakeSnapshot(ChainSnapshot):
    """In-memory chain state keyed by (contract, function, args).

    Unknown reads revert with ContractLogicError, like a call to a contract
    that does not implement the function.
    """

    def __init__(self, decimals: dict[str, int] | None = None, block_identifier: int = 123):
        super().__init__(None, block_identifier, decimals_overrides=decimals)
        self.responses: dict[Hashable, Any] = {}
        self.reads: list[tuple[str, str, tuple[Any, ...]]] = []

    def set(self, address: str, function_name: str, *args: Any, result: Any) -> None:
        self.responses[_key(address, function_name, args)] = result

    def _read(self, address, abi, function_name, args):
        self.reads.append((address, function_name, tuple(args)))
        key = _key(address, function_name, tuple(args))
        if key not in self.responses:
            raise ContractLogicError(f"execution reverted: {function_name}")
        result = self.responses[key]
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def make_snapshot():
    def _make(decimals: dict[str, int] | None = None) -> FakeSnapshot:
        return FakeSnapshot(decimals=decimals)

    return _make
