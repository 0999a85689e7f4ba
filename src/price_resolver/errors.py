"""Price resolution error taxonomy."""

from __future__ import annotations

from enum import Enum


class PriceErrorKind(str, Enum):
    NO_PATH = "no_path"
    ZERO_RATE = "zero_rate"
    DEPTH_EXCEEDED = "depth_exceeded"
    INVALID_ASSET = "invalid_asset"
    TIMEOUT = "timeout"
    RPC_UNAVAILABLE = "rpc_unavailable"


class PriceError(Exception):
    """Base class for every failure the resolver reports to callers.

    Callers branch on ``kind`` (or the subclass) instead of parsing messages.
    """

    kind: PriceErrorKind

    def __init__(
        self,
        message: str,
        token_in: str | None = None,
        token_out: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.token_in = token_in
        self.token_out = token_out

    def for_pair(self, token_in: str, token_out: str) -> "PriceError":
        """Return a copy of this error annotated with the requested pair."""
        error = type(self)(self.message, token_in=token_in, token_out=token_out)
        error.__cause__ = self
        return error

    def __str__(self) -> str:
        if self.token_in is None or self.token_out is None:
            return self.message
        return f"{self.message} ({self.token_in} -> {self.token_out})"


class NoPathError(PriceError):
    """No venue, unwrap chain or pivot combination prices the pair."""

    kind = PriceErrorKind.NO_PATH


class ZeroRateError(PriceError):
    """A venue or unwrap step produced a zero or unreadable rate."""

    kind = PriceErrorKind.ZERO_RATE


class DepthExceededError(PriceError):
    """The recursion budget ran out; usually a configuration problem."""

    kind = PriceErrorKind.DEPTH_EXCEEDED


class InvalidAssetError(PriceError):
    """An asset identifier could not be canonicalized."""

    kind = PriceErrorKind.INVALID_ASSET


class PriceTimeoutError(PriceError):
    """An external read or a whole resolution exceeded its time limit."""

    kind = PriceErrorKind.TIMEOUT


class RpcUnavailableError(PriceError):
    """The chain endpoint could not be reached or refused the request."""

    kind = PriceErrorKind.RPC_UNAVAILABLE
