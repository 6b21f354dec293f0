"""Quote source contract shared by all adapters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from web3 import Web3

from core.models.chain import NATIVE_TOKEN_SENTINEL, ZERO_ADDRESS, is_native_token
from core.planning.slippage import BPS_DENOMINATOR
from core.planning.types import Quote, QuoteRequest


class QuoteError(Exception):
    """Raised when a quote source cannot produce a usable quote."""


@runtime_checkable
class QuoteSource(Protocol):
    name: str
    supports_exact_out: bool

    async def quote(self, request: QuoteRequest) -> Quote: ...


def bps_to_decimal_string(bps: int) -> str:
    """``50`` -> ``"0.005"``, the fractional slippage some APIs expect."""
    whole, remainder = divmod(int(bps), BPS_DENOMINATOR)
    if remainder == 0:
        return str(whole)
    fraction = f"{remainder:04d}".rstrip("0")
    return f"{whole}.{fraction}"


def normalize_token(address: str, *, native_as: str = NATIVE_TOKEN_SENTINEL) -> str:
    if is_native_token(address):
        return native_as
    return Web3.to_checksum_address(address)


def normalize_native_to_zero(address: str) -> str:
    return normalize_token(address, native_as=ZERO_ADDRESS)
