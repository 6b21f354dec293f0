"""Async RPC helpers for leverage manager reads."""

from __future__ import annotations

from typing import Any

from web3 import AsyncWeb3


class RPCError(Exception):
    """Raised when RPC interactions fail."""


class AsyncRPC:
    """Thin wrapper around an async web3 provider."""

    def __init__(self, url: str, timeout: float = 20.0) -> None:
        if not url:
            raise RPCError("RPC url is required")
        self.url = url
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(url, request_kwargs={"timeout": timeout}))

    def contract(self, address: str, abi: list[dict[str, Any]]):
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)
