"""Approval and unwrap call builders."""

from __future__ import annotations

from typing import Any, Sequence

from web3 import Web3

from core.planning.errors import UnsupportedAssetPair
from core.planning.types import Call
from core.settings.config import ERC20_APPROVE_ABI, WRAPPED_NATIVE_ABI

_w3 = Web3()
_erc20 = _w3.eth.contract(abi=ERC20_APPROVE_ABI)
_wrapped_native = _w3.eth.contract(abi=WRAPPED_NATIVE_ABI)


def _encode(contract, fn_name: str, args: Sequence[Any]) -> str:
    if hasattr(contract, "encode_abi"):
        data = contract.encode_abi(fn_name, args=list(args))
    else:
        data = contract.encodeABI(fn_name=fn_name, args=list(args))
    return data if isinstance(data, str) else Web3.to_hex(data)


def build_approve_call(token: str, spender: str, amount: int) -> Call:
    """ERC20 ``approve(spender, amount)`` on ``token``."""
    data = _encode(_erc20, "approve", [Web3.to_checksum_address(spender), int(amount)])
    return Call(target=Web3.to_checksum_address(token), data=data, value=0)


def build_unwrap_call(wrapped_native: str, amount: int) -> Call:
    """``withdraw(amount)`` on the wrapped native token, releasing native value for a swap."""
    data = _encode(_wrapped_native, "withdraw", [int(amount)])
    return Call(target=Web3.to_checksum_address(wrapped_native), data=data, value=0)


def build_spend_calls(
    token: str,
    amount: int,
    approval_target: str,
    *,
    wants_native_in: bool,
    wrapped_native: str | None,
) -> list[Call]:
    """Calls that let a swap spend ``amount`` of ``token``.

    Sources that want native value in get the wrapped token unwrapped instead of
    an approval.
    """
    if wants_native_in:
        if not wrapped_native or token.lower() != wrapped_native.lower():
            raise UnsupportedAssetPair(f"Quote wants native input but {token} is not the wrapped native token")
        return [build_unwrap_call(wrapped_native, amount)]
    return [build_approve_call(token, approval_target, amount)]
