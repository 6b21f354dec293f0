"""Integer slippage and mul/div helpers.

All helpers operate on Python ints and never touch floats, so results match
on-chain integer math bit for bit.
"""

from __future__ import annotations

from core.planning.errors import DivisionByZero, InvalidParameter

BPS_DENOMINATOR = 10_000


def mul_div_floor(a: int, b: int, d: int) -> int:
    """Return ``floor(a * b / d)``."""
    if d == 0:
        raise DivisionByZero("mul_div_floor denominator is zero")
    return (a * b) // d


def mul_div_ceil(a: int, b: int, d: int) -> int:
    """Return ``ceil(a * b / d)``."""
    if d == 0:
        raise DivisionByZero("mul_div_ceil denominator is zero")
    return -((-a * b) // d)


def validate_bps(name: str, bps: int, minimum: int = 0) -> int:
    if isinstance(bps, bool) or not isinstance(bps, int):
        raise InvalidParameter(f"{name} must be an integer number of basis points")
    if bps < minimum:
        if minimum == 0:
            raise InvalidParameter(f"{name} must be non-negative, got {bps}")
        raise InvalidParameter(f"{name} must be at least {minimum} bps, got {bps}")
    return bps


def apply_slippage_floor(value: int, slippage_bps: int) -> int:
    """Return the minimum acceptable amount after ``slippage_bps`` of slippage.

    Slippage above 100% floors to zero rather than going negative.
    """
    validate_bps("slippage_bps", slippage_bps)
    if slippage_bps >= BPS_DENOMINATOR:
        return 0
    return mul_div_floor(value, BPS_DENOMINATOR - slippage_bps, BPS_DENOMINATOR)


def apply_slippage_ceiling(value: int, slippage_bps: int) -> int:
    """Return the maximum acceptable amount after ``slippage_bps`` of headroom.

    Rounds up so the bound never falls below the exact inflated amount.
    """
    validate_bps("slippage_bps", slippage_bps)
    return mul_div_ceil(value, BPS_DENOMINATOR + slippage_bps, BPS_DENOMINATOR)
