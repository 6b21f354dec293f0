"""Typed planning failures.

Every failure carries a ``hint`` with the action the caller can take to make
the next planning attempt succeed.
"""

from __future__ import annotations


class PlanningError(Exception):
    """Base class for planning failures."""

    default_hint = ""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint if hint is not None else self.default_hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}. {self.hint}"
        return self.message


class InvalidParameter(PlanningError, ValueError):
    """Raised before any I/O for out-of-domain inputs."""


class DivisionByZero(PlanningError, ZeroDivisionError):
    """Raised by integer mul/div helpers on a zero denominator."""


class UnsupportedAssetPair(PlanningError):
    """Input asset cannot be routed into the collateral asset."""


class InsufficientLiquidity(PlanningError):
    """A quote cannot cover the amount the position requires."""


class FlashLoanTooLarge(PlanningError):
    """Manager previewed debt cannot repay the flash loan."""

    default_hint = "Try increasing the flash loan adjustment"


class SlippageViolated(PlanningError):
    """Worst-case outcome falls below the caller's slippage floor."""
