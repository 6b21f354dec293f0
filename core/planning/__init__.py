"""Leverage token mint/redeem planning engine."""

from core.planning.errors import (
    DivisionByZero,
    FlashLoanTooLarge,
    InsufficientLiquidity,
    InvalidParameter,
    PlanningError,
    SlippageViolated,
    UnsupportedAssetPair,
)
from core.planning.mint import plan_mint
from core.planning.redeem import plan_redeem
from core.planning.types import (
    Call,
    Direction,
    MintPlan,
    PositionIntent,
    PreviewSnapshot,
    Quote,
    QuoteIntent,
    QuoteRequest,
    RedeemPlan,
    SwapKind,
)

__all__ = [
    "Call",
    "Direction",
    "DivisionByZero",
    "FlashLoanTooLarge",
    "InsufficientLiquidity",
    "InvalidParameter",
    "MintPlan",
    "PlanningError",
    "PositionIntent",
    "PreviewSnapshot",
    "Quote",
    "QuoteIntent",
    "QuoteRequest",
    "RedeemPlan",
    "SlippageViolated",
    "SwapKind",
    "UnsupportedAssetPair",
    "plan_mint",
    "plan_redeem",
]
